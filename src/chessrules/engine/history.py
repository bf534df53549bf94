from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .enums import CastlingRights, Color


@dataclass(frozen=True)
class Snapshot:
    """Compact position key used for repetition detection.

    Two snapshots are the same position when the 12 piece boards, the side to
    move, the castling rights and en passant capturability all match. An en
    passant target that no pawn can legally capture into does not count.
    """

    boards: Tuple[int, ...]
    side_to_move: Color
    castling: CastlingRights
    ep_capturable: bool


class PositionHistory:
    """Append-only log of snapshots, one per completed move."""

    def __init__(self) -> None:
        self._entries: List[Snapshot] = []

    def append(self, snapshot: Snapshot) -> None:
        self._entries.append(snapshot)

    def count(self, snapshot: Snapshot) -> int:
        """Return how many times ``snapshot`` occurs in the log."""
        return sum(1 for s in self._entries if s == snapshot)

    def last(self) -> Optional[Snapshot]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def copy(self) -> "PositionHistory":
        h = PositionHistory()
        h._entries = list(self._entries)
        return h

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._entries)
