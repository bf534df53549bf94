from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import GameResult, Piece, Termination
from .geometry import NO_SQUARE


PROMOTION_PIECES = {"q", "r", "b", "n"}


@dataclass(frozen=True)
class Move:
    """Engine-level move request.

    Attributes:
        from_sq (int): Origin square index (0-based).
        to_sq (int): Destination square index (0-based).
        promotion (Optional[str]): Lowercase promotion piece, if any.
    """

    from_sq: int
    to_sq: int
    promotion: Optional[str] = None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + (self.promotion or "")


@dataclass(frozen=True)
class MoveOutcome:
    """What a completed move did and the state it left behind.

    ``check`` refers to the side now to move.
    """

    from_sq: int
    to_sq: int
    piece: Piece
    captured: Optional[Piece]
    promotion: Optional[Piece]
    castling: bool
    en_passant: bool
    check: bool
    result: GameResult
    termination: Optional[Termination]

    def to_uci(self) -> str:
        promo = self.promotion.symbol.lower() if self.promotion is not None else None
        return Move(self.from_sq, self.to_sq, promo).to_uci()


def parse_uci(uci: str) -> Move:
    """Parse a UCI move string.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = str_to_square(uci[0:2])
    to_sq = str_to_square(uci[2:4])
    promo: Optional[str] = None
    if len(uci) == 5:
        promo = uci[4].lower()
        if promo not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {promo!r}")
    return Move(from_sq, to_sq, promo)


def square_from_str(s: str) -> int:
    """Convert square notation into an index, ``NO_SQUARE`` when invalid.

    File letters are case-insensitive: ``"E4"`` and ``"e4"`` both give 28.
    """
    s = s.strip().lower()
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        return NO_SQUARE
    return (int(s[1]) - 1) * 8 + (ord(s[0]) - ord("a"))


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Zero-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    sq = square_from_str(s)
    if sq == NO_SQUARE:
        raise ValueError(f"invalid square: {s!r}")
    return sq


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Args:
        idx (int): Square index in range 0..63.

    Returns:
        str: Algebraic notation for ``idx``.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    file = idx % 8
    rank = idx // 8
    return chr(ord("a") + file) + str(rank + 1)
