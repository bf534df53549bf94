"""Core enumerations and flags for the rules engine."""

from __future__ import annotations

from enum import Enum, IntEnum, IntFlag, auto
from typing import Optional


class Color(IntEnum):
    """Side color."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> "Color":
        return Color(1 - self.value)

    @property
    def fen_char(self) -> str:
        return "w" if self is Color.WHITE else "b"

    def __str__(self) -> str:
        return self.name.lower()


class Piece(IntEnum):
    """Colored piece kinds; values index the 12 piece bitboards."""

    WHITE_PAWN = 0
    WHITE_KNIGHT = 1
    WHITE_BISHOP = 2
    WHITE_ROOK = 3
    WHITE_QUEEN = 4
    WHITE_KING = 5
    BLACK_PAWN = 6
    BLACK_KNIGHT = 7
    BLACK_BISHOP = 8
    BLACK_ROOK = 9
    BLACK_QUEEN = 10
    BLACK_KING = 11
    EMPTY = 12

    @property
    def color(self) -> Optional[Color]:
        if self is Piece.EMPTY:
            return None
        return Color.WHITE if self.value < 6 else Color.BLACK

    @property
    def symbol(self) -> str:
        """FEN character (uppercase = white, lowercase = black, '.' = empty)."""
        return _SYMBOLS[self.value]

    @property
    def is_pawn(self) -> bool:
        return self in (Piece.WHITE_PAWN, Piece.BLACK_PAWN)

    @property
    def is_king(self) -> bool:
        return self in (Piece.WHITE_KING, Piece.BLACK_KING)

    @classmethod
    def from_symbol(cls, char: str) -> "Piece":
        """Create a piece from its FEN character, e.g. 'N' -> white knight."""
        idx = _SYMBOLS.find(char)
        if len(char) != 1 or idx < 0 or idx == cls.EMPTY.value:
            raise ValueError(f"invalid piece character: {char!r}")
        return cls(idx)

    @classmethod
    def of(cls, color: Color, kind: str) -> "Piece":
        """Return ``color``'s piece for a lowercase kind letter ('p', 'n', ...)."""
        idx = "pnbrqk".find(kind)
        if len(kind) != 1 or idx < 0:
            raise ValueError(f"invalid piece kind: {kind!r}")
        return cls(idx + 6 * int(color))


_SYMBOLS = "PNBRQKpnbrqk."

# Short names in bitboard order
WP, WN, WB, WR, WQ, WK = (Piece(i) for i in range(6))
BP, BN, BB, BR, BQ, BK = (Piece(i) for i in range(6, 12))
WHITE_PIECES = (WP, WN, WB, WR, WQ, WK)
BLACK_PIECES = (BP, BN, BB, BR, BQ, BK)


class CastlingRights(IntFlag):
    """Bitmask for castling availability."""

    NONE = 0
    WHITE_KINGSIDE = auto()
    WHITE_QUEENSIDE = auto()
    BLACK_KINGSIDE = auto()
    BLACK_QUEENSIDE = auto()

    WHITE_BOTH = WHITE_KINGSIDE | WHITE_QUEENSIDE
    BLACK_BOTH = BLACK_KINGSIDE | BLACK_QUEENSIDE
    ALL = WHITE_BOTH | BLACK_BOTH


class GameResult(Enum):
    """Outcome of a game."""

    ONGOING = "ongoing"
    WHITE_WINS = "white_wins"
    BLACK_WINS = "black_wins"
    DRAW = "draw"


class Termination(Enum):
    """Reason a game reached a terminal result."""

    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    THREEFOLD_REPETITION = "threefold_repetition"
    FIFTY_MOVES = "fifty_moves"
    RESIGNATION = "resignation"
    AGREEMENT = "agreement"
