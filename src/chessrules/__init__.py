"""Chess rules engine on bitboards.

Quick start::

    from chessrules import Position, square_from_str

    pos = Position()
    pos.move(square_from_str("e2"), square_from_str("e4"))
    print(pos.count_legal_moves())
"""

from .engine.enums import CastlingRights, Color, GameResult, Piece, Termination
from .engine.errors import (
    ChessError,
    GameAlreadyOver,
    IllegalDestination,
    InvalidPromotionChoice,
    InvalidSquare,
    MalformedPosition,
    MoveError,
    NoLegalMoves,
    NoPieceAtSource,
    PendingPromotionChoice,
    WrongSideToMove,
)
from .engine.fen import STARTPOS_FEN
from .engine.geometry import NO_SQUARE
from .engine.move import Move, MoveOutcome, parse_uci, square_from_str, square_to_str
from .engine.perft import perft
from .engine.position import Position

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "GameResult",
    "Piece",
    "Termination",
    # Errors
    "ChessError",
    "GameAlreadyOver",
    "IllegalDestination",
    "InvalidPromotionChoice",
    "InvalidSquare",
    "MalformedPosition",
    "MoveError",
    "NoLegalMoves",
    "NoPieceAtSource",
    "PendingPromotionChoice",
    "WrongSideToMove",
    # Domain objects
    "Move",
    "MoveOutcome",
    "Position",
    # Helpers
    "NO_SQUARE",
    "STARTPOS_FEN",
    "parse_uci",
    "perft",
    "square_from_str",
    "square_to_str",
]
