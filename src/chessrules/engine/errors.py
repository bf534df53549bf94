from __future__ import annotations


class ChessError(ValueError):
    """Base class for recoverable rules-engine errors.

    Every subclass carries a stable ``code`` string for protocol layers.
    """

    code = "chess_error"


class InvalidSquare(ChessError):
    code = "invalid_square"


class MalformedPosition(ChessError):
    code = "malformed_position"


class MoveError(ChessError):
    """A move or promotion request was rejected; the position is unchanged."""

    code = "move_error"


class GameAlreadyOver(MoveError):
    code = "game_already_over"


class NoPieceAtSource(MoveError):
    code = "no_piece_at_source"


class NoLegalMoves(MoveError):
    code = "no_legal_moves"


class IllegalDestination(MoveError):
    code = "illegal_destination"


class WrongSideToMove(MoveError):
    code = "wrong_side_to_move"


class PendingPromotionChoice(MoveError):
    """The move reaches the last rank; resubmit it through ``promote``."""

    code = "pending_promotion_choice"


class InvalidPromotionChoice(MoveError):
    code = "invalid_promotion_choice"
