from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .enums import BK, BP, BR, WK, WP, WR, CastlingRights, Color, Piece
from .errors import MalformedPosition
from .move import square_from_str, square_to_str
from .geometry import NO_SQUARE


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_CHARS = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)

# right -> (king board, king home, rook board, rook home)
CASTLING_HOMES = {
    CastlingRights.WHITE_KINGSIDE: (WK, 4, WR, 7),
    CastlingRights.WHITE_QUEENSIDE: (WK, 4, WR, 0),
    CastlingRights.BLACK_KINGSIDE: (BK, 60, BR, 63),
    CastlingRights.BLACK_QUEENSIDE: (BK, 60, BR, 56),
}


@dataclass
class PositionDescription:
    """Decoded fields of a position description (FEN)."""

    boards: List[int] = field(default_factory=lambda: [0] * 12)
    side_to_move: Color = Color.WHITE
    castling: CastlingRights = CastlingRights.NONE
    ep_square: Optional[int] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1


def parse_fen(fen: str) -> PositionDescription:
    """Decode a Forsyth–Edwards Notation (FEN) string.

    Args:
        fen (str): FEN string describing the position to load.

    Returns:
        PositionDescription: Decoded board, side to move, rights, en passant
            target and move counters.

    Raises:
        MalformedPosition: If ``fen`` is empty, has the wrong number of
            fields, or contains invalid piece placement, side to move,
            castling rights, en passant square, or move counters.

    Notes:
        Castling rights whose king and rook are not on their home squares are
        dropped. A fullmove number of 0 is floored to 1. An en passant square
        must sit behind a pawn that could just have double-pushed.
    """
    if not fen or not isinstance(fen, str):
        raise MalformedPosition("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) != 6:
        raise MalformedPosition("FEN must have 6 fields")
    placement, stm, castling, ep, halfmove, fullmove = parts

    # Parse piece placement
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise MalformedPosition("FEN board must have 8 ranks")
    boards = [0] * 12
    for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
        file_idx = 0
        for ch in rank:
            if ch in "12345678":
                file_idx += int(ch)
            elif ch.isdigit():
                raise MalformedPosition("invalid empty count in FEN rank")
            else:
                try:
                    piece = Piece.from_symbol(ch)
                except ValueError:
                    raise MalformedPosition(f"invalid piece in FEN: {ch!r}") from None
                if file_idx >= 8:
                    raise MalformedPosition("too many squares in FEN rank")
                boards[piece] |= 1 << (rank_idx * 8 + file_idx)
                file_idx += 1
            if file_idx > 8:
                raise MalformedPosition("too many squares in FEN rank")
        if file_idx != 8:
            raise MalformedPosition("rank does not sum to 8 squares in FEN")

    # Side to move
    if stm not in ("w", "b"):
        raise MalformedPosition("side to move must be 'w' or 'b'")
    side = Color.WHITE if stm == "w" else Color.BLACK

    # Castling rights
    rights = CastlingRights.NONE
    if castling != "-":
        for ch in castling:
            if ch not in "KQkq":
                raise MalformedPosition("invalid castling rights")
        for ch, right in _CASTLING_CHARS:
            if ch in castling:
                rights |= right
    rights = _honored_rights(boards, rights)

    # En passant square
    ep_square: Optional[int] = None
    if ep != "-":
        ep_square = square_from_str(ep)
        if ep_square == NO_SQUARE:
            raise MalformedPosition("invalid en passant square")
        expected_rank = 5 if side is Color.WHITE else 2
        if ep_square // 8 != expected_rank:
            raise MalformedPosition("invalid en passant square rank")
        _check_double_push(boards, side, ep_square)

    # Halfmove / fullmove: plain ASCII digits only
    for counter in (halfmove, fullmove):
        if not (counter.isascii() and counter.isdigit()):
            raise MalformedPosition("invalid move counters in FEN")
    halfmove_clock = int(halfmove)
    fullmove_number = int(fullmove)

    return PositionDescription(
        boards=boards,
        side_to_move=side,
        castling=rights,
        ep_square=ep_square,
        halfmove_clock=halfmove_clock,
        fullmove_number=max(1, fullmove_number),
    )


def _check_double_push(boards: List[int], side: Color, ep_square: int) -> None:
    """Require the pawn that just double-pushed past ``ep_square`` to be on the board.

    The target and the pawn's origin square must be empty.
    """
    if side is Color.WHITE:
        pawn, landed, origin = BP, ep_square - 8, ep_square + 8
    else:
        pawn, landed, origin = WP, ep_square + 8, ep_square - 8
    occupied = 0
    for bb in boards:
        occupied |= bb
    if (occupied >> ep_square) & 1 or (occupied >> origin) & 1:
        raise MalformedPosition("en passant square or pawn origin is occupied")
    if not (boards[pawn] >> landed) & 1:
        raise MalformedPosition("no pawn behind the en passant square")


def _honored_rights(boards: List[int], rights: CastlingRights) -> CastlingRights:
    for right, (king, king_sq, rook, rook_sq) in CASTLING_HOMES.items():
        if rights & right:
            if not ((boards[king] >> king_sq) & 1 and (boards[rook] >> rook_sq) & 1):
                rights &= ~right
    return rights


def format_fen(desc: PositionDescription) -> str:
    """Serialize decoded position fields into a normalized FEN string."""
    ranks_str: List[str] = []
    for rank_idx in range(7, -1, -1):  # 7..0 maps to ranks 8..1
        run = 0
        row = []
        for file_idx in range(8):
            sq = rank_idx * 8 + file_idx
            ch = _piece_char_at(desc.boards, sq)
            if ch is None:
                run += 1
            else:
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(ch)
        if run > 0:
            row.append(str(run))
        ranks_str.append("".join(row))
    placement = "/".join(ranks_str)

    castling = "".join(ch for ch, right in _CASTLING_CHARS if desc.castling & right) or "-"
    ep = square_to_str(desc.ep_square) if desc.ep_square is not None else "-"
    return (
        f"{placement} {desc.side_to_move.fen_char} {castling} {ep} "
        f"{desc.halfmove_clock} {desc.fullmove_number}"
    )


def _piece_char_at(boards: List[int], sq: int) -> Optional[str]:
    for piece in Piece:
        if piece is Piece.EMPTY:
            break
        if (boards[piece] >> sq) & 1:
            return piece.symbol
    return None
