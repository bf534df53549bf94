from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .attacks import (
    bishop_attacks,
    is_attacked,
    king_attacks,
    knight_attacks,
    pawn_attacks,
    pawn_moves,
    queen_attacks,
    rook_attacks,
    side_attacks,
)
from .enums import (
    BK,
    BLACK_PIECES,
    BP,
    WHITE_PIECES,
    WK,
    WP,
    CastlingRights,
    Color,
    GameResult,
    Piece,
    Termination,
)
from .errors import (
    GameAlreadyOver,
    IllegalDestination,
    InvalidPromotionChoice,
    InvalidSquare,
    NoLegalMoves,
    NoPieceAtSource,
    PendingPromotionChoice,
    WrongSideToMove,
)
from .fen import STARTPOS_FEN, PositionDescription, format_fen, parse_fen
from .geometry import bit_count, flip_vertical, iter_squares, rank_of
from .history import PositionHistory, Snapshot
from .move import Move, MoveOutcome, square_to_str


logger = logging.getLogger(__name__)


# right -> (king from, king to, rook from, rook to, squares between king and rook, transit square)
_CASTLES: Dict[CastlingRights, Tuple[int, int, int, int, int, int]] = {
    CastlingRights.WHITE_KINGSIDE: (4, 6, 7, 5, (1 << 5) | (1 << 6), 5),
    CastlingRights.WHITE_QUEENSIDE: (4, 2, 0, 3, (1 << 1) | (1 << 2) | (1 << 3), 3),
    CastlingRights.BLACK_KINGSIDE: (60, 62, 63, 61, (1 << 61) | (1 << 62), 61),
    CastlingRights.BLACK_QUEENSIDE: (60, 58, 56, 59, (1 << 57) | (1 << 58) | (1 << 59), 59),
}
_SIDE_RIGHTS = {
    Color.WHITE: (CastlingRights.WHITE_KINGSIDE, CastlingRights.WHITE_QUEENSIDE),
    Color.BLACK: (CastlingRights.BLACK_KINGSIDE, CastlingRights.BLACK_QUEENSIDE),
}
_ROOK_HOME_RIGHT = {
    0: CastlingRights.WHITE_QUEENSIDE,
    7: CastlingRights.WHITE_KINGSIDE,
    56: CastlingRights.BLACK_QUEENSIDE,
    63: CastlingRights.BLACK_KINGSIDE,
}
_MIRRORED_RIGHTS = (
    (CastlingRights.WHITE_KINGSIDE, CastlingRights.BLACK_KINGSIDE),
    (CastlingRights.WHITE_QUEENSIDE, CastlingRights.BLACK_QUEENSIDE),
    (CastlingRights.BLACK_KINGSIDE, CastlingRights.WHITE_KINGSIDE),
    (CastlingRights.BLACK_QUEENSIDE, CastlingRights.WHITE_QUEENSIDE),
)


class Position:
    """Mutable chess position built on 12 piece bitboards.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - The derived occupancy boards are recomputed after every mutation and
      never written on their own.
    - Legality is decided by simulating a move on hypothetical occupancies and
      asking the attack generator whether the mover's king would be attacked;
      the real boards are never touched by a query.
    """

    def __init__(self, fen: str = STARTPOS_FEN) -> None:
        self._history = PositionHistory()
        self.load(fen)

    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        """Create a position from a FEN string.

        Raises:
            MalformedPosition: If ``fen`` is not a valid position description.
        """
        return cls(fen)

    @classmethod
    def from_description(cls, desc: PositionDescription) -> "Position":
        pos = cls.__new__(cls)
        pos._history = PositionHistory()
        pos._load_description(desc)
        return pos

    # --- Lifecycle ---
    def reset(self) -> None:
        """Return to the standard starting position with an empty history."""
        self.load(STARTPOS_FEN)

    def load(self, fen: str) -> None:
        """Replace the whole state with the position described by ``fen``.

        The position is left untouched when ``fen`` is malformed.
        """
        self._load_description(parse_fen(fen))

    def _load_description(self, desc: PositionDescription) -> None:
        self._bb: List[int] = list(desc.boards)
        self._side_to_move = desc.side_to_move
        self._castling_rights = desc.castling
        self._en_passant_target = desc.ep_square
        self._halfmove_clock = desc.halfmove_clock
        self._fullmove_number = max(1, desc.fullmove_number)
        self._game_result = GameResult.ONGOING
        self._termination: Optional[Termination] = None
        self._update_occupancy()
        self._history.clear()
        self._history.append(self._snapshot())

        stm = self._side_to_move
        if not self.has_legal_moves(stm):
            if self.is_in_check(stm):
                self._finish(_winner(stm.opposite), Termination.CHECKMATE)
            else:
                self._finish(GameResult.DRAW, Termination.STALEMATE)
        elif self._halfmove_clock >= 100:
            self._finish(GameResult.DRAW, Termination.FIFTY_MOVES)

    def _update_occupancy(self) -> None:
        white = 0
        for p in WHITE_PIECES:
            white |= self._bb[p]
        black = 0
        for p in BLACK_PIECES:
            black |= self._bb[p]
        self._white = white
        self._black = black
        self._occupied = white | black

    def copy(self) -> "Position":
        """Return an independent copy including history and result."""
        pos = Position.__new__(Position)
        pos._bb = list(self._bb)
        pos._side_to_move = self._side_to_move
        pos._castling_rights = self._castling_rights
        pos._en_passant_target = self._en_passant_target
        pos._halfmove_clock = self._halfmove_clock
        pos._fullmove_number = self._fullmove_number
        pos._game_result = self._game_result
        pos._termination = self._termination
        pos._history = self._history.copy()
        pos._update_occupancy()
        return pos

    def mirrored(self) -> "Position":
        """Return a new position with colors swapped and ranks flipped."""
        boards = [0] * 12
        for p in range(12):
            boards[(p + 6) % 12] = flip_vertical(self._bb[p])
        rights = CastlingRights.NONE
        for src, dst in _MIRRORED_RIGHTS:
            if self._castling_rights & src:
                rights |= dst
        ep = self._en_passant_target ^ 56 if self._en_passant_target is not None else None
        return Position.from_description(
            PositionDescription(
                boards=boards,
                side_to_move=self._side_to_move.opposite,
                castling=rights,
                ep_square=ep,
                halfmove_clock=self._halfmove_clock,
                fullmove_number=self._fullmove_number,
            )
        )

    def to_fen(self) -> str:
        """Serialize the current position into a normalized FEN string."""
        return format_fen(self._description())

    def _description(self) -> PositionDescription:
        return PositionDescription(
            boards=list(self._bb),
            side_to_move=self._side_to_move,
            castling=self._castling_rights,
            ep_square=self._en_passant_target,
            halfmove_clock=self._halfmove_clock,
            fullmove_number=self._fullmove_number,
        )

    # --- Read-only accessors ---
    @property
    def boards(self) -> Tuple[int, ...]:
        return tuple(self._bb)

    @property
    def white(self) -> int:
        return self._white

    @property
    def black(self) -> int:
        return self._black

    @property
    def occupied(self) -> int:
        return self._occupied

    @property
    def side_to_move(self) -> Color:
        return self._side_to_move

    @property
    def castling_rights(self) -> CastlingRights:
        return self._castling_rights

    @property
    def en_passant_target(self) -> Optional[int]:
        return self._en_passant_target

    @property
    def halfmove_clock(self) -> int:
        return self._halfmove_clock

    @property
    def fullmove_number(self) -> int:
        return self._fullmove_number

    @property
    def game_result(self) -> GameResult:
        return self._game_result

    @property
    def termination(self) -> Optional[Termination]:
        return self._termination

    @property
    def is_game_over(self) -> bool:
        return self._game_result is not GameResult.ONGOING

    @property
    def history(self) -> PositionHistory:
        return self._history

    @property
    def in_check(self) -> bool:
        """Whether the side to move is in check."""
        return self.is_in_check(self._side_to_move)

    def __repr__(self) -> str:
        return f"Position({self.to_fen()!r})"

    # --- Queries ---
    def piece_at(self, square: int) -> Piece:
        """Return the piece on ``square`` or ``Piece.EMPTY``."""
        _check_square(square)
        for p in range(12):
            if (self._bb[p] >> square) & 1:
                return Piece(p)
        return Piece.EMPTY

    def side_attacks(
        self, color: Color, white_occ: Optional[int] = None, black_occ: Optional[int] = None
    ) -> int:
        """Return every square ``color`` attacks, optionally under replaced occupancies."""
        return side_attacks(
            self._bb,
            color,
            self._white if white_occ is None else white_occ,
            self._black if black_occ is None else black_occ,
        )

    def is_in_check(self, color: Color) -> bool:
        king = self._bb[WK if color is Color.WHITE else BK]
        return bool(self.side_attacks(color.opposite) & king)

    def is_checkmate(self, color: Color) -> bool:
        return self.is_in_check(color) and not self.has_legal_moves(color)

    def is_stalemate(self, color: Color) -> bool:
        """Whether ``color`` is to move, not in check, and has no legal move."""
        if color is not self._side_to_move or self.is_in_check(color):
            return False
        return not self.has_legal_moves(color)

    def has_legal_moves(self, color: Color) -> bool:
        own = self._white if color is Color.WHITE else self._black
        return any(self.legal_destinations(sq) for sq in iter_squares(own))

    def count_legal_moves(self) -> int:
        """Return the number of legal (from, to) pairs for the side to move."""
        own = self._white if self._side_to_move is Color.WHITE else self._black
        return sum(bit_count(self.legal_destinations(sq)) for sq in iter_squares(own))

    def legal_destinations(self, square: int) -> int:
        """Return the bitboard of legal destinations for the piece on ``square``.

        Args:
            square (int): Origin square index.

        Returns:
            int: Bitboard of destinations; 0 for an empty square.

        Raises:
            InvalidSquare: If ``square`` is outside 0..63.

        Notes:
            Each pseudo-legal destination is kept only if the mover's king is
            safe on the hypothetical occupancy after the move. King moves also
            add castling destinations, which must pass the stricter
            not-through-check test.
        """
        piece = self.piece_at(square)
        if piece is Piece.EMPTY:
            return 0
        legal = 0
        for to_sq in iter_squares(self._pseudo_destinations(square, piece)):
            if self._king_safe_after(piece, square, to_sq):
                legal |= 1 << to_sq
        if piece.is_king:
            legal |= self._castling_destinations(piece.color)
        return legal

    def legal_destination_names(self, square: int) -> List[str]:
        return [square_to_str(sq) for sq in iter_squares(self.legal_destinations(square))]

    def generate_legal_moves(self) -> List[Move]:
        """Return every legal move for the side to move.

        Promotions are expanded into one move per promotion piece.
        """
        moves: List[Move] = []
        own = self._white if self._side_to_move is Color.WHITE else self._black
        for from_sq in iter_squares(own):
            piece = self.piece_at(from_sq)
            for to_sq in iter_squares(self.legal_destinations(from_sq)):
                if self._is_promotion(piece, to_sq):
                    for promo in ("q", "r", "b", "n"):
                        moves.append(Move(from_sq, to_sq, promo))
                else:
                    moves.append(Move(from_sq, to_sq))
        return moves

    def needs_promotion(self, from_sq: int, to_sq: int) -> bool:
        """Whether moving ``from_sq`` -> ``to_sq`` is legal and requires a promotion choice."""
        _check_square(to_sq)
        piece = self.piece_at(from_sq)
        if not self._is_promotion(piece, to_sq):
            return False
        return bool((self.legal_destinations(from_sq) >> to_sq) & 1)

    def is_en_passant_capturable(self) -> bool:
        """Whether a pawn of the side to move can legally capture en passant now."""
        ep = self._en_passant_target
        if ep is None:
            return False
        stm = self._side_to_move
        pawns = self._bb[WP if stm is Color.WHITE else BP]
        # Squares from which a side-to-move pawn would attack the target.
        origins = pawn_attacks(1 << ep, pawns, stm.opposite)
        return any((self.legal_destinations(sq) >> ep) & 1 for sq in iter_squares(origins))

    def repetition_count(self) -> int:
        """Return how often the current position occurs in the history."""
        last = self._history.last()
        if last is None:
            return 0
        return self._history.count(last)

    # --- Legality helpers ---
    def _pseudo_destinations(self, square: int, piece: Piece) -> int:
        color = piece.color
        bit = 1 << square
        if color is Color.WHITE:
            own, enemy = self._white, self._black
        else:
            own, enemy = self._black, self._white
        kind = piece % 6
        if kind == 0:
            ep = 0
            if self._en_passant_target is not None and color is self._side_to_move:
                ep = 1 << self._en_passant_target
            return pawn_moves(bit, self._occupied, enemy | ep, color)
        if kind == 1:
            return knight_attacks(bit, own)
        if kind == 2:
            return bishop_attacks(bit, self._occupied, enemy)
        if kind == 3:
            return rook_attacks(bit, self._occupied, enemy)
        if kind == 4:
            return queen_attacks(bit, self._occupied, enemy)
        return king_attacks(bit, own)

    def _king_safe_after(self, piece: Piece, from_sq: int, to_sq: int) -> bool:
        """Return True if ``piece`` moving ``from_sq`` -> ``to_sq`` leaves its king unattacked."""
        color = piece.color
        from_bb = 1 << from_sq
        to_bb = 1 << to_sq
        if color is Color.WHITE:
            own, enemy = self._white, self._black
        else:
            own, enemy = self._black, self._white

        captured_bb = to_bb
        if self._is_en_passant(piece, from_sq, to_sq):
            captured_bb = 1 << (to_sq - 8 if color is Color.WHITE else to_sq + 8)

        new_own = (own & ~from_bb) | to_bb
        new_enemy = enemy & ~captured_bb
        king = to_bb if piece.is_king else self._bb[WK if color is Color.WHITE else BK]
        if color is Color.WHITE:
            return not is_attacked(king, Color.BLACK, self._bb, new_own, new_enemy)
        return not is_attacked(king, Color.WHITE, self._bb, new_enemy, new_own)

    def _castling_destinations(self, color: Color) -> int:
        dests = 0
        if self.is_in_check(color):
            return 0
        king_piece = WK if color is Color.WHITE else BK
        rook_piece = Piece(king_piece - 2)
        for right in _SIDE_RIGHTS[color]:
            if not self._castling_rights & right:
                continue
            king_from, king_to, rook_from, _rook_to, between, transit = _CASTLES[right]
            if not ((self._bb[king_piece] >> king_from) & 1 and (self._bb[rook_piece] >> rook_from) & 1):
                continue
            if self._occupied & between:
                continue
            if not self._king_safe_after(king_piece, king_from, transit):
                continue
            if not self._king_safe_after(king_piece, king_from, king_to):
                continue
            dests |= 1 << king_to
        return dests

    def _is_en_passant(self, piece: Piece, from_sq: int, to_sq: int) -> bool:
        return (
            piece.is_pawn
            and piece.color is self._side_to_move
            and self._en_passant_target == to_sq
            and (to_sq - from_sq) % 8 != 0
        )

    @staticmethod
    def _is_promotion(piece: Piece, to_sq: int) -> bool:
        if not piece.is_pawn:
            return False
        return rank_of(to_sq) == (7 if piece.color is Color.WHITE else 0)

    # --- Mutation ---
    def move(self, from_sq: int, to_sq: int) -> MoveOutcome:
        """Move the piece on ``from_sq`` to ``to_sq``.

        Raises:
            GameAlreadyOver: The game already has a result.
            NoPieceAtSource: ``from_sq`` is empty.
            NoLegalMoves: The piece has no legal destination.
            IllegalDestination: ``to_sq`` is not a legal destination.
            WrongSideToMove: The piece belongs to the side not to move.
            PendingPromotionChoice: The pawn reaches the last rank; resubmit
                through ``promote``.
        """
        return self._play(from_sq, to_sq, None)

    def promote(self, from_sq: int, to_sq: int, piece: Piece) -> MoveOutcome:
        """Move a pawn to its last rank and replace it with ``piece``.

        Raises:
            InvalidPromotionChoice: ``piece`` is a pawn, king, empty, of the
                wrong color, or the move is not a promotion.
            MoveError: Any of the errors ``move`` raises.
        """
        return self._play(from_sq, to_sq, piece)

    def apply_move(self, move: Move) -> MoveOutcome:
        """Play a ``Move`` (as parsed from UCI text)."""
        if move.promotion is None:
            return self.move(move.from_sq, move.to_sq)
        mover = self.piece_at(move.from_sq).color
        if mover is None:
            mover = self._side_to_move
        return self.promote(move.from_sq, move.to_sq, Piece.of(mover, move.promotion))

    def resign(self, color: Color) -> None:
        """End the game with ``color`` resigning."""
        if self.is_game_over:
            raise GameAlreadyOver("game is already over")
        self._finish(_winner(color.opposite), Termination.RESIGNATION)

    def agree_draw(self) -> None:
        if self.is_game_over:
            raise GameAlreadyOver("game is already over")
        self._finish(GameResult.DRAW, Termination.AGREEMENT)

    def _play(self, from_sq: int, to_sq: int, promotion: Optional[Piece]) -> MoveOutcome:
        _check_square(from_sq)
        _check_square(to_sq)
        if self.is_game_over:
            raise GameAlreadyOver("game is already over")
        piece = self.piece_at(from_sq)
        if piece is Piece.EMPTY:
            raise NoPieceAtSource(f"no piece on {square_to_str(from_sq)}")
        legal = self.legal_destinations(from_sq)
        if not legal:
            raise NoLegalMoves(f"piece on {square_to_str(from_sq)} has no legal moves")
        if not (legal >> to_sq) & 1:
            raise IllegalDestination(
                f"{square_to_str(from_sq)} cannot move to {square_to_str(to_sq)}"
            )
        color = piece.color
        if color is not self._side_to_move:
            raise WrongSideToMove(f"it is {self._side_to_move}'s turn")

        is_promotion = self._is_promotion(piece, to_sq)
        if promotion is None and is_promotion:
            raise PendingPromotionChoice(
                f"{square_to_str(from_sq)}{square_to_str(to_sq)} needs a promotion piece"
            )
        if promotion is not None:
            if not is_promotion:
                raise InvalidPromotionChoice("move is not a promotion")
            if promotion is Piece.EMPTY or promotion.is_pawn or promotion.is_king:
                raise InvalidPromotionChoice(f"cannot promote to {promotion.name.lower()}")
            if promotion.color is not color:
                raise InvalidPromotionChoice("promotion piece must match the mover's color")

        return self._apply(piece, from_sq, to_sq, promotion)

    def _apply(
        self, piece: Piece, from_sq: int, to_sq: int, promotion: Optional[Piece]
    ) -> MoveOutcome:
        color = piece.color
        from_bb = 1 << from_sq
        to_bb = 1 << to_sq

        # Determine capture (including en passant)
        captured: Optional[Piece] = None
        en_passant = self._is_en_passant(piece, from_sq, to_sq)
        if en_passant:
            captured = BP if color is Color.WHITE else WP
            cap_sq = to_sq - 8 if color is Color.WHITE else to_sq + 8
            self._bb[captured] &= ~(1 << cap_sq)
        else:
            target = self.piece_at(to_sq)
            if target is not Piece.EMPTY:
                captured = target

        # One piece per square: clear both squares on every board, then place.
        for p in range(12):
            self._bb[p] &= ~(from_bb | to_bb)
        self._bb[promotion if promotion is not None else piece] |= to_bb

        castling = False
        if piece.is_king:
            for right in _SIDE_RIGHTS[color]:
                king_from, king_to, rook_from, rook_to, _between, _transit = _CASTLES[right]
                if from_sq == king_from and to_sq == king_to and self._castling_rights & right:
                    rook = Piece(piece - 2)
                    self._bb[rook] &= ~(1 << rook_from)
                    self._bb[rook] |= 1 << rook_to
                    castling = True

        # Clear en passant by default; set only on double pawn pushes
        self._en_passant_target = None
        if piece.is_pawn and abs(to_sq - from_sq) == 16:
            self._en_passant_target = (from_sq + to_sq) // 2

        if piece.is_pawn or captured is not None:
            self._halfmove_clock = 0
        else:
            self._halfmove_clock += 1
        if color is Color.BLACK:
            self._fullmove_number += 1

        self._revoke_castling_rights(piece, from_sq, to_sq)
        self._update_occupancy()
        self._side_to_move = color.opposite
        self._history.append(self._snapshot())
        self._evaluate_terminal(color)

        check = self.is_in_check(self._side_to_move)
        outcome = MoveOutcome(
            from_sq=from_sq,
            to_sq=to_sq,
            piece=piece,
            captured=captured,
            promotion=promotion,
            castling=castling,
            en_passant=en_passant,
            check=check,
            result=self._game_result,
            termination=self._termination,
        )
        logger.debug(
            "move",
            extra={
                "move": outcome.to_uci(),
                "captured": captured.symbol if captured is not None else None,
                "check": check,
            },
        )
        return outcome

    def _revoke_castling_rights(self, piece: Piece, from_sq: int, to_sq: int) -> None:
        """Drop rights when a king moves or anything leaves or lands on a rook home square."""
        rights = self._castling_rights
        if piece is WK:
            rights &= ~CastlingRights.WHITE_BOTH
        elif piece is BK:
            rights &= ~CastlingRights.BLACK_BOTH
        for sq in (from_sq, to_sq):
            right = _ROOK_HOME_RIGHT.get(sq)
            if right is not None:
                rights &= ~right
        self._castling_rights = rights

    def _evaluate_terminal(self, mover: Color) -> None:
        to_move = mover.opposite
        if not self.has_legal_moves(to_move):
            if self.is_in_check(to_move):
                self._finish(_winner(mover), Termination.CHECKMATE)
            else:
                self._finish(GameResult.DRAW, Termination.STALEMATE)
        elif self.repetition_count() >= 3:
            self._finish(GameResult.DRAW, Termination.THREEFOLD_REPETITION)
        elif self._halfmove_clock >= 100:
            self._finish(GameResult.DRAW, Termination.FIFTY_MOVES)

    def _finish(self, result: GameResult, termination: Termination) -> None:
        self._game_result = result
        self._termination = termination
        logger.info(
            "game over",
            extra={"result": result.value, "termination": termination.value},
        )

    def _snapshot(self) -> Snapshot:
        return Snapshot(
            boards=tuple(self._bb),
            side_to_move=self._side_to_move,
            castling=self._castling_rights,
            ep_capturable=self.is_en_passant_capturable(),
        )


def _winner(color: Color) -> GameResult:
    return GameResult.WHITE_WINS if color is Color.WHITE else GameResult.BLACK_WINS


def _check_square(square: int) -> None:
    if not isinstance(square, int) or not 0 <= square < 64:
        raise InvalidSquare(f"square out of range: {square!r}")
