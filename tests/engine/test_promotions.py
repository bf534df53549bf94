from __future__ import annotations

from typing import Iterable, Set

import pytest

from chessrules.engine.enums import BN, BQ, WK, WN, WP, WQ, WR, Piece
from chessrules.engine.errors import (
    InvalidPromotionChoice,
    PendingPromotionChoice,
    WrongSideToMove,
)
from chessrules.engine.move import Move, parse_uci, str_to_square
from chessrules.engine.position import Position


PROMO_FEN = "k7/4P3/8/8/8/8/8/4K3 w - - 0 1"


def sq(name: str) -> int:
    return str_to_square(name)


def _uci_set(moves: Iterable[Move]) -> Set[str]:
    return set(m.to_uci() for m in moves)


def test_white_pawn_push_promotions() -> None:
    pos = Position.from_fen(PROMO_FEN)
    assert _uci_set(pos.generate_legal_moves()) >= {"e7e8q", "e7e8r", "e7e8b", "e7e8n"}
    # One (from, to) pair, four generated moves.
    assert pos.count_legal_moves() == 5 + 1
    assert len(pos.generate_legal_moves()) == 5 + 4


def test_white_pawn_capture_promotion() -> None:
    pos = Position.from_fen("3rk3/4P3/8/8/8/8/8/4K3 w - - 0 1")
    assert _uci_set(pos.generate_legal_moves()) >= {"e7d8q", "e7d8r", "e7d8b", "e7d8n"}


def test_black_pawn_push_promotions() -> None:
    pos = Position.from_fen("4k3/8/8/8/8/8/3p4/6K1 b - - 0 1")
    assert _uci_set(pos.generate_legal_moves()) >= {"d2d1q", "d2d1r", "d2d1b", "d2d1n"}


def test_move_to_last_rank_requires_choice() -> None:
    pos = Position.from_fen(PROMO_FEN)
    assert pos.needs_promotion(sq("e7"), sq("e8"))
    assert not pos.needs_promotion(sq("e1"), sq("e2"))
    with pytest.raises(PendingPromotionChoice):
        pos.move(sq("e7"), sq("e8"))
    assert pos.to_fen() == PROMO_FEN
    assert len(pos.history) == 1


def test_promote_to_queen() -> None:
    pos = Position.from_fen(PROMO_FEN)
    outcome = pos.promote(sq("e7"), sq("e8"), WQ)
    assert outcome.piece is WP
    assert outcome.promotion is WQ
    assert outcome.check
    assert outcome.to_uci() == "e7e8q"
    assert pos.piece_at(sq("e8")) is WQ
    assert pos.piece_at(sq("e7")) is Piece.EMPTY
    assert pos.halfmove_clock == 0


def test_underpromotion() -> None:
    pos = Position.from_fen(PROMO_FEN)
    pos.promote(sq("e7"), sq("e8"), WN)
    assert pos.piece_at(sq("e8")) is WN


@pytest.mark.parametrize("choice", [BQ, WK, WP, Piece.EMPTY])
def test_invalid_promotion_choice(choice: Piece) -> None:
    pos = Position.from_fen(PROMO_FEN)
    with pytest.raises(InvalidPromotionChoice):
        pos.promote(sq("e7"), sq("e8"), choice)
    assert pos.to_fen() == PROMO_FEN


def test_promote_on_non_promotion_move_rejected() -> None:
    pos = Position.from_fen(PROMO_FEN)
    with pytest.raises(InvalidPromotionChoice):
        pos.promote(sq("e1"), sq("e2"), WQ)
    assert pos.piece_at(sq("e1")) is WK


def test_black_capture_promotion() -> None:
    pos = Position.from_fen("4k3/8/8/8/8/8/3p4/2R3K1 b - - 0 1")
    outcome = pos.promote(sq("d2"), sq("c1"), BN)
    assert outcome.captured is WR
    assert pos.piece_at(sq("c1")) is BN
    assert pos.fullmove_number == 2
    assert pos.halfmove_clock == 0


def test_apply_move_with_promotion_letter() -> None:
    pos = Position.from_fen(PROMO_FEN)
    pos.apply_move(parse_uci("e7e8r"))
    assert pos.piece_at(sq("e8")) is WR


def test_apply_move_promotion_for_side_not_to_move() -> None:
    pos = Position.from_fen("k7/4P3/8/8/8/8/8/4K3 b - - 0 1")
    with pytest.raises(WrongSideToMove):
        pos.apply_move(parse_uci("e7e8q"))
    assert pos.piece_at(sq("e7")) is WP
