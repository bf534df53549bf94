from __future__ import annotations

import pytest

from chessrules.engine.enums import BR, WK, WR, CastlingRights, Piece
from chessrules.engine.errors import IllegalDestination
from chessrules.engine.move import str_to_square
from chessrules.engine.position import Position


def sq(name: str) -> int:
    return str_to_square(name)


def test_castle_kingside_allowed_queenside_through_attack_rejected() -> None:
    pos = Position.from_fen("r3k2r/pppp1ppp/4p2b/8/8/B2P4/PPP1PPPP/R3K2R w KQkq - 0 1")
    before = pos.to_fen()
    with pytest.raises(IllegalDestination):
        pos.move(sq("e1"), sq("c1"))
    assert pos.to_fen() == before

    outcome = pos.move(sq("e1"), sq("g1"))
    assert outcome.castling
    assert pos.piece_at(sq("g1")) is WK
    assert pos.piece_at(sq("f1")) is WR
    assert pos.piece_at(sq("h1")) is Piece.EMPTY
    assert pos.piece_at(sq("e1")) is Piece.EMPTY
    assert not pos.castling_rights & CastlingRights.WHITE_BOTH
    assert pos.castling_rights & CastlingRights.BLACK_BOTH == CastlingRights.BLACK_BOTH


def test_castle_queenside_moves_rook_to_d_file() -> None:
    pos = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    outcome = pos.move(sq("e8"), sq("c8"))
    assert outcome.castling
    assert pos.piece_at(sq("d8")) is BR
    assert pos.piece_at(sq("a8")) is Piece.EMPTY
    assert pos.to_fen() == "2kr3r/8/8/8/8/8/8/R3K2R w KQ - 1 2"


def test_cannot_castle_through_attacked_transit_square() -> None:
    pos = Position.from_fen("r3kr2/8/8/8/8/8/8/R3K2R w KQq - 0 1")
    castles = pos.legal_destinations(sq("e1")) & ((1 << sq("g1")) | (1 << sq("c1")))
    assert castles == 1 << sq("c1")


def test_attacked_b_file_square_does_not_block_queenside() -> None:
    pos = Position.from_fen("1r2k3/8/8/8/8/8/8/R3K3 w Q - 0 1")
    outcome = pos.move(sq("e1"), sq("c1"))
    assert outcome.castling
    assert pos.piece_at(sq("d1")) is WR


def test_cannot_castle_out_of_check() -> None:
    pos = Position.from_fen("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert pos.in_check
    dests = pos.legal_destinations(sq("e1"))
    assert not dests & ((1 << sq("g1")) | (1 << sq("c1")))


def test_cannot_castle_with_piece_between() -> None:
    pos = Position.from_fen("4k3/8/8/8/8/8/8/RN2K1NR w KQ - 0 1")
    dests = pos.legal_destinations(sq("e1"))
    assert not dests & ((1 << sq("g1")) | (1 << sq("c1")))


def test_rook_moves_and_captures_revoke_rights() -> None:
    pos = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    pos.move(sq("h1"), sq("h2"))
    assert pos.castling_rights == (
        CastlingRights.WHITE_QUEENSIDE | CastlingRights.BLACK_BOTH
    )
    # Black rook captures the a1 rook: both queenside rights are gone.
    pos.move(sq("a8"), sq("a1"))
    assert pos.castling_rights == CastlingRights.BLACK_KINGSIDE
    assert pos.in_check
    pos.move(sq("e1"), sq("e2"))
    assert pos.to_fen().split()[2] == "k"


def test_king_move_revokes_both_rights() -> None:
    pos = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    pos.move(sq("e1"), sq("f1"))
    pos.move(sq("a8"), sq("b8"))
    pos.move(sq("f1"), sq("e1"))
    assert pos.castling_rights == CastlingRights.BLACK_KINGSIDE
    assert not pos.legal_destinations(sq("e1")) & (1 << sq("g1"))
