from __future__ import annotations

import pytest

from chessrules.engine.fen import STARTPOS_FEN
from chessrules.engine.perft import divide, perft
from chessrules.engine.position import Position


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


@pytest.mark.parametrize(
    ("depth", "expected"),
    [
        (0, 1),
        (1, 20),
        (2, 400),
        (3, 8902),
    ],
)
def test_startpos_perft(depth: int, expected: int) -> None:
    pos = Position.from_fen(STARTPOS_FEN)
    assert perft(pos, depth) == expected


def test_perft_kiwipete_depth_2() -> None:
    pos = Position.from_fen(KIWIPETE)
    assert perft(pos, 1) == 48
    assert perft(pos, 2) == 2039


@pytest.mark.parametrize(
    ("fen", "depth", "expected"),
    [
        # Pins and en passant along a rank
        ("8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1", 1, 14),
        ("8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1", 2, 191),
        ("8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1", 3, 2812),
        # Promotions, checks and castling rights lost to captures
        ("r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1", 1, 6),
        ("r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1", 2, 264),
    ],
)
def test_perft_reference_positions(fen: str, depth: int, expected: int) -> None:
    assert perft(Position.from_fen(fen), depth) == expected


def test_divide_sums_to_perft() -> None:
    pos = Position()
    counts = divide(pos, 2)
    assert len(counts) == 20
    assert all(n == 20 for n in counts.values())
    assert sum(counts.values()) == perft(pos, 2)


def test_perft_does_not_mutate_root() -> None:
    pos = Position.from_fen(KIWIPETE)
    perft(pos, 2)
    assert pos.to_fen() == KIWIPETE
    assert len(pos.history) == 1


def test_perft_is_zero_below_finished_game() -> None:
    pos = Position.from_fen("k5rr/8/8/8/8/8/7p/7K w - - 0 1")
    assert perft(pos, 1) == 0
    with pytest.raises(ValueError):
        perft(pos, -1)
