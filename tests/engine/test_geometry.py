from __future__ import annotations

import pytest

from chessrules.engine.geometry import (
    CLEAR_FILE,
    CLEAR_RANK,
    MASK64,
    MASK_FILE,
    MASK_RANK,
    NO_SQUARE,
    SQUARE_BB,
    bit_count,
    bit_scan,
    flip_vertical,
    file_of,
    iter_squares,
    rank_of,
)
from chessrules.engine.move import square_from_str, square_to_str, str_to_square


def test_bit_scan_finds_every_square() -> None:
    for i in range(64):
        assert bit_scan(1 << i) == i


@pytest.mark.parametrize("bb", [0, 0b11, (1 << 63) | 1])
def test_bit_scan_sentinel_on_empty_or_multi_bit(bb: int) -> None:
    assert bit_scan(bb) == NO_SQUARE


def test_rank_and_file_masks() -> None:
    assert MASK_RANK[0] == 0xFF
    assert MASK_RANK[7] == 0xFF << 56
    assert (MASK_FILE[7] >> 7) & 1 and (MASK_FILE[7] >> 63) & 1
    assert not MASK_FILE[7] & 1
    for f in range(8):
        assert CLEAR_FILE[f] & MASK_FILE[f] == 0
        assert CLEAR_FILE[f] | MASK_FILE[f] == MASK64
        assert bit_count(MASK_FILE[f]) == 8
    assert SQUARE_BB[28] == 1 << 28
    assert CLEAR_RANK[0] == MASK64 ^ 0xFF
    assert file_of(28) == 4 and rank_of(28) == 3


def test_iter_squares_ascending() -> None:
    assert list(iter_squares(0b1010)) == [1, 3]
    assert list(iter_squares(0)) == []


def test_flip_vertical() -> None:
    assert flip_vertical(1) == 1 << 56
    assert flip_vertical(MASK_RANK[1]) == MASK_RANK[6]
    assert flip_vertical(flip_vertical(0x123456789ABCDEF0)) == 0x123456789ABCDEF0


def test_square_notation() -> None:
    assert square_from_str("a1") == 0
    assert square_from_str("E4") == 28
    assert square_from_str("h8") == 63
    assert square_to_str(28) == "e4"


@pytest.mark.parametrize("text", ["", "e", "e9", "i1", "z9", "e44"])
def test_invalid_square_notation_maps_to_sentinel(text: str) -> None:
    assert square_from_str(text) == NO_SQUARE
    with pytest.raises(ValueError):
        str_to_square(text)


def test_square_to_str_rejects_out_of_range() -> None:
    with pytest.raises(ValueError):
        square_to_str(64)
    with pytest.raises(ValueError):
        square_to_str(-1)
