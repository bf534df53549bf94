from __future__ import annotations

from typing import Iterator, List


# Bitboards are plain ints; squares are 0..63 (a1=0 .. h8=63), rank-major.
MASK64 = 0xFFFFFFFFFFFFFFFF

# Reserved out-of-range square meaning "no square".
NO_SQUARE = 64

_RANK_1 = 0xFF
_FILE_A = 0x0101010101010101

MASK_RANK: List[int] = [_RANK_1 << (8 * r) for r in range(8)]
CLEAR_RANK: List[int] = [~m & MASK64 for m in MASK_RANK]
MASK_FILE: List[int] = [_FILE_A << f for f in range(8)]
# Zero out a file before shifting so a piece on h does not wrap onto a (and vice versa).
CLEAR_FILE: List[int] = [~m & MASK64 for m in MASK_FILE]
SQUARE_BB: List[int] = [1 << sq for sq in range(64)]


def bit_scan(bb: int) -> int:
    """Return the index of the single set bit in ``bb``.

    Args:
        bb (int): Bitboard with exactly one bit set.

    Returns:
        int: Square index 0..63, or ``NO_SQUARE`` when ``bb`` is empty or has
            more than one bit set.
    """
    if bb <= 0 or bb & (bb - 1):
        return NO_SQUARE
    return bb.bit_length() - 1


def bit_count(bb: int) -> int:
    """Return the number of set bits in ``bb``."""
    return bb.bit_count()


def iter_squares(bb: int) -> Iterator[int]:
    """Yield the indices of the set bits of ``bb`` in ascending order."""
    while bb:
        lsb = bb & -bb
        yield lsb.bit_length() - 1
        bb ^= lsb


def flip_vertical(bb: int) -> int:
    """Mirror ``bb`` across the middle of the board (rank 1 <-> rank 8)."""
    return int.from_bytes((bb & MASK64).to_bytes(8, "little"), "big")


def file_of(sq: int) -> int:
    return sq % 8


def rank_of(sq: int) -> int:
    return sq // 8
