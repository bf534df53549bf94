"""Stateless attack generation over bitboards.

All functions take plain ints (own/enemy/all occupancy) rather than a
``Position`` so they can be re-evaluated against hypothetical occupancies
while filtering moves that would leave a king in check. Every function
accepts bitboards with several bits set and returns the union.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .enums import BLACK_PIECES, WHITE_PIECES, Color
from .geometry import CLEAR_FILE, MASK64, MASK_RANK, file_of, iter_squares, rank_of


Direction = Tuple[int, int]  # (file delta, rank delta)

BISHOP_DIRECTIONS: Tuple[Direction, ...] = ((-1, -1), (1, -1), (-1, 1), (1, 1))
ROOK_DIRECTIONS: Tuple[Direction, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRECTIONS: Tuple[Direction, ...] = BISHOP_DIRECTIONS + ROOK_DIRECTIONS

_NOT_A = CLEAR_FILE[0]
_NOT_B = CLEAR_FILE[1]
_NOT_G = CLEAR_FILE[6]
_NOT_H = CLEAR_FILE[7]


def king_attacks(king: int, own_occ: int) -> int:
    """Return the squares adjacent to ``king`` that are not occupied by own pieces.

    Spots::

        1 2 3
        8 K 4
        7 6 5
    """
    clip_a = king & _NOT_A
    clip_h = king & _NOT_H
    moves = (
        (clip_a << 7)
        | (king << 8)
        | (clip_h << 9)
        | (clip_h << 1)
        | (clip_h >> 7)
        | (king >> 8)
        | (clip_a >> 9)
        | (clip_a >> 1)
    )
    return moves & ~own_occ & MASK64


def knight_attacks(knight: int, own_occ: int) -> int:
    """Return the knight-offset squares from ``knight`` minus own pieces.

    Each offset is clipped against the one or two files it must not cross.
    """
    moves = (
        ((knight & _NOT_A & _NOT_B) << 6)
        | ((knight & _NOT_A) << 15)
        | ((knight & _NOT_H) << 17)
        | ((knight & _NOT_G & _NOT_H) << 10)
        | ((knight & _NOT_G & _NOT_H) >> 6)
        | ((knight & _NOT_H) >> 15)
        | ((knight & _NOT_A) >> 17)
        | ((knight & _NOT_A & _NOT_B) >> 10)
    )
    return moves & ~own_occ & MASK64


def pawn_attacks(pawn: int, enemy_occ: int, color: Color) -> int:
    """Return the diagonal capture squares of ``pawn`` that hold an enemy piece."""
    if color is Color.WHITE:
        spots = ((pawn & _NOT_A) << 7) | ((pawn & _NOT_H) << 9)
    else:
        spots = ((pawn & _NOT_A) >> 9) | ((pawn & _NOT_H) >> 7)
    return spots & enemy_occ & MASK64


def pawn_moves(pawn: int, all_occ: int, enemy_occ: int, color: Color) -> int:
    """Return pushes and captures for ``pawn``.

    Args:
        pawn (int): Pawn bitboard.
        all_occ (int): Occupancy of both sides.
        enemy_occ (int): Enemy occupancy, with the en passant target OR-ed in
            when the pawn may capture en passant.
        color (Color): Color of the pawn.

    Returns:
        int: Single push, double push from the home rank (both squares
            empty) and diagonal captures.
    """
    empty = ~all_occ & MASK64
    if color is Color.WHITE:
        one = (pawn << 8) & empty
        two = ((one & MASK_RANK[2]) << 8) & empty
    else:
        one = (pawn >> 8) & empty
        two = ((one & MASK_RANK[5]) >> 8) & empty
    return one | two | pawn_attacks(pawn, enemy_occ, color)


def sliding_attacks(
    piece: int, directions: Sequence[Direction], all_occ: int, enemy_occ: int
) -> int:
    """Walk each ray away from ``piece`` until blocked.

    The blocking square is included only when it holds an enemy piece.
    """
    attacks = 0
    for sq in iter_squares(piece):
        f, r = file_of(sq), rank_of(sq)
        for df, dr in directions:
            tf, tr = f, r
            while True:
                tf += df
                tr += dr
                if not (0 <= tf < 8 and 0 <= tr < 8):
                    break
                b = 1 << (tr * 8 + tf)
                if all_occ & b:
                    if enemy_occ & b:
                        attacks |= b
                    break
                attacks |= b
    return attacks


def bishop_attacks(bishop: int, all_occ: int, enemy_occ: int) -> int:
    return sliding_attacks(bishop, BISHOP_DIRECTIONS, all_occ, enemy_occ)


def rook_attacks(rook: int, all_occ: int, enemy_occ: int) -> int:
    return sliding_attacks(rook, ROOK_DIRECTIONS, all_occ, enemy_occ)


def queen_attacks(queen: int, all_occ: int, enemy_occ: int) -> int:
    return sliding_attacks(queen, QUEEN_DIRECTIONS, all_occ, enemy_occ)


def _occupancies(
    boards: Sequence[int], white_occ: Optional[int], black_occ: Optional[int]
) -> Tuple[int, int]:
    if white_occ is None:
        white_occ = 0
        for p in WHITE_PIECES:
            white_occ |= boards[p]
    if black_occ is None:
        black_occ = 0
        for p in BLACK_PIECES:
            black_occ |= boards[p]
    return white_occ, black_occ


def side_attacks(
    boards: Sequence[int],
    color: Color,
    white_occ: Optional[int] = None,
    black_occ: Optional[int] = None,
) -> int:
    """Return every square attacked by ``color``.

    Args:
        boards (Sequence[int]): The 12 piece bitboards indexed by ``Piece``.
        color (Color): Attacking side.
        white_occ (Optional[int]): Replacement white occupancy.
        black_occ (Optional[int]): Replacement black occupancy.

    Returns:
        int: Union of the attack sets of all of ``color``'s pieces.

    Notes:
        The attacker's piece boards are masked with its (possibly replaced)
        occupancy, so a piece removed from the override no longer attacks.
    """
    white_occ, black_occ = _occupancies(boards, white_occ, black_occ)
    all_occ = white_occ | black_occ
    if color is Color.WHITE:
        own, enemy, kinds = white_occ, black_occ, WHITE_PIECES
    else:
        own, enemy, kinds = black_occ, white_occ, BLACK_PIECES
    pawns, knights, bishops, rooks, queens, kings = (boards[p] & own for p in kinds)
    return (
        pawn_attacks(pawns, enemy, color)
        | knight_attacks(knights, own)
        | bishop_attacks(bishops | queens, all_occ, enemy)
        | rook_attacks(rooks | queens, all_occ, enemy)
        | king_attacks(kings, own)
    )


def is_attacked(
    target: int,
    by_color: Color,
    boards: Sequence[int],
    white_occ: Optional[int] = None,
    black_occ: Optional[int] = None,
) -> bool:
    """Return True if the ``target`` square is attacked by ``by_color``.

    Looks outward from the target with the same primitives ``side_attacks``
    uses; for a target occupied by the defending side the answer equals
    ``bool(side_attacks(...) & target)``. An empty target still counts pawn
    diagonals.
    """
    if not target:
        return False
    white_occ, black_occ = _occupancies(boards, white_occ, black_occ)
    all_occ = white_occ | black_occ
    if by_color is Color.WHITE:
        attacker, kinds = white_occ, WHITE_PIECES
    else:
        attacker, kinds = black_occ, BLACK_PIECES
    pawns, knights, bishops, rooks, queens, kings = (boards[p] & attacker for p in kinds)

    if pawn_attacks(target, pawns, by_color.opposite):
        return True
    if knight_attacks(target, 0) & knights:
        return True
    if king_attacks(target, 0) & kings:
        return True
    if bishop_attacks(target, all_occ, attacker) & (bishops | queens):
        return True
    if rook_attacks(target, all_occ, attacker) & (rooks | queens):
        return True
    return False
