from __future__ import annotations

from typing import Dict

from .position import Position


def perft(position: Position, depth: int) -> int:
    """Compute perft node count for ``position`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Note: children are produced by copying the position and applying the move
    through the public move API, so terminal detection runs at every node and
    a finished game contributes no children.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    if position.is_game_over:
        return 0

    moves = position.generate_legal_moves()
    if depth == 1:
        return len(moves)

    nodes = 0
    for m in moves:
        child = position.copy()
        child.apply_move(m)
        nodes += perft(child, depth - 1)
    return nodes


def divide(position: Position, depth: int) -> Dict[str, int]:
    """Return perft(depth - 1) per root move keyed by UCI text."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    counts: Dict[str, int] = {}
    for m in position.generate_legal_moves():
        child = position.copy()
        child.apply_move(m)
        counts[m.to_uci()] = perft(child, depth - 1)
    return counts
