from __future__ import annotations

from typing import Dict

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Compute perft node count for `board` at `depth`.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    if depth == 1:
        return len(board.moves())
    return sum(perft(child, depth - 1) for _, child in board.moves())


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Per-move perft breakdown keyed by long algebraic move."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    return {board.uci(move): perft(child, depth - 1) for move, child in board.moves()}
