"""Static evaluation.

Pure, deterministic, and side-effect free. Scores are in pawn units from a
fixed player's perspective, whoever is to move.
"""

from __future__ import annotations

from typing import Final

from xchess.engine.board import Board
from xchess.engine.movegen import threats
from xchess.engine.piece import PIECE_VALUES, Piece


# Mobility bonus per threatened square: value * MOBILITY_SCALE + MOBILITY_BASE
MOBILITY_SCALE: Final = 0.025
MOBILITY_BASE: Final = 0.05

__all__ = ["PIECE_VALUES", "mobility_weight", "score", "score_normal"]


def mobility_weight(piece: Piece) -> float:
    return piece.value * MOBILITY_SCALE + MOBILITY_BASE


def score(board: Board, player: int) -> float:
    """Score ``board`` for ``player``.

    Returns:
        float: ``-inf`` if ``player`` is to move and checkmated, ``inf`` if the
            opponent is, ``0.0`` on stalemate, otherwise ``score_normal``.
    """
    if not board.has_legal_moves():
        if board.check:
            return float("-inf") if board.player_to_move == player else float("inf")
        return 0.0
    return score_normal(board, player)


def score_normal(board: Board, player: int) -> float:
    """Material plus threatened-square bonus, assuming the game is not over.

    The bonus counts raw threats, including ones a pinned piece could not act
    on, and offsets that fall off the board.
    """
    total = 0.0
    for square, piece in board.pieces():
        sign = 1.0 if piece.owner == player else -1.0
        bonus = mobility_weight(piece)
        reach = len(threats(board, square, piece))
        total += sign * (piece.value + bonus * reach)
    return total
