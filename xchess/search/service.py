from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from xchess.engine.board import Board
from xchess.engine.move import Move
from xchess.search.tree import BoardTree


logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[float]
    nodes: int
    time_ms: int


class SearchService:
    """Budgeted search over a ``BoardTree``.

    The budget counts node expansions, not time; a search always runs to the
    end of its budget or of the reachable game tree.
    """

    def search(
        self, board: Board, budget: int = 1, tree: Optional[BoardTree] = None
    ) -> SearchResult:
        if budget < 1:
            raise ValueError("budget must be >= 1")
        if tree is None:
            tree = BoardTree(board)
        start = time.perf_counter()
        nodes = tree.compute(budget)
        best = tree.best_move()
        time_ms = int((time.perf_counter() - start) * 1000)
        if best is None:
            logger.debug("search: no legal moves (budget=%d)", budget)
            return SearchResult(best_move=None, score=None, nodes=nodes, time_ms=time_ms)
        move, value = best
        logger.debug(
            "search: best=%s score=%s nodes=%d time_ms=%d",
            board.uci(move),
            value,
            nodes,
            time_ms,
        )
        return SearchResult(best_move=move, score=value, nodes=nodes, time_ms=time_ms)
