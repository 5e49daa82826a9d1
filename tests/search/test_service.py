from __future__ import annotations

import math

import pytest

from xchess.engine.board import Board
from xchess.search.service import SearchService


def test_search_returns_legal_move(startpos: Board) -> None:
    res = SearchService().search(startpos, budget=3)
    assert res.best_move is not None
    assert res.best_move in [m for m, _ in startpos.moves()]
    assert res.nodes == 3
    assert res.score is not None


def test_search_terminal_position_returns_no_move() -> None:
    stalemate = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    res = SearchService().search(stalemate, budget=5)
    assert res.best_move is None
    assert res.score is None
    assert res.nodes == 1


def test_search_reports_mate_score() -> None:
    board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    res = SearchService().search(board, budget=1)
    assert res.best_move is not None and board.uci(res.best_move) == "a1a8"
    assert res.score == math.inf


def test_search_rejects_empty_budget(startpos: Board) -> None:
    with pytest.raises(ValueError):
        SearchService().search(startpos, budget=0)
