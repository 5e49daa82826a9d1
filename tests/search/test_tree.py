from __future__ import annotations

import math

import pytest

from xchess.engine.board import Board
from xchess.eval import score
from xchess.search.tree import BoardTree


def _first_max_move(board: Board):
    best = None
    for move, child in board.moves():
        value = score(child, board.player_to_move)
        if best is None or value > best[1]:
            best = (move, value)
    return best


def test_compute_budget_one_expands_root_only(startpos: Board) -> None:
    tree = BoardTree(startpos)
    assert tree.compute(1) == 1
    assert tree.children is not None
    assert len(tree.children) == 20
    assert all(not c.expanded for c in tree.children.values())


def test_compute_is_breadth_first_and_skips_expanded_nodes(startpos: Board) -> None:
    tree = BoardTree(startpos)
    tree.compute(1)
    # Root is already expanded; the budget goes to its first child
    assert tree.compute(1) == 1
    children = list(tree.children.values())  # type: ignore[union-attr]
    assert children[0].expanded
    assert not children[1].expanded
    assert tree.compute(19) == 19
    assert all(c.expanded for c in children)
    assert tree.size() == 1 + 20 + 20 * 20


def test_compute_stops_when_frontier_is_empty() -> None:
    stalemate = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    tree = BoardTree(stalemate)
    assert tree.compute(10) == 1
    assert tree.children == {}
    assert tree.best_move() is None


def test_best_move_requires_expansion(startpos: Board) -> None:
    assert BoardTree(startpos).best_move() is None


@pytest.mark.parametrize(
    "fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
        "4k3/8/8/8/8/8/3q4/4K3 w - - 0 1",
        "r3k2r/8/8/3n4/8/2N5/8/R3K2R b KQkq - 0 1",
    ],
)
def test_one_ply_best_move_is_max_static_score(fen: str) -> None:
    board = Board.from_fen(fen)
    tree = BoardTree(board)
    tree.compute(1)
    assert tree.best_move() == _first_max_move(board)


def test_king_takes_hanging_queen() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/3q4/4K3 w - - 0 1")
    tree = BoardTree(board)
    tree.compute(1)
    move, _ = tree.best_move()  # type: ignore[misc]
    assert board.uci(move) == "e1d2"


def test_two_ply_best_move_negates_best_reply() -> None:
    board = Board.from_fen("4k3/8/8/3p4/8/8/8/R3K3 w Q - 0 1")
    tree = BoardTree(board)
    tree.compute(1)
    n = len(tree.children)  # type: ignore[arg-type]
    tree.compute(n)
    assert all(c.expanded for c in tree.children.values())  # type: ignore[union-attr]

    move, value = tree.best_move()  # type: ignore[misc]
    reply = tree.children[move].best_move()  # type: ignore[index]
    assert reply is not None
    assert value == pytest.approx(-reply[1])
    for child in tree.children.values():  # type: ignore[union-attr]
        assert value >= -child.best_move()[1]  # type: ignore[index]


def test_finds_mate_in_one() -> None:
    board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    tree = BoardTree(board)
    tree.compute(1)
    move, value = tree.best_move()  # type: ignore[misc]
    assert board.uci(move) == "a1a8"
    assert value == math.inf


def test_ties_keep_first_move() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    moves = board.moves()
    same = moves[0][1]
    tree = BoardTree(board)
    tree.children = {moves[0][0]: BoardTree(same), moves[1][0]: BoardTree(same)}
    best = tree.best_move()
    assert best is not None
    assert best[0] == moves[0][0]


def test_child_lookup(startpos: Board) -> None:
    tree = BoardTree(startpos)
    move, nxt = startpos.moves()[0]
    assert tree.child(move) is None
    tree.compute(1)
    node = tree.child(move)
    assert node is not None and node.board == nxt


def test_negative_budget_rejected(startpos: Board) -> None:
    with pytest.raises(ValueError):
        BoardTree(startpos).compute(-1)


def test_expanded_terminal_child_is_scored_statically() -> None:
    board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    tree = BoardTree(board)
    tree.compute(1)
    move, _ = board.find_move("a1a8")  # type: ignore[misc]
    mated = tree.child(move)
    assert mated is not None
    assert mated.expand()
    assert mated.children == {}
    assert tree.best_move() == (move, math.inf)
