from __future__ import annotations

from typing import List, Tuple

import pytest

from xchess.engine.board import Board
from xchess.engine.game import AIGame, Game, LocalGame
from xchess.engine.move import Move
from xchess.engine.piece import BLACK, WHITE

MATE_IN_ONE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"


def _play(game, uci: str) -> None:
    found = game.board.find_move(uci)
    assert found is not None, uci
    game.move(*found)


def test_local_game_alternates_players() -> None:
    game = LocalGame()
    assert game.player == WHITE
    _play(game, "e2e4")
    assert game.player == BLACK
    _play(game, "e7e5")
    assert game.player == WHITE
    assert game.move_history_uci() == ["e2e4", "e7e5"]


def test_move_without_board_computes_successor() -> None:
    game = LocalGame()
    move, expected = game.board.find_move("g1f3")  # type: ignore[misc]
    game.move(move)
    assert game.board == expected


def test_local_game_terminal_flags() -> None:
    game = LocalGame(Board.from_fen(MATE_IN_ONE))
    assert not game.is_over()
    _play(game, "a1a8")
    assert game.checkmate()
    assert not game.stalemate()
    assert game.is_over()


def test_ai_replies_after_human_move() -> None:
    received: List[Tuple[Move, Board]] = []
    game = AIGame(player=WHITE, budget=1, handler=lambda m, b: received.append((m, b)))
    assert received == []
    _play(game, "e2e4")
    assert len(received) == 1
    move, board = received[0]
    assert board == game.board
    assert game.board.player_to_move == WHITE
    assert len(game.history) == 2
    assert game.history[1] == (game.history[0][0].get_next(game.history[0][1]), move)


def test_ai_moves_first_when_human_is_black() -> None:
    received: List[Move] = []
    game = AIGame(player=BLACK, budget=1, handler=lambda m, b: received.append(m))
    assert len(received) == 1
    assert game.board.player_to_move == BLACK
    assert game.player == BLACK


def test_ai_plays_mate_in_one() -> None:
    game = AIGame(player=BLACK, initial=Board.from_fen(MATE_IN_ONE), budget=1)
    assert game.move_history_uci() == ["a1a8"]
    assert game.checkmate()


def test_ai_makes_no_move_when_mated() -> None:
    received: List[Move] = []
    game = AIGame(
        player=WHITE,
        initial=Board.from_fen(MATE_IN_ONE),
        budget=5,
        handler=lambda m, b: received.append(m),
    )
    _play(game, "a1a8")
    assert received == []
    assert game.board.player_to_move == BLACK
    assert game.checkmate()


def test_ai_reuses_tree_across_moves() -> None:
    game = AIGame(player=WHITE, budget=3)
    _play(game, "d2d4")
    _play(game, "c2c4")
    assert game.board.player_to_move == WHITE
    assert len(game.history) == 4


def test_ai_rejects_empty_budget() -> None:
    with pytest.raises(ValueError):
        AIGame(budget=0)


def test_game_base_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError):
        Game()  # type: ignore[abstract]
