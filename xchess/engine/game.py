from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple, cast

from .board import Board
from .move import Move
from .piece import WHITE
from xchess.search.tree import BoardTree


logger = logging.getLogger(__name__)

# Node expansions the AI spends per move
DEFAULT_BUDGET = 200

MoveReceivedHandler = Callable[[Move, Board], None]


class Game(ABC):
    """A game from a single player's perspective.

    Responsibility: hold the current board, commit moves chosen outside the
    engine, and notify listeners when the other side moves on its own.
    Committed moves are not re-validated; callers take moves from
    ``board.moves()``.
    """

    def __init__(self) -> None:
        self._handlers: List[MoveReceivedHandler] = []
        self.history: List[Tuple[Board, Move]] = []

    @property
    @abstractmethod
    def board(self) -> Board:
        pass

    @property
    @abstractmethod
    def player(self) -> int:
        pass

    def move(self, move: Move, resulting_board: Optional[Board] = None) -> None:
        """Commit ``move``; the resulting board is computed when not supplied."""
        if resulting_board is None:
            resulting_board = self.board.get_next(move)
        self.history.append((self.board, move))
        self._commit(move, resulting_board)

    @abstractmethod
    def _commit(self, move: Move, resulting_board: Board) -> None:
        pass

    def move_history_uci(self) -> List[str]:
        return [before.uci(move) for before, move in self.history]

    def on_move_received(self, handler: MoveReceivedHandler) -> None:
        self._handlers.append(handler)

    def _receive_move(self, before: Board, move: Move, board: Board) -> None:
        self.history.append((before, move))
        for handler in list(self._handlers):
            handler(move, board)

    # --- State flags for protocol ---
    def checkmate(self) -> bool:
        return (not self.board.has_legal_moves()) and self.board.check

    def stalemate(self) -> bool:
        return (not self.board.has_legal_moves()) and (not self.board.check)

    def is_over(self) -> bool:
        return not self.board.has_legal_moves()


class LocalGame(Game):
    """Two players sharing one board; the player is whoever is to move."""

    def __init__(self, initial: Optional[Board] = None) -> None:
        super().__init__()
        self._board = initial if initial is not None else Board.initial()

    @property
    def board(self) -> Board:
        return self._board

    @property
    def player(self) -> int:
        return self._board.player_to_move

    def _commit(self, move: Move, resulting_board: Board) -> None:
        self._board = resulting_board


class AIGame(Game):
    """A game against the search tree.

    ``player`` is the human side. After each committed move the AI expands
    its tree by ``budget`` nodes, plays the best move found and raises the
    move-received notification. The AI moves first when the human is black.
    """

    def __init__(
        self,
        player: int = WHITE,
        initial: Optional[Board] = None,
        budget: int = DEFAULT_BUDGET,
        handler: Optional[MoveReceivedHandler] = None,
    ) -> None:
        super().__init__()
        if budget < 1:
            raise ValueError("budget must be >= 1")
        self._player = player
        self.budget = budget
        self._tree = BoardTree(initial if initial is not None else Board.initial())
        if handler is not None:
            self.on_move_received(handler)
        if self._tree.board.player_to_move != player:
            self._make_move()

    @property
    def board(self) -> Board:
        return self._tree.board

    @property
    def player(self) -> int:
        return self._player

    def _commit(self, move: Move, resulting_board: Board) -> None:
        self._tree.expand()
        nxt = self._tree.child(move)
        if nxt is None:
            logger.warning("committed move missing from search tree; starting a fresh tree")
            nxt = BoardTree(resulting_board)
        self._tree = nxt
        self._make_move()

    def _make_move(self) -> None:
        self._tree.compute(self.budget)
        best = self._tree.best_move()
        if best is None:
            logger.info("no legal moves for the AI; game over")
            return
        move, value = best
        board = self._tree.board
        logger.debug("ai move=%s score=%s", board.uci(move), value)
        # best_move only returns moves of the expanded node
        self._tree = cast(BoardTree, self._tree.child(move))
        self._receive_move(board, move, self._tree.board)
