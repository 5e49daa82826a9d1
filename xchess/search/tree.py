from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Optional, Tuple

from xchess.engine.board import Board
from xchess.engine.move import Move
from xchess.eval import score


class BoardTree:
    """A board plus, once expanded, every legal move mapped to its subtree.

    ``children`` is ``None`` until the node is expanded. Each node owns its
    children; nothing points back up the tree.
    """

    def __init__(self, board: Board) -> None:
        self.board = board
        self.children: Optional[Dict[Move, BoardTree]] = None

    @property
    def expanded(self) -> bool:
        return self.children is not None

    def expand(self) -> bool:
        """Populate ``children``; returns False if the node was already expanded."""
        if self.children is not None:
            return False
        self.children = {move: BoardTree(nxt) for move, nxt in self.board.moves()}
        return True

    def compute(self, budget: int) -> int:
        """Expand breadth-first from this node, at most ``budget`` expansions.

        Already-expanded nodes are walked through without consuming budget.

        Returns:
            int: Number of nodes expanded.
        """
        if budget < 0:
            raise ValueError("budget must be >= 0")
        expanded = 0
        frontier: Deque[BoardTree] = deque([self])
        while frontier and expanded < budget:
            node = frontier.popleft()
            if node.expand():
                expanded += 1
            frontier.extend(node.children.values() if node.children else ())
        return expanded

    def child(self, move: Move) -> Optional["BoardTree"]:
        if self.children is None:
            return None
        return self.children.get(move)

    def best_move(self) -> Optional[Tuple[Move, float]]:
        """Negamax best move over the expanded part of the tree.

        A child without expanded continuations is scored statically for the
        side to move here; otherwise its score is the negation of the child's
        own best score. Ties keep the first move in generation order.

        Returns:
            Optional[Tuple[Move, float]]: Best move and its score, or ``None``
                when the node is unexpanded or has no legal moves.
        """
        if not self.children:
            return None
        mover = self.board.player_to_move
        best: Optional[Tuple[Move, float]] = None
        for move, child in self.children.items():
            reply = child.best_move()
            if reply is not None:
                value = -reply[1]
            else:
                value = score(child.board, mover)
            if best is None or value > best[1]:
                best = (move, value)
        return best

    def size(self) -> int:
        """Number of nodes in this subtree, including this one."""
        if not self.children:
            return 1
        return 1 + sum(c.size() for c in self.children.values())
