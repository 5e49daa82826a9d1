from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...engine.board import Board
from ...engine.game import AIGame, Game, LocalGame
from ...engine.move import Move


@dataclass
class GameSession:
    """A game plus the number of AI replies the client has not been shown yet."""

    game: Game
    mode: str
    pending: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def local(cls, initial: Optional[Board] = None) -> "GameSession":
        return cls(game=LocalGame(initial), mode="local")

    @classmethod
    def against_ai(
        cls, player: int, budget: int, initial: Optional[Board] = None
    ) -> "GameSession":
        game = AIGame(player=player, initial=initial, budget=budget)
        # Any history at this point is the AI's opening reply
        session = cls(game=game, mode="ai", pending=len(game.history))
        game.on_move_received(session._count_reply)
        return session

    def _count_reply(self, move: Move, board: Board) -> None:
        self.pending += 1

    def drain_replies(self) -> List[str]:
        """Long algebraic form of the replies received since the last drain."""
        n, self.pending = self.pending, 0
        if n == 0:
            return []
        return [before.uci(move) for before, move in self.game.history[-n:]]


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Delete sessions
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}

    def create(self, session: Optional[GameSession] = None) -> str:
        """Store ``session`` (a local game by default) and return its `game_id`."""
        gid = str(uuid.uuid4())
        if session is None:
            session = GameSession.local()
        with self._lock:
            self._sessions[gid] = session
        return gid

    def get(self, game_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(game_id)

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
