from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore
from ...engine.board import Board
from ...engine.game import AIGame, DEFAULT_BUDGET
from ...engine.perft import perft as perft_nodes
from ...engine.piece import BLACK, WHITE
from ...search.service import SearchService


logger = logging.getLogger(__name__)

MAX_BUDGET = 5000
PLAYER_NAMES = {WHITE: "white", BLACK: "black"}


class CreateGameRequest(BaseModel):
    mode: Literal["local", "ai"] = "local"
    human_player: Literal["white", "black"] = "white"
    budget: int = Field(default=DEFAULT_BUDGET, ge=1, le=MAX_BUDGET)
    fen: Optional[str] = Field(default=None, description="Starting FEN (default: startpos)")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str
    ai_moves: List[str]


class MoveRequest(BaseModel):
    move: str = Field(..., description="Long algebraic move, e.g. e2e4 or e7e8q")


class SearchRequest(BaseModel):
    budget: int = Field(default=DEFAULT_BUDGET, ge=1, le=MAX_BUDGET)


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=4)


class PieceView(BaseModel):
    square: str
    symbol: str
    color: str
    mesh: str


class GameState(BaseModel):
    game_id: str
    mode: str
    fen: str
    side_to_move: str
    human_player: Optional[str]
    pieces: List[PieceView]
    legal_moves: List[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    last_move: Optional[str]
    move_history: List[str]


class MoveResponse(GameState):
    ai_moves: List[str]


def create_app() -> FastAPI:
    app = FastAPI(title="XChess API", version="0.1.0")

    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    search_service = SearchService()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        try:
            initial = Board.from_fen(req.fen) if req.fen is not None else Board.initial()
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        if req.mode == "ai":
            human = WHITE if req.human_player == "white" else BLACK
            session = GameSession.against_ai(human, req.budget, initial)
        else:
            session = GameSession.local(initial)
        game_id = store.create(session)
        logger.info("created %s game %s", req.mode, game_id)
        return CreateGameResponse(
            game_id=game_id,
            fen=session.game.board.to_fen(),
            ai_moves=session.drain_replies(),
        )

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    def get_state(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        with session.lock:
            return _state(game_id, session)

    @app.post("/api/games/{game_id}/move", response_model=MoveResponse)
    def make_move(game_id: str, req: MoveRequest) -> MoveResponse:
        session = _require_session(store, game_id)
        with session.lock:
            game = session.game
            board = game.board
            if isinstance(game, AIGame) and board.player_to_move != game.player:
                raise HTTPException(status_code=409, detail="not your turn")
            found = board.find_move(req.move.strip().lower())
            if found is None:
                raise HTTPException(status_code=400, detail="illegal move")
            move, resulting = found
            game.move(move, resulting)
            replies = session.drain_replies()
            state = _state(game_id, session)
        return MoveResponse(**state.model_dump(), ai_moves=replies)

    @app.post("/api/games/{game_id}/search")
    def search(game_id: str, req: SearchRequest) -> Dict[str, Any]:
        session = _require_session(store, game_id)
        with session.lock:
            board = session.game.board
        res = search_service.search(board, budget=req.budget)
        return {
            "best_move": board.uci(res.best_move) if res.best_move is not None else None,
            "score": _score_json(res.score),
            "nodes": res.nodes,
            "time_ms": res.time_ms,
        }

    @app.delete("/api/games/{game_id}")
    def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            board = Board.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(board, req.depth)}

    return app


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


def _state(game_id: str, session: GameSession) -> GameState:
    game = session.game
    board = game.board
    history = game.move_history_uci()
    human = PLAYER_NAMES[game.player] if isinstance(game, AIGame) else None
    return GameState(
        game_id=game_id,
        mode=session.mode,
        fen=board.to_fen(),
        side_to_move=PLAYER_NAMES[board.player_to_move],
        human_player=human,
        pieces=[
            PieceView(
                square=square.name,
                symbol=piece.symbol,
                color=piece.display_color,
                mesh=piece.display_mesh,
            )
            for square, piece in board.pieces()
        ],
        legal_moves=[board.uci(m) for m, _ in board.moves()],
        in_check=board.check,
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        last_move=history[-1] if history else None,
        move_history=history,
    )


def _score_json(score: Optional[float]) -> Optional[Dict[str, Any]]:
    # JSON has no infinities; forced mates are reported as a mate flag.
    if score is None:
        return None
    if math.isinf(score):
        return {"mate": 1 if score > 0 else -1}
    return {"value": round(score, 4)}


# Default app for non-factory servers
app = create_app()
