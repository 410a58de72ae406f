"""FastAPI application: REST + WebSocket endpoints for Indian poker."""

import json
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from indian_poker import game_manager, redis_client
from indian_poker.models import (
    ActionResponse,
    CreateGameRequest,
    CreateGameResponse,
    GameActionRequest,
    GameListResponse,
    JoinGameRequest,
    JoinGameResponse,
    LeaveRequest,
)
from indian_poker.ws_manager import manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await redis_client.close()


app = FastAPI(title="Indian Poker API", lifespan=lifespan)

# ---------- Rate Limiting ----------

_rate_limit_enabled = os.getenv("RATE_LIMIT_ENABLED", "1") != "0"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=_rate_limit_enabled,
)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def _rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please slow down."},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- REST endpoints ----------


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/games", response_model=GameListResponse)
@limiter.limit("30/minute")
async def list_games(request: Request):
    return GameListResponse(games=await game_manager.list_games())


@app.post("/api/games", response_model=CreateGameResponse)
@limiter.limit("5/minute")
async def create_game(request: Request, req: CreateGameRequest):
    code, player_id, game = await game_manager.create_game(req)
    return CreateGameResponse(code=code, player_id=player_id, game=game)


@app.get("/api/games/{code}")
@limiter.limit("30/minute")
async def get_game(request: Request, code: str):
    game = await game_manager.get_game(code.upper())
    if game is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return game


@app.post("/api/games/{code}/join", response_model=JoinGameResponse)
@limiter.limit("10/minute")
async def join_game(request: Request, code: str, req: JoinGameRequest):
    code = code.upper()
    try:
        player_id, game = await game_manager.join_game(code, req)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # The creator is usually already connected and waiting
    await _broadcast_views(code)
    return JoinGameResponse(player_id=player_id, game=game)


@app.post("/api/games/{code}/action", response_model=ActionResponse)
@limiter.limit("30/minute")
async def game_action(request: Request, code: str, req: GameActionRequest):
    """Apply one action (start_round, peek, swap, skip_ability, raise, call, fold)."""
    code = code.upper()
    try:
        result = await game_manager.process_action(code, req.player_id, req.action)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response = ActionResponse(ok=True, message=result.message, events=list(result.events))
    await manager.send_to_player(
        code,
        req.player_id,
        json.dumps({"type": "action_result", "data": response.model_dump(mode="json")}),
    )
    await _broadcast_views(code)
    return response


@app.post("/api/games/{code}/leave")
@limiter.limit("10/minute")
async def leave_game(request: Request, code: str, req: LeaveRequest):
    code = code.upper()
    try:
        game = await game_manager.leave_game(code, req.player_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    manager.disconnect(code, req.player_id)
    if game is not None:
        await manager.broadcast_to_all(
            code, json.dumps({"type": "opponent_left", "player_id": req.player_id})
        )
    return {"ok": True, "game": game}


@app.get("/api/games/{code}/view/{player_id}")
@limiter.limit("30/minute")
async def get_player_view(request: Request, code: str, player_id: str):
    """The game as one seat is allowed to see it."""
    try:
        return await game_manager.get_player_view(code.upper(), player_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ---------- WebSocket ----------


@app.websocket("/ws/{code}/{player_id}")
async def websocket_endpoint(ws: WebSocket, code: str, player_id: str):
    code = code.upper()

    game = await game_manager.get_game(code)
    if game is None:
        await ws.close(code=4004, reason="Game not found")
        return
    if player_id not in {seat.id for seat in game.seats}:
        await ws.close(code=4003, reason="Not seated in this game")
        return

    conn = await manager.connect(code, player_id, ws)

    try:
        # Current view right away so reconnects resync
        try:
            view = await game_manager.get_player_view(code, player_id)
        except ValueError:
            await ws.close(code=4004, reason="Game not found")
            return
        await conn.send(_view_message(view))

        # Actions go through the REST endpoint; inbound frames are drained
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        logger.debug("Socket closed by %s in %s", player_id, code)
    finally:
        manager.disconnect(code, player_id, conn)


# ---------- Helpers ----------


def _view_message(view) -> str:
    return json.dumps({"type": "game_state", "data": view.model_dump(mode="json")})


async def _broadcast_views(code: str) -> None:
    """Send each connected seat its own redacted view."""
    for pid in manager.get_connected_player_ids(code):
        try:
            view = await game_manager.get_player_view(code, pid)
        except ValueError:
            logger.debug("No view for %s in %s", pid, code)
            continue
        await manager.send_to_player(code, pid, _view_message(view))
