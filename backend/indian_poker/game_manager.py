"""Game manager: room bookkeeping around the pure engine.

Maps game codes to persisted ``GameState`` snapshots and serializes
actions per game with an ``asyncio.Lock`` so at most one action is in
flight for any given table.
"""

from __future__ import annotations

import asyncio
import logging
import os
import random
import time
import uuid
from typing import Any, Optional

from indian_poker import redis_client
from indian_poker.actions import GameAction
from indian_poker.engine import GameEngine
from indian_poker.models import (
    CreateGameRequest,
    GameSummary,
    JoinGameRequest,
    SeatInfo,
)
from indian_poker.rules import Variant, get_rules
from indian_poker.state import ActionResult, GameState, PlayerView

logger = logging.getLogger(__name__)

DEFAULT_VARIANT = Variant(os.getenv("GAME_VARIANT", Variant.INDIAN.value))

# No 0/O or 1/I/L so codes can be read aloud.
_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"

_engines: dict[Variant, GameEngine] = {}
_locks: dict[str, asyncio.Lock] = {}


def _generate_code(length: int = 4) -> str:
    """Generate a short uppercase game code."""
    return "".join(random.choices(_CODE_ALPHABET, k=length))


def _get_lock(code: str) -> asyncio.Lock:
    lock = _locks.get(code)
    if lock is None:
        lock = _locks[code] = asyncio.Lock()
    return lock


def get_engine(variant: Variant) -> GameEngine:
    """One shared engine per variant; engines hold no per-game state."""
    engine = _engines.get(variant)
    if engine is None:
        engine = _engines[variant] = GameEngine(rules=get_rules(variant))
    return engine


async def _load(code: str) -> tuple[dict[str, Any], GameState]:
    room = await redis_client.load_room(code)
    raw_state = await redis_client.load_state(code)
    if room is None or raw_state is None:
        # Expired through the TTL, or never existed
        _locks.pop(code, None)
        raise ValueError("Game not found")
    return room, GameState.model_validate_json(raw_state)


async def _save(code: str, room: dict[str, Any], state: GameState) -> None:
    await redis_client.store_room(code, room)
    await redis_client.store_state(code, state.model_dump_json())


def _summarize(code: str, room: dict[str, Any], state: GameState) -> GameSummary:
    seats = [
        SeatInfo(id=p.id, name=p.name, chips=p.chips)
        for p in state.players
        if p.is_seated
    ]
    return GameSummary(
        code=code,
        variant=state.variant,
        phase=state.phase,
        round_number=state.round_number,
        max_rounds=state.max_rounds,
        seats=seats,
        player_count=len(room["members"]),
        created_at=room["created_at"],
    )


async def create_game(req: CreateGameRequest) -> tuple[str, str, GameSummary]:
    """Create a new room and return (code, player_id, summary)."""
    code = _generate_code()

    # Ensure uniqueness (simple retry)
    while await redis_client.load_room(code) is not None:
        code = _generate_code()

    variant = req.variant or DEFAULT_VARIANT
    player_id = str(uuid.uuid4())
    state = get_engine(variant).create_game({"id": player_id, "name": req.player_name})

    room = {
        "code": code,
        "variant": variant.value,
        "created_at": time.time(),
        "members": [player_id],
    }
    await _save(code, room, state)

    logger.info("Game %s created (%s) by %s", code, variant.value, player_id)
    return code, player_id, _summarize(code, room, state)


async def join_game(code: str, req: JoinGameRequest) -> tuple[str, GameSummary]:
    """Take the second seat. Returns (player_id, summary)."""
    async with _get_lock(code):
        room, state = await _load(code)
        if state.players[1].is_seated:
            raise ValueError("Game is full")

        player_id = str(uuid.uuid4())
        state = get_engine(state.variant).join_game(
            state, {"id": player_id, "name": req.player_name}
        )
        room["members"].append(player_id)
        await _save(code, room, state)

    logger.info("Player %s joined game %s", player_id, code)
    return player_id, _summarize(code, room, state)


async def process_action(code: str, player_id: str, action: GameAction) -> ActionResult:
    """Run one action through the engine and persist the new snapshot."""
    async with _get_lock(code):
        room, state = await _load(code)
        if player_id not in room["members"]:
            raise ValueError("Player not in this game")

        result = get_engine(state.variant).execute_action(state, action, player_id)
        if not result.success:
            raise ValueError(result.message)

        await _save(code, room, result.new_state)
    return result


async def get_player_view(code: str, player_id: str) -> PlayerView:
    """The redacted state for one seat, valid actions included."""
    _, state = await _load(code)
    return get_engine(state.variant).get_player_view(state, player_id)


async def get_game(code: str) -> Optional[GameSummary]:
    try:
        room, state = await _load(code)
    except ValueError:
        return None
    return _summarize(code, room, state)


async def list_games() -> list[GameSummary]:
    games: list[GameSummary] = []
    for code in await redis_client.list_all_game_codes():
        summary = await get_game(code)
        if summary is not None:
            games.append(summary)
    games.sort(key=lambda g: g.created_at, reverse=True)
    return games


async def leave_game(code: str, player_id: str) -> Optional[GameSummary]:
    """Leave a room. Returns the remaining room, or None once it is deleted."""
    async with _get_lock(code):
        room, state = await _load(code)
        if player_id not in room["members"]:
            raise ValueError("Player not in this game")

        room["members"].remove(player_id)
        if not room["members"]:
            await redis_client.delete_game(code)
            logger.info("Game %s deleted (empty)", code)
            summary = None
        else:
            await redis_client.store_room(code, room)
            logger.info("Player %s left game %s", player_id, code)
            summary = _summarize(code, room, state)

    if summary is None:
        _locks.pop(code, None)
    return summary
