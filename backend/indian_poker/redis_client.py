"""Redis client wrapper for room and game-state persistence."""

from __future__ import annotations

import json
import os
from typing import Any, Optional

import redis.asyncio as redis

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Every key of a room expires after this long without a write.
GAME_TTL_SECONDS = int(os.getenv("GAME_TTL_SECONDS", str(24 * 60 * 60)))

_pool: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    global _pool
    if _pool is None:
        _pool = redis.from_url(REDIS_URL, decode_responses=True)
    return _pool


def _room_key(code: str) -> str:
    return f"game:{code}"


def _state_key(code: str) -> str:
    return f"game:{code}:state"


async def store_room(code: str, data: dict[str, Any]) -> None:
    r = await get_redis()
    await r.set(_room_key(code), json.dumps(data), ex=GAME_TTL_SECONDS)


async def load_room(code: str) -> Optional[dict[str, Any]]:
    r = await get_redis()
    raw = await r.get(_room_key(code))
    if raw is None:
        return None
    return json.loads(raw)


async def store_state(code: str, state_json: str) -> None:
    """Persist a serialized ``GameState`` snapshot."""
    r = await get_redis()
    await r.set(_state_key(code), state_json, ex=GAME_TTL_SECONDS)


async def load_state(code: str) -> Optional[str]:
    r = await get_redis()
    return await r.get(_state_key(code))


async def list_all_game_codes() -> list[str]:
    """Return all game codes currently stored in Redis."""
    r = await get_redis()
    codes: set[str] = set()
    async for key in r.scan_iter(match="game:*", count=200):
        # Keys look like game:AB12 or game:AB12:state
        parts = key.split(":")
        if len(parts) >= 2:
            codes.add(parts[1])
    return sorted(codes)


async def delete_game(code: str) -> None:
    """Remove every key belonging to a room."""
    r = await get_redis()
    await r.delete(_room_key(code), _state_key(code))


async def close() -> None:
    global _pool
    if _pool is not None:
        await _pool.aclose()
        _pool = None
