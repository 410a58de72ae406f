"""Pydantic request/response models for the HTTP API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from indian_poker.actions import GameAction
from indian_poker.rules import Variant
from indian_poker.state import GameEvent, GamePhase


# --- Request models ---


class CreateGameRequest(BaseModel):
    player_name: str = Field(..., min_length=1, max_length=20)
    variant: Optional[Variant] = None  # None = server default


class JoinGameRequest(BaseModel):
    player_name: str = Field(..., min_length=1, max_length=20)


class GameActionRequest(BaseModel):
    player_id: str = Field(..., min_length=1)
    action: GameAction


class LeaveRequest(BaseModel):
    player_id: str = Field(..., min_length=1)


# --- Response models ---


class SeatInfo(BaseModel):
    """Public seat information (no cards)."""

    id: str
    name: str
    chips: int


class GameSummary(BaseModel):
    code: str
    variant: Variant
    phase: GamePhase
    round_number: int
    max_rounds: int
    seats: list[SeatInfo]
    player_count: int
    created_at: float


class CreateGameResponse(BaseModel):
    code: str
    player_id: str
    game: GameSummary


class JoinGameResponse(BaseModel):
    player_id: str
    game: GameSummary


class ActionResponse(BaseModel):
    ok: bool
    message: str
    events: list[GameEvent]


class GameListResponse(BaseModel):
    games: list[GameSummary]
