"""Closed set of engine actions.

Actions are a pydantic discriminated union keyed on ``type`` so that
transport payloads are validated before they ever reach the engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter


class ActionType(str, Enum):
    START_ROUND = "START_ROUND"
    PEEK = "PEEK"
    SWAP = "SWAP"
    SKIP_ABILITY = "SKIP_ABILITY"
    RAISE = "RAISE"
    CALL = "CALL"
    FOLD = "FOLD"


ABILITY_ACTIONS = frozenset({ActionType.PEEK, ActionType.SWAP, ActionType.SKIP_ABILITY})
BETTING_ACTIONS = frozenset({ActionType.RAISE, ActionType.CALL, ActionType.FOLD})


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class StartRound(_Action):
    type: Literal[ActionType.START_ROUND] = ActionType.START_ROUND


class Peek(_Action):
    type: Literal[ActionType.PEEK] = ActionType.PEEK


class Swap(_Action):
    type: Literal[ActionType.SWAP] = ActionType.SWAP


class SkipAbility(_Action):
    type: Literal[ActionType.SKIP_ABILITY] = ActionType.SKIP_ABILITY


class Raise(_Action):
    type: Literal[ActionType.RAISE] = ActionType.RAISE
    # Strict: booleans and numeric strings are malformed. Positivity is checked by the engine.
    amount: StrictInt


class Call(_Action):
    type: Literal[ActionType.CALL] = ActionType.CALL


class Fold(_Action):
    type: Literal[ActionType.FOLD] = ActionType.FOLD


GameAction = Annotated[
    Union[StartRound, Peek, Swap, SkipAbility, Raise, Call, Fold],
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter[GameAction] = TypeAdapter(GameAction)


def parse_action(payload: Mapping[str, Any] | GameAction) -> GameAction:
    """Validate a raw payload into an action.

    Raises ``pydantic.ValidationError`` for unknown types or bad fields.
    """
    if isinstance(payload, _Action):
        return payload  # type: ignore[return-value]
    return _action_adapter.validate_python(payload)
