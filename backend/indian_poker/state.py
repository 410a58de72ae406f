"""Immutable game state snapshots and engine result types.

Every model here is frozen; transitions produce new snapshots via
``update`` / ``update_player`` and never mutate the input.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from indian_poker.actions import ActionType
from indian_poker.rules import Variant


class GamePhase(str, Enum):
    WAITING = "waiting"
    ABILITY = "ability"
    BETTING = "betting"
    SHOWDOWN = "showdown"
    ROUND_END = "round_end"
    GAME_OVER = "game_over"


class EventType(str, Enum):
    ROUND_START = "ROUND_START"
    DECK_SHUFFLED = "DECK_SHUFFLED"
    PEEK = "PEEK"
    SWAP = "SWAP"
    SKIP_ABILITY = "SKIP_ABILITY"
    BETTING_OPEN = "BETTING_OPEN"
    RAISE = "RAISE"
    CALL = "CALL"
    CHECK = "CHECK"
    FOLD = "FOLD"
    FOLD_PENALTY = "FOLD_PENALTY"
    SHOWDOWN = "SHOWDOWN"
    TIE = "TIE"
    WIN = "WIN"
    GAME_OVER = "GAME_OVER"


class ErrorKind(str, Enum):
    TURN = "turn"
    PHASE = "phase"
    RESOURCE = "resource"
    PRECONDITION = "precondition"
    LOOKUP = "lookup"
    MALFORMED = "malformed"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)

    def update(self, **kwargs: Any):
        return self.model_copy(update=kwargs)


class Player(_Frozen):
    id: str
    name: str
    chips: int = Field(ge=0)
    card: Optional[int] = None
    current_bet: int = 0
    has_folded: bool = False
    peek_count: int = 0
    swap_count: int = 0
    has_peeked: bool = False
    has_used_ability: bool = False

    @property
    def is_seated(self) -> bool:
        return self.id != ""


class RoundResult(_Frozen):
    round_number: int
    player0_card: int
    player1_card: int
    winner: Optional[str]  # None on a split pot
    pot_won: int
    folded_player_id: Optional[str] = None
    player0_chip_change: int
    player1_chip_change: int
    penalty: Optional[int] = None


class GameState(_Frozen):
    id: str
    variant: Variant
    players: tuple[Player, Player]
    deck: tuple[int, ...] = ()
    discard_pile: tuple[int, ...] = ()
    pot: int = Field(default=0, ge=0)
    phase: GamePhase = GamePhase.WAITING
    round_number: int = 0
    max_rounds: int
    current_player_index: int = 0
    first_player_index: int = 0
    last_raise_player_index: Optional[int] = None
    is_new_deck: bool = False
    winner: Optional[str] = None
    is_draw: bool = False
    round_history: tuple[RoundResult, ...] = ()

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def player_index(self, player_id: str) -> Optional[int]:
        if not player_id:
            return None
        for i, p in enumerate(self.players):
            if p.id == player_id:
                return i
        return None

    def update_player(self, idx: int, **kwargs: Any) -> GameState:
        players = list(self.players)
        players[idx] = players[idx].update(**kwargs)
        return self.update(players=tuple(players))

    def total_chips(self) -> int:
        """Chips on the table: both stacks plus the pot."""
        return self.players[0].chips + self.players[1].chips + self.pot


class GameEvent(_Frozen):
    type: EventType
    message: str
    player_id: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class ActionResult(_Frozen):
    success: bool
    new_state: GameState
    message: str
    events: tuple[GameEvent, ...] = ()
    error: Optional[ErrorKind] = None

    @classmethod
    def ok(
        cls, state: GameState, message: str, events: list[GameEvent] | tuple[GameEvent, ...] = ()
    ) -> ActionResult:
        return cls(success=True, new_state=state, message=message, events=tuple(events))

    @classmethod
    def fail(cls, state: GameState, message: str, error: ErrorKind) -> ActionResult:
        return cls(success=False, new_state=state, message=message, error=error)


class ValidAction(_Frozen):
    type: ActionType
    description: str
    min_amount: Optional[int] = None
    max_amount: Optional[int] = None


class PublicPlayer(_Frozen):
    """Fields of a seat that both players may see."""

    id: str
    name: str
    chips: int
    current_bet: int
    has_folded: bool
    # Ability fields are only populated when the variant has abilities.
    has_peeked: Optional[bool] = None
    has_used_ability: Optional[bool] = None
    peek_count: Optional[int] = None
    swap_count: Optional[int] = None


class PlayerView(_Frozen):
    game_id: str
    variant: Variant
    phase: GamePhase
    round_number: int
    max_rounds: int
    pot: int
    current_player_index: int
    first_player_index: int
    my_index: int
    my_card: Optional[int]
    opponent_card: Optional[int]
    me: PublicPlayer
    opponent: PublicPlayer
    winner: Optional[str]
    is_draw: bool
    round_history: tuple[RoundResult, ...]
    deck_remaining: int
    is_new_deck: bool
    valid_actions: tuple[ValidAction, ...] = ()
