"""Game constants and the two supported rule variants."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from indian_poker.cards import build_deck

INITIAL_CHIPS = 20
ANTE_AMOUNT = 1
MAX_ROUNDS = 5
MIN_RAISE_AMOUNT = 1
INITIAL_PEEK_COUNT = 3
INITIAL_SWAP_COUNT = 3
FOLD_TEN_PENALTY = 5


class Variant(str, Enum):
    INDIAN = "indian"
    DUEL = "duel"


class RuleSet(BaseModel):
    """Immutable table rules injected into the engine."""

    model_config = ConfigDict(frozen=True)

    name: Variant
    starting_chips: int = Field(default=INITIAL_CHIPS, ge=1)
    ante: int = Field(default=ANTE_AMOUNT, ge=0)
    max_rounds: int = Field(default=MAX_ROUNDS, ge=1)
    min_raise: int = Field(default=MIN_RAISE_AMOUNT, ge=1)
    deck: tuple[int, ...]
    abilities_enabled: bool = False
    peek_count: int = Field(default=0, ge=0)
    swap_count: int = Field(default=0, ge=0)
    fold_penalty: int = Field(default=0, ge=0)  # charged when folding the top rank
    opening_check_allowed: bool = True
    opening_fold_allowed: bool = True

    @property
    def max_rank(self) -> int:
        return max(self.deck)


INDIAN_POKER_RULES = RuleSet(
    name=Variant.INDIAN,
    deck=build_deck(copies=2),
    fold_penalty=FOLD_TEN_PENALTY,
    opening_check_allowed=False,
    opening_fold_allowed=True,
)

DUEL_RULES = RuleSet(
    name=Variant.DUEL,
    deck=build_deck(copies=1),
    abilities_enabled=True,
    peek_count=INITIAL_PEEK_COUNT,
    swap_count=INITIAL_SWAP_COUNT,
    opening_check_allowed=True,
    opening_fold_allowed=False,
)

RULESETS: dict[Variant, RuleSet] = {
    Variant.INDIAN: INDIAN_POKER_RULES,
    Variant.DUEL: DUEL_RULES,
}


def get_rules(variant: Variant | str) -> RuleSet:
    """Look up a preset by variant name."""
    try:
        return RULESETS[Variant(variant)]
    except ValueError:
        raise ValueError(f"Unknown game variant: {variant}") from None
