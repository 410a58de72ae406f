"""Tests for the rule presets."""

import pytest
from pydantic import ValidationError

from indian_poker.rules import (
    DUEL_RULES,
    INDIAN_POKER_RULES,
    Variant,
    get_rules,
)


class TestPresets:
    def test_indian_rules(self):
        r = INDIAN_POKER_RULES
        assert r.name == Variant.INDIAN
        assert len(r.deck) == 20
        assert r.starting_chips == 20
        assert r.ante == 1
        assert r.max_rounds == 5
        assert not r.abilities_enabled
        assert r.fold_penalty == 5
        assert not r.opening_check_allowed
        assert r.opening_fold_allowed

    def test_duel_rules(self):
        r = DUEL_RULES
        assert r.name == Variant.DUEL
        assert len(r.deck) == 10
        assert r.abilities_enabled
        assert r.peek_count == 3
        assert r.swap_count == 3
        assert r.fold_penalty == 0
        assert r.opening_check_allowed
        assert not r.opening_fold_allowed

    def test_max_rank(self):
        assert INDIAN_POKER_RULES.max_rank == 10
        assert DUEL_RULES.max_rank == 10

    def test_rules_are_frozen(self):
        with pytest.raises(ValidationError):
            INDIAN_POKER_RULES.ante = 2


class TestGetRules:
    def test_by_enum(self):
        assert get_rules(Variant.DUEL) is DUEL_RULES

    def test_by_string(self):
        assert get_rules("indian") is INDIAN_POKER_RULES

    def test_unknown_variant(self):
        with pytest.raises(ValueError, match="Unknown game variant"):
            get_rules("holdem")
