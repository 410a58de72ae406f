"""Tests for action payload validation."""

import pytest
from pydantic import ValidationError

from indian_poker.actions import (
    ActionType,
    Call,
    Fold,
    Raise,
    StartRound,
    parse_action,
)


class TestParseAction:
    def test_no_payload_actions(self):
        for t in ("START_ROUND", "PEEK", "SWAP", "SKIP_ABILITY", "CALL", "FOLD"):
            action = parse_action({"type": t})
            assert action.type == ActionType(t)

    def test_raise_with_amount(self):
        action = parse_action({"type": "RAISE", "amount": 3})
        assert isinstance(action, Raise)
        assert action.amount == 3

    def test_model_instances_pass_through(self):
        action = Call()
        assert parse_action(action) is action

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "ALL_IN"})

    def test_missing_type(self):
        with pytest.raises(ValidationError):
            parse_action({"amount": 2})

    def test_raise_without_amount(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "RAISE"})

    def test_raise_non_integer_amount(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "RAISE", "amount": "lots"})

    @pytest.mark.parametrize("amount", [True, "3", 2.0, 2.5, None])
    def test_raise_amount_is_not_coerced(self, amount):
        with pytest.raises(ValidationError):
            parse_action({"type": "RAISE", "amount": amount})

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "FOLD", "amount": 1})

    def test_non_positive_amount_is_shape_valid(self):
        # The engine rejects these as a resource violation
        assert parse_action({"type": "RAISE", "amount": 0}).amount == 0


class TestActionModels:
    def test_default_type_tags(self):
        assert StartRound().type == ActionType.START_ROUND
        assert Fold().type == ActionType.FOLD

    def test_actions_are_frozen(self):
        action = Raise(amount=1)
        with pytest.raises(ValidationError):
            action.amount = 5
