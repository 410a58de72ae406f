"""Tests for GameState JSON round-trips and snapshot immutability."""

import json

import pytest
from pydantic import ValidationError

from indian_poker.cards import StackedShuffler
from indian_poker.engine import GameEngine
from indian_poker.rules import DUEL_RULES, INDIAN_POKER_RULES, Variant
from indian_poker.state import GamePhase, GameState


def _mid_game_state(rules=INDIAN_POKER_RULES) -> tuple[GameEngine, GameState]:
    engine = GameEngine(rules=rules, shuffler=StackedShuffler())
    state = engine.join_game(
        engine.create_game({"id": "p1", "name": "Alice"}), {"id": "p2", "name": "Bob"}
    )
    for action in ({"type": "START_ROUND"}, {"type": "FOLD"}, {"type": "START_ROUND"}):
        state = engine.execute_action(state, action).new_state
    return engine, state


class TestGameStateJson:
    def test_round_trip(self):
        _, state = _mid_game_state()
        restored = GameState.model_validate_json(state.model_dump_json())
        assert restored == state

    def test_round_trip_keeps_tuples_and_enums(self):
        _, state = _mid_game_state()
        restored = GameState.model_validate_json(state.model_dump_json())
        assert isinstance(restored.players, tuple)
        assert isinstance(restored.deck, tuple)
        assert restored.phase is GamePhase.BETTING
        assert restored.variant is Variant.INDIAN
        assert restored.round_history[0].folded_player_id == "p1"

    def test_restored_state_keeps_playing(self):
        engine, state = _mid_game_state()
        restored = GameState.model_validate_json(state.model_dump_json())
        a = engine.execute_action(state, {"type": "RAISE", "amount": 2})
        b = engine.execute_action(restored, {"type": "RAISE", "amount": 2})
        assert a.new_state == b.new_state

    def test_enum_values_in_json(self):
        _, state = _mid_game_state()
        data = json.loads(state.model_dump_json())
        assert data["phase"] == "betting"
        assert data["variant"] == "indian"

    def test_negative_chips_rejected_on_load(self):
        _, state = _mid_game_state()
        data = json.loads(state.model_dump_json())
        data["players"][0]["chips"] = -1
        with pytest.raises(ValidationError):
            GameState.model_validate(data)


class TestPlayerViewJson:
    def test_own_card_absent_from_indian_view(self):
        engine, state = _mid_game_state()
        data = json.loads(engine.get_player_view(state, "p1").model_dump_json())
        assert data["my_card"] is None
        assert data["opponent_card"] == state.players[1].card
        assert "card" not in data["me"]
        assert "card" not in data["opponent"]

    def test_duel_view_exposes_ability_counters(self):
        engine, state = _mid_game_state(DUEL_RULES)
        data = json.loads(engine.get_player_view(state, "p2").model_dump_json())
        assert data["me"]["peek_count"] == 3
        assert data["opponent"]["swap_count"] == 3


class TestImmutability:
    def test_state_is_frozen(self):
        _, state = _mid_game_state()
        with pytest.raises(ValidationError):
            state.pot = 99

    def test_players_are_frozen(self):
        _, state = _mid_game_state()
        with pytest.raises(ValidationError):
            state.players[0].chips = 0

    def test_update_returns_new_snapshot(self):
        _, state = _mid_game_state()
        updated = state.update(pot=7)
        assert updated.pot == 7
        assert state.pot == 2
