"""Tests for the betting resolver: raise, call/check, fold."""

from indian_poker.betting import call, call_amount, can_raise, fold, raise_bet
from indian_poker.rules import DUEL_RULES, INDIAN_POKER_RULES, Variant
from indian_poker.state import (
    ErrorKind,
    EventType,
    GamePhase,
    GameState,
    Player,
)


# ── Helpers ──────────────────────────────────────────────────────────

def _make_state(
    chips=(19, 19),
    bets=(1, 1),
    cards=(8, 3),
    current: int = 0,
    variant: Variant = Variant.INDIAN,
) -> GameState:
    players = tuple(
        Player(id=f"p{i + 1}", name=name, chips=chips[i], card=cards[i], current_bet=bets[i])
        for i, name in enumerate(("Alice", "Bob"))
    )
    return GameState(
        id="g1",
        variant=variant,
        players=players,
        pot=sum(bets),
        phase=GamePhase.BETTING,
        round_number=1,
        max_rounds=5,
        current_player_index=current,
    )


# ── call_amount / can_raise ──────────────────────────────────────────

class TestCallAmount:
    def test_behind(self):
        state = _make_state(bets=(3, 1))
        assert call_amount(state, 1) == 2

    def test_ahead_is_zero(self):
        state = _make_state(bets=(3, 1))
        assert call_amount(state, 0) == 0

    def test_can_raise_needs_chips_beyond_call(self):
        state = _make_state(chips=(19, 2), bets=(3, 1))
        assert not can_raise(state, 1)
        state = _make_state(chips=(19, 3), bets=(3, 1))
        assert can_raise(state, 1)


# ── raise ────────────────────────────────────────────────────────────

class TestRaise:
    def test_opening_raise(self):
        state = _make_state()
        result = raise_bet(state, "p1", 2)
        assert result.success
        s = result.new_state
        assert s.players[0].chips == 17
        assert s.players[0].current_bet == 3
        assert s.pot == 4
        assert s.current_player_index == 1
        assert s.last_raise_player_index == 0
        assert s.phase == GamePhase.BETTING
        assert result.events[0].type == EventType.RAISE
        assert result.events[0].data == {"amount": 2, "total_bet": 3}

    def test_reraise_pays_call_first(self):
        state = _make_state(chips=(17, 19), bets=(3, 1), current=1)
        result = raise_bet(state, "p2", 2)
        assert result.success
        s = result.new_state
        assert s.players[1].chips == 15
        assert s.players[1].current_bet == 5
        assert s.pot == 8
        assert s.current_player_index == 0

    def test_exact_stack_allowed(self):
        state = _make_state(chips=(19, 5), bets=(3, 1), current=1)
        result = raise_bet(state, "p2", 3)
        assert result.success
        assert result.new_state.players[1].chips == 0

    def test_over_stack_rejected(self):
        state = _make_state(chips=(19, 5), bets=(3, 1), current=1)
        result = raise_bet(state, "p2", 4)
        assert not result.success
        assert result.error == ErrorKind.RESOURCE
        assert result.message == "Not enough chips"
        assert result.new_state is state

    def test_zero_rejected(self):
        state = _make_state()
        result = raise_bet(state, "p1", 0)
        assert not result.success
        assert result.error == ErrorKind.RESOURCE

    def test_negative_rejected(self):
        state = _make_state()
        result = raise_bet(state, "p1", -3)
        assert not result.success
        assert result.new_state is state

    def test_unknown_player(self):
        state = _make_state()
        result = raise_bet(state, "ghost", 1)
        assert not result.success
        assert result.error == ErrorKind.LOOKUP


# ── call / check ─────────────────────────────────────────────────────

class TestCall:
    def test_call_matches_bet(self):
        state = _make_state(chips=(17, 19), bets=(3, 1), current=1)
        result = call(state, "p2", INDIAN_POKER_RULES)
        assert result.success
        s = result.new_state
        assert s.players[1].chips == 17
        assert s.players[1].current_bet == 3
        assert s.pot == 6
        assert s.phase == GamePhase.SHOWDOWN
        assert result.events[0].type == EventType.CALL
        assert result.events[0].data == {"amount": 2, "all_in": False}

    def test_short_call_goes_all_in(self):
        state = _make_state(chips=(14, 1), bets=(6, 1), current=1)
        result = call(state, "p2", INDIAN_POKER_RULES)
        assert result.success
        s = result.new_state
        assert s.players[1].chips == 0
        assert s.players[1].current_bet == 2
        assert s.pot == 8
        assert result.events[0].data["all_in"] is True

    def test_check_moves_to_showdown(self):
        state = _make_state()
        result = call(state, "p1", DUEL_RULES)
        assert result.success
        assert result.new_state.phase == GamePhase.SHOWDOWN
        assert result.new_state.pot == 2
        assert result.events[0].type == EventType.CHECK

    def test_opening_check_refused_when_variant_forbids(self):
        state = _make_state()
        result = call(state, "p1", INDIAN_POKER_RULES)
        assert not result.success
        assert result.error == ErrorKind.PHASE
        assert result.new_state is state

    def test_opening_check_allowed_when_cannot_raise(self):
        state = _make_state(chips=(0, 19))
        result = call(state, "p1", INDIAN_POKER_RULES)
        assert result.success
        assert result.events[0].type == EventType.CHECK

    def test_without_rules_check_is_allowed(self):
        state = _make_state()
        assert call(state, "p1").success

    def test_unknown_player(self):
        result = call(_make_state(), "ghost")
        assert result.error == ErrorKind.LOOKUP


# ── fold ─────────────────────────────────────────────────────────────

class TestFold:
    def test_opponent_takes_pot(self):
        state = _make_state(chips=(17, 19), bets=(3, 1), current=1)
        result = fold(state, "p2", INDIAN_POKER_RULES)
        assert result.success
        s = result.new_state
        assert s.players[0].chips == 21
        assert s.players[1].chips == 19
        assert s.players[1].has_folded
        assert s.pot == 0
        assert s.phase == GamePhase.ROUND_END

        rr = s.round_history[0]
        assert rr.winner == "p1"
        assert rr.folded_player_id == "p2"
        assert rr.pot_won == 4
        assert rr.player0_chip_change == 1
        assert rr.player1_chip_change == -1
        assert rr.penalty is None
        assert [e.type for e in result.events] == [EventType.FOLD]

    def test_folding_top_rank_pays_penalty(self):
        state = _make_state(chips=(17, 19), bets=(3, 1), cards=(4, 10), current=1)
        result = fold(state, "p2", INDIAN_POKER_RULES)
        assert result.success
        s = result.new_state
        assert s.players[1].chips == 14
        assert s.players[0].chips == 17 + 4 + 5
        rr = s.round_history[0]
        assert rr.penalty == 5
        assert rr.player0_chip_change == 6
        assert rr.player1_chip_change == -6
        assert [e.type for e in result.events] == [EventType.FOLD, EventType.FOLD_PENALTY]

    def test_penalty_capped_at_remaining_chips(self):
        state = _make_state(chips=(19, 2), cards=(4, 10), current=1)
        result = fold(state, "p2", INDIAN_POKER_RULES)
        s = result.new_state
        assert s.players[1].chips == 0
        assert s.round_history[0].penalty == 2
        assert s.total_chips() == state.total_chips()

    def test_no_penalty_in_duel(self):
        state = _make_state(bets=(3, 1), chips=(17, 19), cards=(4, 10), current=1,
                            variant=Variant.DUEL)
        result = fold(state, "p2", DUEL_RULES)
        assert result.success
        assert result.new_state.players[1].chips == 19
        assert result.new_state.round_history[0].penalty is None

    def test_opening_fold_refused_when_variant_forbids(self):
        state = _make_state(variant=Variant.DUEL)
        result = fold(state, "p1", DUEL_RULES)
        assert not result.success
        assert result.error == ErrorKind.PHASE
        assert result.new_state is state

    def test_opening_fold_allowed_in_indian(self):
        result = fold(_make_state(), "p1", INDIAN_POKER_RULES)
        assert result.success
        assert result.new_state.players[1].chips == 21

    def test_unknown_player(self):
        result = fold(_make_state(), "ghost", INDIAN_POKER_RULES)
        assert result.error == ErrorKind.LOOKUP
