"""Betting resolver: raise, call (or check) and fold for a two-seat table.

Each function takes a snapshot and returns an ``ActionResult``; a failed
result always carries the untouched input state.
"""

from __future__ import annotations

from typing import Optional

from indian_poker.rules import MIN_RAISE_AMOUNT, RuleSet
from indian_poker.state import (
    ActionResult,
    ErrorKind,
    EventType,
    GameEvent,
    GamePhase,
    GameState,
    RoundResult,
)


def call_amount(state: GameState, idx: int) -> int:
    """Chips seat ``idx`` still owes to match the opponent's bet."""
    owed = state.players[1 - idx].current_bet - state.players[idx].current_bet
    return max(0, owed)


def can_raise(state: GameState, idx: int, min_raise: int = MIN_RAISE_AMOUNT) -> bool:
    """Whether seat ``idx`` can cover the call plus a minimum raise."""
    return state.players[idx].chips - call_amount(state, idx) >= min_raise


def _player_not_found(state: GameState) -> ActionResult:
    return ActionResult.fail(state, "Player not found", ErrorKind.LOOKUP)


def raise_bet(
    state: GameState, player_id: str, amount: int, min_raise: int = MIN_RAISE_AMOUNT
) -> ActionResult:
    """Match the opponent's bet and add ``amount`` on top."""
    idx = state.player_index(player_id)
    if idx is None:
        return _player_not_found(state)

    player = state.players[idx]
    if amount < min_raise:
        return ActionResult.fail(
            state, f"Raise must be at least {min_raise} chip(s)", ErrorKind.RESOURCE
        )

    total_needed = call_amount(state, idx) + amount
    if total_needed > player.chips:
        return ActionResult.fail(state, "Not enough chips", ErrorKind.RESOURCE)

    total_bet = player.current_bet + total_needed
    new_state = state.update_player(
        idx, chips=player.chips - total_needed, current_bet=total_bet
    ).update(
        pot=state.pot + total_needed,
        current_player_index=1 - idx,
        last_raise_player_index=idx,
    )

    event = GameEvent(
        type=EventType.RAISE,
        player_id=player_id,
        message=f"{player.name} raises {amount} chip(s).",
        data={"amount": amount, "total_bet": total_bet},
    )
    return ActionResult.ok(new_state, f"Raised {amount} chip(s).", [event])


def call(state: GameState, player_id: str, rules: Optional[RuleSet] = None) -> ActionResult:
    """Match the opponent's bet, all-in if short; a zero-cost call is a check.

    Either way betting closes and the round moves to showdown.
    """
    idx = state.player_index(player_id)
    if idx is None:
        return _player_not_found(state)

    player = state.players[idx]
    owed = call_amount(state, idx)
    if (
        owed == 0
        and rules is not None
        and not rules.opening_check_allowed
        and can_raise(state, idx, rules.min_raise)
    ):
        return ActionResult.fail(
            state, "You cannot check here; raise or fold", ErrorKind.PHASE
        )

    paid = min(owed, player.chips)
    new_state = state.update_player(
        idx, chips=player.chips - paid, current_bet=player.current_bet + paid
    ).update(pot=state.pot + paid, phase=GamePhase.SHOWDOWN)

    if paid > 0:
        all_in = paid == player.chips
        event = GameEvent(
            type=EventType.CALL,
            player_id=player_id,
            message=f"{player.name} calls {paid} chip(s)" + (" and is all-in." if all_in else "."),
            data={"amount": paid, "all_in": all_in},
        )
        message = f"Called {paid} chip(s)."
    else:
        event = GameEvent(
            type=EventType.CHECK,
            player_id=player_id,
            message=f"{player.name} checks.",
        )
        message = "Checked."
    return ActionResult.ok(new_state, message, [event])


def fold(state: GameState, player_id: str, rules: Optional[RuleSet] = None) -> ActionResult:
    """Forfeit the round; the opponent takes the pot (plus any fold penalty)."""
    idx = state.player_index(player_id)
    if idx is None:
        return _player_not_found(state)

    opp_idx = 1 - idx
    player = state.players[idx]
    opponent = state.players[opp_idx]

    if (
        rules is not None
        and not rules.opening_fold_allowed
        and call_amount(state, idx) == 0
    ):
        return ActionResult.fail(
            state, "Nothing to fold against; check instead", ErrorKind.PHASE
        )

    penalty = 0
    if rules is not None and rules.fold_penalty > 0 and player.card == rules.max_rank:
        penalty = min(rules.fold_penalty, player.chips)

    pot = state.pot
    changes = [0, 0]
    changes[opp_idx] = pot - opponent.current_bet + penalty
    changes[idx] = -player.current_bet - penalty

    result = RoundResult(
        round_number=state.round_number,
        player0_card=state.players[0].card,
        player1_card=state.players[1].card,
        winner=opponent.id,
        pot_won=pot,
        folded_player_id=player_id,
        player0_chip_change=changes[0],
        player1_chip_change=changes[1],
        penalty=penalty if penalty > 0 else None,
    )

    new_state = (
        state.update_player(idx, has_folded=True, chips=player.chips - penalty)
        .update_player(opp_idx, chips=opponent.chips + pot + penalty)
        .update(
            pot=0,
            phase=GamePhase.ROUND_END,
            round_history=state.round_history + (result,),
        )
    )

    events = [
        GameEvent(
            type=EventType.FOLD,
            player_id=player_id,
            message=f"{player.name} folds. {opponent.name} takes {pot} chip(s).",
            data={"pot": pot},
        )
    ]
    if penalty:
        events.append(
            GameEvent(
                type=EventType.FOLD_PENALTY,
                player_id=player_id,
                message=f"{player.name} folded a {player.card} and pays a {penalty} chip penalty.",
                data={"penalty": penalty},
            )
        )

    return ActionResult.ok(new_state, f"Folded. {opponent.name} takes the pot.", events)
