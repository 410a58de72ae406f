"""Showdown resolver: reveal both cards, award or split the pot."""

from __future__ import annotations

from indian_poker.state import (
    ActionResult,
    ErrorKind,
    EventType,
    GameEvent,
    GamePhase,
    GameState,
    RoundResult,
)


def split_pot(pot: int, first_player_index: int) -> tuple[int, int]:
    """Split a tied pot between seat 0 and seat 1.

    The odd chip goes to the round's first-to-act player.
    """
    half, remainder = divmod(pot, 2)
    shares = [half, half]
    shares[first_player_index] += remainder
    return shares[0], shares[1]


def resolve_showdown(state: GameState) -> ActionResult:
    p0, p1 = state.players
    if p0.card is None or p1.card is None:
        return ActionResult.fail(state, "Cards have not been dealt", ErrorKind.PRECONDITION)

    pot = state.pot
    events = [
        GameEvent(
            type=EventType.SHOWDOWN,
            message=f"Showdown: {p0.name} ({p0.card}) vs {p1.name} ({p1.card})",
            data={"player0_card": p0.card, "player1_card": p1.card},
        )
    ]

    if p0.card == p1.card:
        share0, share1 = split_pot(pot, state.first_player_index)
        winner_id = None
        events.append(
            GameEvent(
                type=EventType.TIE,
                message=f"Tie! The {pot} chip pot is split.",
                data={"player0_share": share0, "player1_share": share1},
            )
        )
        message = "Tie! The pot is split."
    else:
        winner_idx = 0 if p0.card > p1.card else 1
        share0, share1 = (pot, 0) if winner_idx == 0 else (0, pot)
        winner = state.players[winner_idx]
        winner_id = winner.id
        events.append(
            GameEvent(
                type=EventType.WIN,
                player_id=winner.id,
                message=f"{winner.name} wins {pot} chip(s).",
                data={"pot": pot},
            )
        )
        message = f"{winner.name} wins {pot} chip(s)."

    result = RoundResult(
        round_number=state.round_number,
        player0_card=p0.card,
        player1_card=p1.card,
        winner=winner_id,
        pot_won=pot,
        player0_chip_change=share0 - p0.current_bet,
        player1_chip_change=share1 - p1.current_bet,
    )

    new_state = (
        state.update_player(0, chips=p0.chips + share0)
        .update_player(1, chips=p1.chips + share1)
        .update(
            pot=0,
            phase=GamePhase.ROUND_END,
            round_history=state.round_history + (result,),
        )
    )
    return ActionResult.ok(new_state, message, events)
