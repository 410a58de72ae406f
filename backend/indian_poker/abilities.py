"""Ability resolver for the duel variant (peek / swap / skip).

Every player gets one ability use per round. These functions only record
the use; handing the turn over or opening betting is the engine's job.
"""

from __future__ import annotations

from indian_poker.cards import draw
from indian_poker.state import ActionResult, ErrorKind, EventType, GameEvent, GameState


def _used_up(state: GameState) -> ActionResult:
    return ActionResult.fail(
        state, "You already used your ability this round", ErrorKind.PHASE
    )


def peek(state: GameState, player_id: str) -> ActionResult:
    """Let a player look at their own card."""
    idx = state.player_index(player_id)
    if idx is None:
        return ActionResult.fail(state, "Player not found", ErrorKind.LOOKUP)

    player = state.players[idx]
    if player.has_used_ability:
        return _used_up(state)
    if player.peek_count <= 0:
        return ActionResult.fail(state, "No peeks left", ErrorKind.RESOURCE)
    if player.has_peeked:
        return ActionResult.fail(state, "You already know your card", ErrorKind.PHASE)

    new_state = state.update_player(
        idx,
        has_peeked=True,
        peek_count=player.peek_count - 1,
        has_used_ability=True,
    )
    event = GameEvent(
        type=EventType.PEEK,
        player_id=player_id,
        message=f"{player.name} peeks at their card.",
        data={"peeks_left": player.peek_count - 1},
    )
    return ActionResult.ok(new_state, "You peeked at your card.", [event])


def swap(state: GameState, player_id: str) -> ActionResult:
    """Discard the current card and draw the next one from the deck."""
    idx = state.player_index(player_id)
    if idx is None:
        return ActionResult.fail(state, "Player not found", ErrorKind.LOOKUP)

    player = state.players[idx]
    if player.has_used_ability:
        return _used_up(state)
    if player.swap_count <= 0:
        return ActionResult.fail(state, "No swaps left", ErrorKind.RESOURCE)
    if player.card is None:
        return ActionResult.fail(state, "No card to swap", ErrorKind.PRECONDITION)
    if not state.deck:
        return ActionResult.fail(state, "The deck is empty", ErrorKind.RESOURCE)

    (new_card,), deck = draw(state.deck)
    new_state = state.update_player(
        idx,
        card=new_card,
        swap_count=player.swap_count - 1,
        has_peeked=False,  # the new card is unseen
        has_used_ability=True,
    ).update(
        deck=deck,
        discard_pile=state.discard_pile + (player.card,),
    )
    event = GameEvent(
        type=EventType.SWAP,
        player_id=player_id,
        message=f"{player.name} swaps their card.",
        data={"swaps_left": player.swap_count - 1},
    )
    return ActionResult.ok(new_state, "You swapped your card.", [event])


def skip_ability(state: GameState, player_id: str) -> ActionResult:
    idx = state.player_index(player_id)
    if idx is None:
        return ActionResult.fail(state, "Player not found", ErrorKind.LOOKUP)

    player = state.players[idx]
    if player.has_used_ability:
        return _used_up(state)

    new_state = state.update_player(idx, has_used_ability=True)
    event = GameEvent(
        type=EventType.SKIP_ABILITY,
        player_id=player_id,
        message=f"{player.name} skips their ability.",
    )
    return ActionResult.ok(new_state, "Ability skipped.", [event])
