"""Core game engine for two-player Indian poker.

Owns the round/turn state machine: dealing and antes, the optional ability
phase, betting, showdown, and game termination. Every call takes an
immutable ``GameState`` and returns a new one; rejected actions hand back
the input snapshot untouched.
"""

from __future__ import annotations

import logging
import random
import string
from typing import Any, Callable, Mapping, NamedTuple, Optional

from pydantic import ValidationError

from indian_poker import abilities, betting
from indian_poker.actions import (
    ABILITY_ACTIONS,
    BETTING_ACTIONS,
    ActionType,
    GameAction,
    parse_action,
)
from indian_poker.cards import RandomShuffler, Shuffler, draw
from indian_poker.rules import INDIAN_POKER_RULES, RuleSet
from indian_poker.showdown import resolve_showdown
from indian_poker.state import (
    ActionResult,
    ErrorKind,
    EventType,
    GameEvent,
    GamePhase,
    GameState,
    Player,
    PlayerView,
    PublicPlayer,
    ValidAction,
)

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits

# Actions other than START_ROUND that each phase accepts.
_PHASE_ACTIONS: dict[GamePhase, frozenset[ActionType]] = {
    GamePhase.ABILITY: ABILITY_ACTIONS,
    GamePhase.BETTING: BETTING_ACTIONS,
}


def _generate_id(length: int = 8) -> str:
    return "".join(random.choices(_ID_ALPHABET, k=length))


class _Transition(NamedTuple):
    """Outcome of one pipeline step: continue with ``state`` or stop."""

    state: GameState
    events: tuple[GameEvent, ...] = ()
    message: Optional[str] = None
    terminal: bool = False
    failure: Optional[str] = None


Step = Callable[[GameState], _Transition]


class GameEngine:
    """Stateless rules engine for a single two-seat table.

    ``rules`` selects the variant; ``shuffler`` is the only source of
    randomness in dealing.
    """

    def __init__(
        self,
        rules: RuleSet = INDIAN_POKER_RULES,
        shuffler: Optional[Shuffler] = None,
    ) -> None:
        self.rules = rules
        self.shuffler: Shuffler = shuffler if shuffler is not None else RandomShuffler()

    # ------------------------------------------------------------------
    # Table setup
    # ------------------------------------------------------------------

    def _new_player(self, player_id: str, name: str) -> Player:
        return Player(
            id=player_id,
            name=name,
            chips=self.rules.starting_chips,
            peek_count=self.rules.peek_count,
            swap_count=self.rules.swap_count,
        )

    def create_game(self, player: Mapping[str, Any]) -> GameState:
        """New table in ``waiting`` with seat 1 filled and seat 2 empty."""
        return GameState(
            id=_generate_id(),
            variant=self.rules.name,
            players=(self._new_player(player["id"], player["name"]), self._new_player("", "")),
            max_rounds=self.rules.max_rounds,
        )

    def join_game(self, state: GameState, player: Mapping[str, Any]) -> GameState:
        """Fill seat 2. The session layer guarantees this happens once."""
        return state.update(
            players=(state.players[0], self._new_player(player["id"], player["name"]))
        )

    # ------------------------------------------------------------------
    # Action dispatch
    # ------------------------------------------------------------------

    def execute_action(
        self,
        state: GameState,
        action: GameAction | Mapping[str, Any],
        acting_player_id: Optional[str] = None,
    ) -> ActionResult:
        """Apply one action and every transition it triggers."""
        try:
            action = parse_action(action)
        except ValidationError as e:
            return self._reject(state, f"Invalid action: {e.errors()[0]['msg']}", ErrorKind.MALFORMED)

        if action.type == ActionType.START_ROUND:
            return self._start_round(state)

        current = state.current_player
        actor = acting_player_id if acting_player_id is not None else current.id
        if actor != current.id:
            return self._reject(state, "It is not your turn", ErrorKind.TURN)

        if action.type not in _PHASE_ACTIONS.get(state.phase, frozenset()):
            return self._reject(
                state,
                f"{action.type.value} is not allowed during the {state.phase.value} phase",
                ErrorKind.PHASE,
            )

        if action.type == ActionType.PEEK:
            result = abilities.peek(state, actor)
            steps: tuple[Step, ...] = (self._ability_handoff_step,)
        elif action.type == ActionType.SWAP:
            result = abilities.swap(state, actor)
            steps = (self._ability_handoff_step,)
        elif action.type == ActionType.SKIP_ABILITY:
            result = abilities.skip_ability(state, actor)
            steps = (self._ability_handoff_step,)
        elif action.type == ActionType.RAISE:
            result = betting.raise_bet(state, actor, action.amount, self.rules.min_raise)
            steps = ()
        elif action.type == ActionType.CALL:
            result = betting.call(state, actor, self.rules)
            steps = (self._showdown_step, self._post_round_step)
        elif action.type == ActionType.FOLD:
            result = betting.fold(state, actor, self.rules)
            steps = (self._post_round_step,)
        else:
            return self._reject(state, "Unknown action", ErrorKind.MALFORMED)

        if not result.success:
            logger.debug("Rejected %s in game %s: %s", action.type.value, state.id, result.message)
            return result
        return self._run_pipeline(state, result, steps)

    def _reject(self, state: GameState, message: str, error: ErrorKind) -> ActionResult:
        logger.debug("Rejected action in game %s (%s): %s", state.id, error.value, message)
        return ActionResult.fail(state, message, error)

    def _run_pipeline(
        self, original: GameState, result: ActionResult, steps: tuple[Step, ...]
    ) -> ActionResult:
        """Fold the resolver's result through the follow-up transitions.

        Stops at the first terminal step; a failing step discards the whole
        chain so the caller only ever sees the original snapshot.
        """
        state = result.new_state
        events = list(result.events)
        message = result.message
        for step in steps:
            outcome = step(state)
            if outcome.failure is not None:
                return self._reject(original, outcome.failure, ErrorKind.PRECONDITION)
            state = outcome.state
            events.extend(outcome.events)
            if outcome.message is not None:
                message = outcome.message
            if outcome.terminal:
                break
        return ActionResult.ok(state, message, events)

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _ability_handoff_step(self, state: GameState) -> _Transition:
        """Pass the turn to the other seat, or open betting once both are done."""
        other_idx = 1 - state.current_player_index
        if not state.players[other_idx].has_used_ability:
            return _Transition(state.update(current_player_index=other_idx))

        first = state.players[state.first_player_index]
        opened = state.update(
            phase=GamePhase.BETTING,
            current_player_index=state.first_player_index,
            last_raise_player_index=None,
        )
        event = GameEvent(
            type=EventType.BETTING_OPEN,
            player_id=first.id,
            message=f"Betting opens. {first.name} acts first.",
        )
        return _Transition(opened, (event,), terminal=True)

    def _showdown_step(self, state: GameState) -> _Transition:
        if state.phase != GamePhase.SHOWDOWN:
            return _Transition(state)
        result = resolve_showdown(state)
        if not result.success:
            return _Transition(state, failure=result.message)
        return _Transition(result.new_state, result.events, result.message)

    def _post_round_step(self, state: GameState) -> _Transition:
        """End the game once someone is broke or the last round is played."""
        if state.phase != GamePhase.ROUND_END:
            return _Transition(state)
        broke = any(p.chips <= 0 for p in state.players)
        if broke or state.round_number >= state.max_rounds:
            ended = self._end_game(state)
            return _Transition(ended.new_state, ended.events, ended.message, terminal=True)
        return _Transition(state)

    # ------------------------------------------------------------------
    # Round lifecycle
    # ------------------------------------------------------------------

    def _start_round(self, state: GameState) -> ActionResult:
        if state.phase not in (GamePhase.WAITING, GamePhase.ROUND_END):
            return self._reject(state, "A round cannot be started now", ErrorKind.PRECONDITION)
        if not state.players[1].is_seated:
            return self._reject(state, "Waiting for an opponent to join", ErrorKind.PRECONDITION)

        round_number = state.round_number + 1
        if round_number > state.max_rounds or any(p.chips <= 0 for p in state.players):
            return self._end_game(state)

        events: list[GameEvent] = []
        discard = state.discard_pile + tuple(p.card for p in state.players if p.card is not None)
        is_new_deck = len(state.deck) < 2
        if is_new_deck:
            deck = tuple(self.shuffler.shuffle(self.rules.deck))
            discard = ()
            events.append(
                GameEvent(
                    type=EventType.DECK_SHUFFLED,
                    message=f"A fresh {len(deck)}-card deck is shuffled.",
                    data={"deck_size": len(deck)},
                )
            )
        else:
            deck = state.deck

        (card0, card1), deck = draw(deck, 2)

        # Round 1 always opens with seat 0; afterwards the opener alternates.
        first = 0 if state.round_number == 0 else 1 - state.first_player_index

        antes = []
        players = []
        for p, card in zip(state.players, (card0, card1)):
            ante = min(self.rules.ante, p.chips)
            antes.append(ante)
            players.append(
                p.update(
                    card=card,
                    chips=p.chips - ante,
                    current_bet=ante,
                    has_folded=False,
                    has_peeked=False,
                    has_used_ability=False,
                )
            )

        phase = GamePhase.ABILITY if self.rules.abilities_enabled else GamePhase.BETTING
        new_state = state.update(
            players=tuple(players),
            deck=deck,
            discard_pile=discard,
            pot=sum(antes),
            phase=phase,
            round_number=round_number,
            current_player_index=first,
            first_player_index=first,
            last_raise_player_index=None,
            is_new_deck=is_new_deck,
        )

        events.append(
            GameEvent(
                type=EventType.ROUND_START,
                player_id=players[first].id,
                message=f"Round {round_number} begins. Antes total {sum(antes)} chip(s).",
                data={"round_number": round_number, "antes": antes},
            )
        )
        logger.info("Game %s: round %d started (%s)", state.id, round_number, phase.value)
        return ActionResult.ok(new_state, f"Round {round_number} started.", events)

    def _end_game(self, state: GameState) -> ActionResult:
        """Final outcome: more chips wins, equal chips is a draw."""
        p0, p1 = state.players
        winner: Optional[str] = None
        if p0.chips > p1.chips:
            winner = p0.id
        elif p1.chips > p0.chips:
            winner = p1.id
        is_draw = winner is None

        if is_draw:
            message = f"Game over! Draw at {p0.chips} chips each."
        else:
            winner_name = p0.name if winner == p0.id else p1.name
            message = f"Game over! {winner_name} wins."

        event = GameEvent(
            type=EventType.GAME_OVER,
            player_id=winner,
            message=message,
            data={"player0_chips": p0.chips, "player1_chips": p1.chips},
        )
        logger.info("Game %s over after round %d: winner=%s draw=%s",
                    state.id, state.round_number, winner, is_draw)
        return ActionResult.ok(
            state.update(phase=GamePhase.GAME_OVER, winner=winner, is_draw=is_draw),
            message,
            [event],
        )

    # ------------------------------------------------------------------
    # Read projections
    # ------------------------------------------------------------------

    def get_valid_actions(
        self, state: GameState, player_id: Optional[str] = None
    ) -> list[ValidAction]:
        """Actions the player may take right now; empty when it is not their turn."""
        current = state.current_player
        if (player_id if player_id is not None else current.id) != current.id:
            return []

        if state.phase == GamePhase.WAITING:
            if state.players[1].is_seated:
                return [ValidAction(type=ActionType.START_ROUND, description="Start the game")]
            return []
        if state.phase == GamePhase.ROUND_END:
            return [ValidAction(type=ActionType.START_ROUND, description="Start the next round")]
        if state.phase == GamePhase.ABILITY:
            return self._ability_actions(state, state.current_player_index)
        if state.phase == GamePhase.BETTING:
            return self._betting_actions(state, state.current_player_index)
        return []

    def _ability_actions(self, state: GameState, idx: int) -> list[ValidAction]:
        player = state.players[idx]
        if player.has_used_ability:
            return []

        actions: list[ValidAction] = []
        if player.peek_count > 0 and not player.has_peeked:
            actions.append(
                ValidAction(type=ActionType.PEEK, description=f"Peek ({player.peek_count} left)")
            )
        if player.swap_count > 0 and state.deck:
            actions.append(
                ValidAction(type=ActionType.SWAP, description=f"Swap ({player.swap_count} left)")
            )
        actions.append(ValidAction(type=ActionType.SKIP_ABILITY, description="Skip ability"))
        return actions

    def _betting_actions(self, state: GameState, idx: int) -> list[ValidAction]:
        player = state.players[idx]
        owed = betting.call_amount(state, idx)
        raisable = betting.can_raise(state, idx, self.rules.min_raise)

        actions: list[ValidAction] = []
        if raisable:
            max_raise = player.chips - owed
            actions.append(
                ValidAction(
                    type=ActionType.RAISE,
                    description=f"Raise ({self.rules.min_raise}-{max_raise} chips)",
                    min_amount=self.rules.min_raise,
                    max_amount=max_raise,
                )
            )
        if owed > 0:
            actions.append(
                ValidAction(
                    type=ActionType.CALL,
                    description=f"Call ({min(owed, player.chips)} chips)",
                )
            )
        elif self.rules.opening_check_allowed or not raisable:
            actions.append(ValidAction(type=ActionType.CALL, description="Check"))
        if owed > 0 or self.rules.opening_fold_allowed:
            actions.append(ValidAction(type=ActionType.FOLD, description="Fold"))
        return actions

    def _public(self, player: Player) -> PublicPlayer:
        data: dict[str, Any] = {
            "id": player.id,
            "name": player.name,
            "chips": player.chips,
            "current_bet": player.current_bet,
            "has_folded": player.has_folded,
        }
        if self.rules.abilities_enabled:
            data.update(
                has_peeked=player.has_peeked,
                has_used_ability=player.has_used_ability,
                peek_count=player.peek_count,
                swap_count=player.swap_count,
            )
        return PublicPlayer(**data)

    def get_player_view(self, state: GameState, player_id: str) -> PlayerView:
        """Per-player projection: the opponent's card is shown, your own is not.

        In the ability variant your own card shows only after a peek.
        """
        my_index = state.player_index(player_id)
        if my_index is None:
            raise ValueError("Player not found")

        me = state.players[my_index]
        opponent = state.players[1 - my_index]
        my_card = me.card if self.rules.abilities_enabled and me.has_peeked else None

        return PlayerView(
            game_id=state.id,
            variant=state.variant,
            phase=state.phase,
            round_number=state.round_number,
            max_rounds=state.max_rounds,
            pot=state.pot,
            current_player_index=state.current_player_index,
            first_player_index=state.first_player_index,
            my_index=my_index,
            my_card=my_card,
            opponent_card=opponent.card,
            me=self._public(me),
            opponent=self._public(opponent),
            winner=state.winner,
            is_draw=state.is_draw,
            round_history=state.round_history,
            deck_remaining=len(state.deck),
            is_new_deck=state.is_new_deck,
            valid_actions=tuple(self.get_valid_actions(state, player_id)),
        )
