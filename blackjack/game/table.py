"""Stateful table driver over the pure round engine."""

from decimal import Decimal
from random import Random
from typing import Callable

from transitions import Machine

from blackjack.hand import format_hand_value
from blackjack.strategy.rules import RuleSet
from blackjack.strategy.advisor import recommend_action
from blackjack.game.actions import (
    PlayerAction,
    dealer_hand_value,
    legal_actions,
    player_hand_value,
)
from blackjack.game.engine import init_state, next_state
from blackjack.game.errors import InvalidUseError, UnreachableStateError
from blackjack.game.events import EventEmitter, EventType, GameEvent
from blackjack.game.outcome import HandOutcome, Result, determine_outcomes, settle
from blackjack.game.state import Phase, RoundState

# Machine trigger fired for each engine phase change
_PHASE_TRIGGERS: dict[tuple[Phase, Phase], str] = {
    (Phase.DEALING, Phase.DEALING): "deal_card",
    (Phase.DEALING, Phase.PLAYER_TURN): "deal_complete",
    (Phase.DEALING, Phase.DEALER_TURN): "player_has_21",
    (Phase.DEALING, Phase.GAME_OVER): "round_decided",
    (Phase.PLAYER_TURN, Phase.PLAYER_TURN): "player_continues",
    (Phase.PLAYER_TURN, Phase.DEALING): "open_split_hand",
    (Phase.PLAYER_TURN, Phase.DEALER_TURN): "player_done",
    (Phase.PLAYER_TURN, Phase.GAME_OVER): "player_busts_all",
    (Phase.DEALER_TURN, Phase.DEALER_TURN): "dealer_draws",
    (Phase.DEALER_TURN, Phase.GAME_OVER): "dealer_done",
}

_PLAYER_EVENTS = {
    PlayerAction.HIT: EventType.PLAYER_HIT,
    PlayerAction.STAND: EventType.PLAYER_STAND,
    PlayerAction.DOUBLE: EventType.PLAYER_DOUBLE,
    PlayerAction.SPLIT: EventType.PLAYER_SPLIT,
}

_RESULT_EVENTS = {
    Result.PLAYER_WIN: EventType.PLAYER_WINS,
    Result.DEALER_WIN: EventType.PLAYER_LOSES,
    Result.PUSH: EventType.PUSH,
}


class BlackjackTable:
    """
    A single seat at a blackjack table.

    Keeps the bankroll and the current round, and publishes events as the
    round advances. The round itself is only ever changed through the pure
    engine; the state machine here mirrors its phases and rejects any phase
    change the engine should never make.
    """

    STATES = ["waiting_for_bet"] + [phase.name.lower() for phase in Phase]

    TRANSITIONS = [
        {"trigger": "start_round", "source": ["waiting_for_bet", "game_over"], "dest": "dealing"},
        {"trigger": "deal_card", "source": "dealing", "dest": "dealing"},
        {"trigger": "deal_complete", "source": "dealing", "dest": "player_turn"},
        {"trigger": "player_has_21", "source": "dealing", "dest": "dealer_turn"},
        {"trigger": "round_decided", "source": "dealing", "dest": "game_over"},
        {"trigger": "player_continues", "source": "player_turn", "dest": "player_turn"},
        {"trigger": "open_split_hand", "source": "player_turn", "dest": "dealing"},
        {"trigger": "player_done", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "player_busts_all", "source": "player_turn", "dest": "game_over"},
        {"trigger": "dealer_draws", "source": "dealer_turn", "dest": "dealer_turn"},
        {"trigger": "dealer_done", "source": "dealer_turn", "dest": "game_over"},
    ]

    def __init__(
        self,
        rules: RuleSet | None = None,
        initial_bankroll: Decimal = Decimal("1000"),
        min_bet: int = 1,
        max_bet: int | None = None,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a table.

        Args:
            rules: Table rules (uses defaults if not provided)
            initial_bankroll: Starting bankroll
            min_bet: Smallest accepted opening bet
            max_bet: Largest accepted opening bet (unlimited if None)
            rng: Random number generator for reproducible shoes
        """
        self.rules = rules or RuleSet()
        self.bankroll = Decimal(str(initial_bankroll))
        self.min_bet = min_bet
        self.max_bet = max_bet
        self.events = EventEmitter()
        self._rng = rng or Random()
        self._round: RoundState | None = None
        self._settled = False

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="waiting_for_bet",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def round(self) -> RoundState | None:
        """The current (or last finished) round."""
        return self._round

    @property
    def phase(self) -> Phase | None:
        """Phase of the current round, None before the first bet."""
        if self._machine_state == "waiting_for_bet":
            return None
        return Phase[self._machine_state.upper()]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to table events."""
        self.events.subscribe(handler, event_type)

    def bet(self, amount: Decimal | int, shoe=None) -> RoundState:
        """
        Place a bet and start a new round.

        Args:
            amount: Opening bet
            shoe: Optional pre-arranged shoe for the round

        Returns:
            The new round, ready to be dealt

        Raises:
            InvalidUseError: If a round is still in progress
            ValueError: If the bet is outside table limits or the bankroll
        """
        if self._machine_state not in ("waiting_for_bet", "game_over"):
            raise InvalidUseError(f"Cannot bet while the round is in {self.phase}")

        stake = Decimal(str(amount))
        if stake < self.min_bet or (self.max_bet is not None and stake > self.max_bet):
            limit = f"{self.min_bet} and {self.max_bet}" if self.max_bet else f"at least {self.min_bet}"
            raise ValueError(f"Bet must be {limit}")
        self._require_funds(stake)

        self._round = init_state(stake, rules=self.rules, rng=self._rng, shoe=shoe)
        self.bankroll -= stake
        self._settled = False
        self.start_round()

        # History covers the current round only
        self.events.clear_history()
        self.events.emit_new(EventType.BET_PLACED, amount=float(stake))
        self.events.emit_new(EventType.ROUND_STARTED, cards_remaining=self._round.shoe.cards_remaining)
        return self._round

    def advance(self, action: PlayerAction | str | None = None) -> RoundState:
        """
        Apply one engine transition to the current round.

        Raises:
            InvalidUseError: If the action is illegal or no round is running
        """
        previous = self._current_round()
        if isinstance(action, str):
            # Unknown names are left for the engine to reject
            action = next((a for a in PlayerAction if a.value == action.lower()), action)
        if (
            previous.phase == Phase.PLAYER_TURN
            and action in (PlayerAction.DOUBLE, PlayerAction.SPLIT)
            and action in legal_actions(previous)
        ):
            self._require_funds(previous.starting_bet)

        try:
            current = next_state(previous, action)
        except InvalidUseError as exc:
            self.events.emit_new(
                EventType.INVALID_ACTION,
                message=str(exc),
                action=str(action) if action else None,
            )
            raise

        self._fire(previous.phase, current.phase)
        self.bankroll -= current.total_wagered - previous.total_wagered
        self._round = current

        self._emit_changes(previous, current, action)
        if current.phase == Phase.GAME_OVER:
            self._settle()
        return current

    def auto_advance(self) -> RoundState:
        """Advance until the player must decide or the round is over."""
        current = self._current_round()
        while current.phase not in (Phase.PLAYER_TURN, Phase.GAME_OVER):
            current = self.advance()
        return current

    def act(self, action: PlayerAction | str) -> RoundState:
        """Apply a player decision, then run the round to the next decision."""
        self.advance(action)
        return self.auto_advance()

    def legal_actions(self) -> tuple[PlayerAction, ...]:
        """Legal actions, or none when the player has no decision to make."""
        if self._round is None or self._round.phase != Phase.PLAYER_TURN:
            return ()
        return legal_actions(self._round)

    def suggest(self) -> PlayerAction:
        """Basic strategy recommendation for the actionable hand."""
        return recommend_action(self._current_round())

    def outcomes(self) -> tuple[HandOutcome, ...]:
        """Outcome of every hand of the finished round."""
        return determine_outcomes(self._current_round())

    def _current_round(self) -> RoundState:
        if self._round is None:
            raise InvalidUseError("No round in progress, place a bet first")
        return self._round

    def _require_funds(self, amount: Decimal) -> None:
        if amount > self.bankroll:
            self.events.emit_new(
                EventType.INSUFFICIENT_FUNDS,
                required=float(amount),
                available=float(self.bankroll),
            )
            raise ValueError(f"Insufficient funds: {amount} required, {self.bankroll} available")

    def _fire(self, source: Phase, dest: Phase) -> None:
        trigger = _PHASE_TRIGGERS.get((source, dest))
        if trigger is None:
            raise UnreachableStateError(f"No table transition for {source} -> {dest}")
        getattr(self, trigger)()

    def _emit_changes(
        self,
        previous: RoundState,
        current: RoundState,
        action: PlayerAction | None,
    ) -> None:
        """Publish events describing what a transition did."""
        if previous.phase == Phase.PLAYER_TURN and action is not None:
            index = previous.actionable_hand_index
            self.events.emit_new(
                _PLAYER_EVENTS[action],
                hand_index=index,
                hand_value=self._display_value(current, index),
            )

        for index, hand in enumerate(current.player_hands):
            before = previous.player_hands[index] if index < len(previous.player_hands) else ()
            if action == PlayerAction.SPLIT or len(hand) <= len(before):
                continue
            self.events.emit_new(
                EventType.CARD_DEALT,
                card=str(hand[-1]),
                hand="player",
                hand_index=index,
                hand_value=self._display_value(current, index),
            )
            value = player_hand_value(current, index)
            if value.is_bust:
                self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index)
            elif value.is_blackjack:
                self.events.emit_new(EventType.PLAYER_BLACKJACK, hand_index=index)

        dealer_before, dealer_after = previous.dealer_hand, current.dealer_hand
        if len(dealer_after) > len(dealer_before):
            card = dealer_after[-1]
            self.events.emit_new(EventType.CARD_DEALT, card=str(card), hand="dealer")
            if previous.phase == Phase.DEALER_TURN:
                self.events.emit_new(EventType.DEALER_HITS, hand_value=self._dealer_display(current))
            elif len(dealer_after) == 2 and current.rules.dealer_peeks:
                self.events.emit_new(EventType.DEALER_PEEKS)
        elif sum(c.face_down for c in dealer_after) < sum(c.face_down for c in dealer_before):
            self.events.emit_new(
                EventType.DEALER_REVEALS,
                card=str(dealer_after[1]),
                hand_value=self._dealer_display(current),
            )

        if current.phase == Phase.GAME_OVER and previous.phase == Phase.DEALING:
            self.events.emit_new(EventType.DEALER_BLACKJACK)
        elif current.phase == Phase.GAME_OVER and previous.phase == Phase.DEALER_TURN:
            if current.dealer_hand and dealer_hand_value(current).is_bust:
                self.events.emit_new(EventType.DEALER_BUSTS)
            else:
                self.events.emit_new(EventType.DEALER_STANDS, hand_value=self._dealer_display(current))

    def _settle(self) -> None:
        """Pay out a finished round into the bankroll, once."""
        if self._settled:
            return
        current = self._current_round()
        outcomes = determine_outcomes(current)
        payouts = settle(current)

        for index, (outcome, paid, staked) in enumerate(zip(outcomes, payouts, current.bets)):
            self.events.emit_new(
                _RESULT_EVENTS[outcome.result],
                hand_index=index,
                reason=str(outcome.reason) if outcome.reason else None,
                amount=float(paid - staked),
            )

        total = sum(payouts, Decimal("0"))
        self.bankroll += total
        self._settled = True
        self.events.emit_new(
            EventType.ROUND_ENDED,
            result=float(total - current.total_wagered),
            bankroll=float(self.bankroll),
        )

    @staticmethod
    def _display_value(state: RoundState, index: int) -> int | str:
        return format_hand_value(player_hand_value(state, index))

    @staticmethod
    def _dealer_display(state: RoundState) -> int | str:
        return format_hand_value(dealer_hand_value(state))
