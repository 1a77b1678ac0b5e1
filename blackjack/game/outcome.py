"""Outcome resolution and bet settlement."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from blackjack.hand import HandValue
from blackjack.strategy.rules import RuleSet
from blackjack.game.actions import dealer_hand_value, player_hand_value
from blackjack.game.errors import PhaseError
from blackjack.game.state import Phase, RoundState


class Result(Enum):
    """Who won a hand."""

    PLAYER_WIN = "player-win"
    DEALER_WIN = "dealer-win"
    PUSH = "push"

    def __str__(self) -> str:
        return self.value


class Reason(Enum):
    """Why a hand was won or lost."""

    BLACKJACK = "blackjack"
    PLAYER_BUST = "player-bust"
    DEALER_BUST = "dealer-bust"
    HIGHER_HAND = "higher-hand"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HandOutcome:
    """Result of one player hand against the dealer."""

    result: Result
    reason: Reason | None = None

    @property
    def is_blackjack_win(self) -> bool:
        return self.result == Result.PLAYER_WIN and self.reason == Reason.BLACKJACK

    def __str__(self) -> str:
        if self.reason is None:
            return str(self.result)
        return f"{self.result} ({self.reason})"


PUSH = HandOutcome(Result.PUSH)


def compare_hands(player: HandValue, dealer: HandValue) -> HandOutcome:
    """
    Compare a player hand value with the dealer's.

    Naturals are settled first; otherwise soft totals compare on their
    high side and a player bust loses even if the dealer also busts.
    """
    if player.is_blackjack and dealer.is_blackjack:
        return PUSH
    if player.is_blackjack:
        return HandOutcome(Result.PLAYER_WIN, Reason.BLACKJACK)
    if dealer.is_blackjack:
        return HandOutcome(Result.DEALER_WIN, Reason.BLACKJACK)

    player_total = player.total
    dealer_total = dealer.total
    if player_total > 21:
        return HandOutcome(Result.DEALER_WIN, Reason.PLAYER_BUST)
    if dealer_total > 21:
        return HandOutcome(Result.PLAYER_WIN, Reason.DEALER_BUST)
    if player_total > dealer_total:
        return HandOutcome(Result.PLAYER_WIN, Reason.HIGHER_HAND)
    if player_total < dealer_total:
        return HandOutcome(Result.DEALER_WIN, Reason.HIGHER_HAND)
    return PUSH


def determine_outcomes(state: RoundState) -> tuple[HandOutcome, ...]:
    """
    Resolve every player hand of a finished round.

    Args:
        state: A round in the GAME_OVER phase

    Returns:
        One outcome per player hand, index-aligned with state.bets

    Raises:
        PhaseError: If the round is not over
    """
    if state.phase != Phase.GAME_OVER:
        raise PhaseError("determine outcomes", Phase.GAME_OVER, state.phase)

    dealer = dealer_hand_value(state)
    return tuple(
        compare_hands(player_hand_value(state, i), dealer)
        for i in range(len(state.player_hands))
    )


def payout(outcome: HandOutcome, bet: Decimal, rules: RuleSet) -> Decimal:
    """
    Amount returned to the player for a hand, stake included.

    A win pays 2x the bet, a blackjack win pays bet x (1 + blackjack payout),
    a push returns the bet and a loss returns nothing.
    """
    if outcome.result == Result.PLAYER_WIN:
        if outcome.reason == Reason.BLACKJACK:
            return bet * (1 + Decimal(str(rules.blackjack_payout)))
        return bet * 2
    if outcome.result == Result.PUSH:
        return bet
    return Decimal("0")


def settle(state: RoundState) -> tuple[Decimal, ...]:
    """Per-hand payouts for a finished round."""
    outcomes = determine_outcomes(state)
    return tuple(
        payout(outcome, bet, state.rules)
        for outcome, bet in zip(outcomes, state.bets)
    )


def net_result(state: RoundState) -> Decimal:
    """Total payout minus total wagered for a finished round."""
    return sum(settle(state), Decimal("0")) - state.total_wagered
