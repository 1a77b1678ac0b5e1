"""
Monte Carlo simulation of complete rounds.

Plays rounds through the engine with a strategy callback and accumulates
the net result of each round. The house edge is reported per initial bet,
together with its standard error, so a run can be compared against the
static estimate from HouseEdgeCalculator.
"""

import logging
import math
import time
from dataclasses import dataclass
from decimal import Decimal
from random import Random

from blackjack.strategy.rules import RuleSet
from blackjack.strategy.advisor import recommend_action
from blackjack.game.engine import ActionChooser, init_state, play_round
from blackjack.game.outcome import Result, determine_outcomes, net_result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    """Aggregate statistics from a simulation run.

    Attributes:
        rounds:         Rounds played.
        hands:          Player hands played, split hands included.
        wins:           Hands won.
        losses:         Hands lost.
        pushes:         Hands pushed.
        blackjacks:     Hands won with a natural.
        total_wagered:  Sum of all stakes, doubles and splits included.
        net:            Player net result (positive = player ahead).
        house_edge:     House edge in percent of the initial bets.
        standard_error: Standard error of house_edge, in percent.
        elapsed:        Wall time of the run in seconds.
    """

    rounds: int
    hands: int
    wins: int
    losses: int
    pushes: int
    blackjacks: int
    total_wagered: Decimal
    net: Decimal
    house_edge: float
    standard_error: float
    elapsed: float

    @property
    def win_rate(self) -> float:
        return self.wins / self.hands if self.hands else 0.0

    def is_consistent_with(self, expected: Decimal | float, sigmas: float = 3.0) -> bool:
        """Whether an expected house edge lies within the given number of standard errors."""
        return abs(self.house_edge - float(expected)) <= sigmas * self.standard_error

    def __str__(self) -> str:
        return (
            f"Rounds: {self.rounds:,} | "
            f"W/L/P: {self.wins}/{self.losses}/{self.pushes} | "
            f"Net: {self.net} | "
            f"House edge: {self.house_edge:.2f}% ± {self.standard_error:.2f}%"
        )


def simulate(
    num_rounds: int,
    rules: RuleSet | None = None,
    bet: Decimal | int = 1,
    rng: Random | None = None,
    strategy: ActionChooser = recommend_action,
) -> SimulationResult:
    """
    Play num_rounds independent rounds, each from a freshly shuffled shoe.

    Args:
        num_rounds: Number of rounds to play
        rules: Table rules (defaults if None)
        bet: Opening bet of every round
        rng: Random number generator, seed it for reproducible runs
        strategy: Chooses the action on every player turn

    Returns:
        Aggregate statistics of the run
    """
    if num_rounds < 1:
        raise ValueError(f"num_rounds must be at least 1, got {num_rounds}")

    rules = rules or RuleSet()
    rng = rng or Random()
    stake = Decimal(str(bet))
    logger.info("Simulating %d rounds (%d decks, bet %s)", num_rounds, rules.num_decks, stake)

    counts = {Result.PLAYER_WIN: 0, Result.DEALER_WIN: 0, Result.PUSH: 0}
    blackjacks = hands = 0
    total_wagered = net = Decimal("0")
    # Running sums of per-round results in units of the opening bet
    sum_units = sum_squares = 0.0
    progress_every = max(num_rounds // 10, 1)

    started = time.perf_counter()
    for played in range(1, num_rounds + 1):
        state = play_round(init_state(stake, rules=rules, rng=rng), strategy)

        for outcome in determine_outcomes(state):
            counts[outcome.result] += 1
            blackjacks += outcome.is_blackjack_win
        hands += len(state.player_hands)

        result = net_result(state)
        total_wagered += state.total_wagered
        net += result
        units = float(result / stake)
        sum_units += units
        sum_squares += units * units

        if played % progress_every == 0:
            logger.debug("%d/%d rounds, net %s", played, num_rounds, net)
    elapsed = time.perf_counter() - started

    mean = sum_units / num_rounds
    variance = (sum_squares - num_rounds * mean * mean) / (num_rounds - 1) if num_rounds > 1 else 0.0
    result = SimulationResult(
        rounds=num_rounds,
        hands=hands,
        wins=counts[Result.PLAYER_WIN],
        losses=counts[Result.DEALER_WIN],
        pushes=counts[Result.PUSH],
        blackjacks=blackjacks,
        total_wagered=total_wagered,
        net=net,
        house_edge=-mean * 100,
        standard_error=math.sqrt(max(variance, 0.0) / num_rounds) * 100,
        elapsed=elapsed,
    )
    logger.info("Simulation finished in %.2fs: %s", elapsed, result)
    return result
