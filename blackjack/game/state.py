"""Round phases and the immutable round state."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, auto

from blackjack.cards import Card, Shoe
from blackjack.strategy.rules import RuleSet


class Phase(Enum):
    """
    Round state machine phases.

    Flow: DEALING → PLAYER_TURN ⇄ DEALING (after a split) → DEALER_TURN → GAME_OVER
    """

    # Cards being dealt (opening deal, or a second card to a split hand)
    DEALING = auto()

    # Player decides on the actionable hand
    PLAYER_TURN = auto()

    # Dealer reveals the hole card and draws
    DEALER_TURN = auto()

    # Round finished, outcomes can be resolved
    GAME_OVER = auto()

    def __str__(self) -> str:
        return self.name.replace("_", "-").lower()


# Valid phase changes made by a single transition
VALID_TRANSITIONS: dict[Phase, list[Phase]] = {
    Phase.DEALING: [Phase.DEALING, Phase.PLAYER_TURN, Phase.DEALER_TURN, Phase.GAME_OVER],
    Phase.PLAYER_TURN: [Phase.PLAYER_TURN, Phase.DEALING, Phase.DEALER_TURN, Phase.GAME_OVER],
    Phase.DEALER_TURN: [Phase.DEALER_TURN, Phase.GAME_OVER],
    Phase.GAME_OVER: [],  # Terminal state
}


def is_valid_transition(from_phase: Phase, to_phase: Phase) -> bool:
    """
    Check if a phase change is valid.

    Args:
        from_phase: Current phase
        to_phase: Desired phase

    Returns:
        True if the transition is allowed
    """
    return to_phase in VALID_TRANSITIONS.get(from_phase, [])


Hand = tuple[Card, ...]


@dataclass(frozen=True)
class RoundState:
    """
    Immutable snapshot of one round.

    Every transition returns a new RoundState; a previously returned state
    is never changed.
    """

    shoe: Shoe
    player_hands: tuple[Hand, ...]
    dealer_hand: Hand
    phase: Phase
    starting_bet: Decimal
    bets: tuple[Decimal, ...]
    rules: RuleSet = field(default_factory=RuleSet)
    actionable_hand_index: int = 0
    aces_split: int = 0  # Number of times a pair of aces was split this round

    @property
    def actionable_hand(self) -> Hand:
        """The player hand currently being dealt to or played."""
        return self.player_hands[self.actionable_hand_index]

    @property
    def dealer_upcard(self) -> Card | None:
        """The dealer's first, always visible card."""
        return self.dealer_hand[0] if self.dealer_hand else None

    @property
    def is_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    @property
    def total_wagered(self) -> Decimal:
        return sum(self.bets, Decimal("0"))

    def hand_is_split_ace(self, index: int) -> bool:
        """
        Check if a player hand descends from splitting aces.

        Every hand after a split starts with a card of the split pair, so once
        aces have been split the hands beginning with an Ace are exactly the
        split-ace hands.
        """
        hand = self.player_hands[index]
        return self.aces_split > 0 and bool(hand) and hand[0].is_ace
