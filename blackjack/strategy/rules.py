"""Blackjack rule variations."""

from dataclasses import dataclass
from typing import Literal

DoubleOn = Literal["any", "9-11", "10-11"]


@dataclass(frozen=True)
class RuleSet:
    """
    Blackjack table rules configuration.

    Set once before a round and read by every engine operation; a round
    never sees its rules change.
    """

    # Deck configuration
    num_decks: int = 8

    # Dealer rules
    dealer_stands_on_all_17: bool = True  # S17 vs H17
    dealer_peeks: bool = True  # US hole card rules (no peek = European)

    # Split rules
    split_aces: int = 1  # Times aces may be split: 0 never, 1 no resplit, up to 3
    hit_on_split_ace: bool = False  # Usually only one card to split aces
    max_hands_after_split: int = 4

    # Double down rules
    double_on: DoubleOn = "any"
    double_after_split: bool = True  # DAS
    double_on_split_ace: bool = False

    # Blackjack payout (3:2 = 1.5, 6:5 = 1.2)
    blackjack_payout: float = 1.5
    ace_and_ten_counts_as_blackjack: bool = True  # A-10 (not only A-J/Q/K) is a natural
    split_ace_can_be_blackjack: bool = False

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if not 0 <= self.split_aces <= 3:
            raise ValueError("split_aces must be between 0 and 3")
        if not 1 <= self.max_hands_after_split <= 4:
            raise ValueError("max_hands_after_split must be between 1 and 4")
        if self.double_on not in ("any", "9-11", "10-11"):
            raise ValueError(f"double_on must be 'any', '9-11' or '10-11', got {self.double_on!r}")
        if self.blackjack_payout < 1.0:
            raise ValueError("blackjack_payout must be at least 1.0")

    @property
    def dealer_hits_soft_17(self) -> bool:
        """H17 rules."""
        return not self.dealer_stands_on_all_17

    @property
    def can_split(self) -> bool:
        """Whether any split is possible at this table."""
        return self.max_hands_after_split > 1

    @classmethod
    def vegas_strip(cls) -> "RuleSet":
        """Standard Vegas Strip rules."""
        return cls(
            num_decks=6,
            dealer_stands_on_all_17=True,
            blackjack_payout=1.5,
            double_after_split=True,
            double_on="any",
            split_aces=1,
        )

    @classmethod
    def downtown_vegas(cls) -> "RuleSet":
        """Downtown Las Vegas rules (typically H17)."""
        return cls(
            num_decks=6,
            dealer_stands_on_all_17=False,
            blackjack_payout=1.5,
            double_after_split=True,
            double_on="any",
            split_aces=1,
        )

    @classmethod
    def atlantic_city(cls) -> "RuleSet":
        """Atlantic City rules."""
        return cls(
            num_decks=8,
            dealer_stands_on_all_17=True,
            blackjack_payout=1.5,
            double_after_split=True,
            double_on="any",
            split_aces=1,
        )

    @classmethod
    def european(cls) -> "RuleSet":
        """European no-hole-card rules: no peek, doubling on 9-11 only."""
        return cls(
            num_decks=6,
            dealer_stands_on_all_17=True,
            dealer_peeks=False,
            double_on="9-11",
            double_after_split=True,
            split_aces=1,
            max_hands_after_split=3,
        )

    @classmethod
    def liberal_splits(cls) -> "RuleSet":
        """Aces may be resplit to four hands, hit and doubled."""
        return cls(
            split_aces=3,
            hit_on_split_ace=True,
            double_on_split_ace=True,
            max_hands_after_split=4,
        )
