"""Hand evaluation for blackjack."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Sequence

from blackjack.cards import Card, card_value
from blackjack.strategy.rules import RuleSet

_DEFAULT_RULES = RuleSet()


class ValueKind(Enum):
    """Discriminant of a hand value."""

    HARD = auto()  # Plain total, including a soft hand forced down and 21
    SOFT = auto()  # An Ace can count as 11 without reaching or passing 21
    BLACKJACK = auto()  # Two-card natural


@dataclass(frozen=True, slots=True)
class HandValue:
    """
    Value of a hand, always recomputed from its cards.

    For HARD values low == high. For SOFT values low counts every Ace as 1
    and high counts one Ace as 11. A BLACKJACK carries 21 on both sides.
    """

    kind: ValueKind
    low: int
    high: int

    @classmethod
    def hard(cls, total: int) -> "HandValue":
        return cls(ValueKind.HARD, total, total)

    @classmethod
    def soft(cls, low: int, high: int) -> "HandValue":
        return cls(ValueKind.SOFT, low, high)

    @classmethod
    def blackjack(cls) -> "HandValue":
        return cls(ValueKind.BLACKJACK, 21, 21)

    @property
    def total(self) -> int:
        """The high representative used for comparisons."""
        return self.high

    @property
    def is_soft(self) -> bool:
        return self.kind == ValueKind.SOFT

    @property
    def is_hard(self) -> bool:
        return self.kind == ValueKind.HARD

    @property
    def is_blackjack(self) -> bool:
        return self.kind == ValueKind.BLACKJACK

    @property
    def is_bust(self) -> bool:
        """A hand is bust iff its value is a plain total over 21."""
        return self.kind == ValueKind.HARD and self.low > 21

    @property
    def is_twenty_one(self) -> bool:
        """Plain 21 or a soft total whose high side is 21 (not a natural)."""
        return self.kind != ValueKind.BLACKJACK and self.high == 21

    def __str__(self) -> str:
        return str(format_hand_value(self))


def _is_natural(first: Card, second: Card, rules: RuleSet) -> bool:
    """Check an Ace plus a ten-valued card, in either order."""
    for ace, other in ((first, second), (second, first)):
        if not ace.is_ace:
            continue
        if other.rank.is_face:
            return True
        if other.rank.is_ten_value and rules.ace_and_ten_counts_as_blackjack:
            return True
    return False


def hand_value(
    cards: Sequence[Card],
    rules: RuleSet | None = None,
    aces_were_split: bool = False,
) -> HandValue:
    """
    Calculate the value of a hand.

    Face-down cards are ignored. A two-card natural is demoted to a plain
    21 when the hand comes from split aces, unless the rules allow split
    aces to make blackjack.

    Args:
        cards: Cards in the hand
        rules: Rules deciding what counts as a natural (defaults if None)
        aces_were_split: Whether this hand descends from splitting aces

    Returns:
        The tagged hand value
    """
    rules = rules or _DEFAULT_RULES
    visible = [card for card in cards if not card.face_down]

    if len(visible) == 2 and _is_natural(visible[0], visible[1], rules):
        if aces_were_split and not rules.split_ace_can_be_blackjack:
            return HandValue.hard(21)
        return HandValue.blackjack()

    low = sum(card_value(card) for card in visible)
    if low <= 11 and any(card.is_ace for card in visible):
        high = low + 10
        if high > 21:
            return HandValue.hard(low)
        if high == 21:
            return HandValue.hard(21)
        return HandValue.soft(low, high)
    return HandValue.hard(low)


def format_hand_value(value: HandValue) -> int | str:
    """
    Display form of a hand value.

    Returns:
        The total for hard hands, "blackjack", "Ace" for a lone Ace,
        or "soft N" for other soft totals
    """
    if value.kind == ValueKind.HARD:
        return value.low
    if value.kind == ValueKind.BLACKJACK:
        return "blackjack"
    if value.kind == ValueKind.SOFT:
        if value.low == 1:
            return "Ace"
        return f"soft {value.high}"
    raise ValueError(f"Unknown hand value kind: {value.kind}")


def is_pair(cards: Sequence[Card]) -> bool:
    """Check if the hand is exactly two cards of equal value."""
    return len(cards) == 2 and card_value(cards[0]) == card_value(cards[1])


def describe_hand(cards: Sequence[Card], value: HandValue | None = None) -> str:
    """Human-readable hand, e.g. 'A♠ K♥ (blackjack)'."""
    value = value or hand_value(cards)
    cards_str = " ".join(str(card) for card in cards)
    return f"{cards_str} ({format_hand_value(value)})"
