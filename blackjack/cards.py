"""Card and Shoe types - immutable card representations."""

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from random import Random
from typing import Iterable, Iterator


class Suit(Enum):
    """Card suits."""

    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE

    @property
    def is_face(self) -> bool:
        """Check if this rank is a Jack, Queen or King."""
        return self in (Rank.JACK, Rank.QUEEN, Rank.KING)

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank counts as ten points."""
        return self == Rank.TEN or self.is_face


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card.

    A face-down card is worth nothing until it is turned over.
    """

    rank: Rank
    suit: Suit
    face_down: bool = False

    def __str__(self) -> str:
        if self.face_down:
            return "??"
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        hidden = ", face_down=True" if self.face_down else ""
        return f"Card({self.rank.name}, {self.suit.name}{hidden})"

    @property
    def value(self) -> int:
        """Return the point value with an Ace counted low."""
        return card_value(self)

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        """Check if this card has a value of 10."""
        return self.rank.is_ten_value

    def turned_down(self) -> "Card":
        """Return this card dealt face down."""
        return replace(self, face_down=True)

    def turned_up(self) -> "Card":
        """Return this card revealed."""
        return replace(self, face_down=False)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {
            "A": Rank.ACE,
            "2": Rank.TWO,
            "3": Rank.THREE,
            "4": Rank.FOUR,
            "5": Rank.FIVE,
            "6": Rank.SIX,
            "7": Rank.SEVEN,
            "8": Rank.EIGHT,
            "9": Rank.NINE,
            "10": Rank.TEN,
            "T": Rank.TEN,
            "J": Rank.JACK,
            "Q": Rank.QUEEN,
            "K": Rank.KING,
        }

        suit_map = {
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


def card_value(card: Card, ace_high: bool = False) -> int:
    """
    Return the blackjack point value of a card.

    Args:
        card: The card to value
        ace_high: Count an Ace as 11 instead of 1 (used to index
            strategy tables by dealer upcard)

    Returns:
        0 for a face-down card, 10 for J/Q/K, face value otherwise
    """
    if card.face_down:
        return 0
    if card.rank.is_ace:
        return 11 if ace_high else 1
    if card.rank.is_face:
        return 10
    return card.rank.value


def parse_cards(text: str) -> tuple[Card, ...]:
    """Parse a whitespace separated list of cards, e.g. 'AS KH 10D'."""
    return tuple(Card.from_string(part) for part in text.split())


# One 52-card deck in suit-then-rank order
DECK_TEMPLATE: tuple[Card, ...] = tuple(Card(rank, suit) for suit in Suit for rank in Rank)

DEFAULT_NUM_DECKS = 8


@dataclass(frozen=True)
class Shoe:
    """
    A multi-deck shoe dealt strictly from the front.

    The shoe is a value: drawing returns the card and a new, shorter shoe,
    and nothing is ever put back during a round.
    """

    cards: tuple[Card, ...] = ()
    num_decks: int = field(default=DEFAULT_NUM_DECKS)

    @classmethod
    def shuffled(
        cls,
        num_decks: int = DEFAULT_NUM_DECKS,
        rng: Random | None = None,
    ) -> "Shoe":
        """
        Build a freshly shuffled shoe.

        Args:
            num_decks: Number of 52-card decks concatenated into the shoe
            rng: Random number generator for reproducible shuffles

        Returns:
            A shoe holding num_decks * 52 cards in one random permutation
        """
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")
        cards = list(DECK_TEMPLATE * num_decks)
        (rng or Random()).shuffle(cards)
        return cls(cards=tuple(cards), num_decks=num_decks)

    @classmethod
    def from_cards(cls, cards: Iterable[Card | str], num_decks: int = 1) -> "Shoe":
        """Build a stacked shoe that deals the given cards in order."""
        stacked = tuple(
            Card.from_string(c) if isinstance(c, str) else c for c in cards
        )
        return cls(cards=stacked, num_decks=num_decks)

    def draw(self) -> tuple[Card, "Shoe"]:
        """Draw the front card, returning it with the remaining shoe."""
        if not self.cards:
            raise IndexError("Cannot draw from empty shoe")
        return self.cards[0], replace(self, cards=self.cards[1:])

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self.cards)

    @property
    def total_cards(self) -> int:
        """Return the total number of cards in a full shoe."""
        return self.num_decks * 52

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt."""
        return max(self.total_cards - len(self.cards), 0)

    @property
    def decks_remaining(self) -> float:
        """Return the estimated number of decks remaining."""
        return len(self.cards) / 52

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)
