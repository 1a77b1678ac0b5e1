"""Pytest fixtures for blackjack engine tests."""

import pytest
from decimal import Decimal
from random import Random

from hypothesis import strategies as st

from blackjack.cards import Card, Rank, Shoe, Suit, parse_cards
from blackjack.strategy import BasicStrategy, RuleSet
from blackjack.game import BlackjackTable, init_state, next_state, Phase


def stacked_shoe(text: str) -> Shoe:
    """
    A shoe dealing the given cards in order.

    Opening deal order is player, dealer up, player, dealer hole; later
    cards go to splits, hits and the dealer in the order they are needed.
    """
    return Shoe.from_cards(parse_cards(text))


def deal_round(text: str, rules: RuleSet | None = None, bet: int = 10):
    """Start a round from a stacked shoe and deal until someone must act."""
    state = init_state(bet, rules=rules, shoe=stacked_shoe(text))
    while state.phase == Phase.DEALING:
        state = next_state(state)
    return state


def run_dealer(state):
    """Advance through the dealer's turn."""
    while state.phase == Phase.DEALER_TURN:
        state = next_state(state)
    return state


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled 8-deck shoe."""
    return Shoe.shuffled(num_decks=8, rng=rng)


@pytest.fixture
def blackjack_cards():
    """A natural (A-K)."""
    return (Card(Rank.ACE, Suit.SPADES), Card(Rank.KING, Suit.HEARTS))


@pytest.fixture
def soft_17_cards():
    """A soft 17 (A-6)."""
    return (Card(Rank.ACE, Suit.SPADES), Card(Rank.SIX, Suit.HEARTS))


@pytest.fixture
def hard_16_cards():
    """A hard 16 (10-6)."""
    return (Card(Rank.TEN, Suit.SPADES), Card(Rank.SIX, Suit.HEARTS))


@pytest.fixture
def bust_cards():
    """A busted hand (10-6-K)."""
    return parse_cards("10S 6H KC")


@pytest.fixture
def rules():
    """Default ruleset."""
    return RuleSet()


@pytest.fixture
def h17_rules():
    """Dealer hits soft 17."""
    return RuleSet(dealer_stands_on_all_17=False)


@pytest.fixture
def no_peek_rules():
    """European no-hole-card rules."""
    return RuleSet(dealer_peeks=False)


@pytest.fixture
def basic_strategy(rules):
    """Basic strategy for default rules."""
    return BasicStrategy(rules)


@pytest.fixture
def table(rng):
    """A new table with a 1000 bankroll."""
    return BlackjackTable(initial_bankroll=Decimal("1000"), rng=rng)


# Hypothesis strategies for property-based testing
@st.composite
def card_strategy(draw):
    """Generate a random face-up card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


@st.composite
def hand_strategy(draw, min_cards=2, max_cards=6):
    """Generate a random hand as a tuple of cards."""
    cards = draw(st.lists(card_strategy(), min_size=min_cards, max_size=max_cards))
    return tuple(cards)
