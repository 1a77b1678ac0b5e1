"""Blackjack round engine - pure and UI-agnostic."""

from blackjack.cards import Card, Shoe, Rank, Suit
from blackjack.hand import HandValue, ValueKind, hand_value
from blackjack.strategy import RuleSet
from blackjack.game import (
    BlackjackTable,
    Phase,
    PlayerAction,
    RoundState,
    determine_outcomes,
    init_state,
    legal_actions,
    next_state,
)
from blackjack.strategy.advisor import recommend_action

__all__ = [
    "Card",
    "Shoe",
    "Rank",
    "Suit",
    "HandValue",
    "ValueKind",
    "hand_value",
    "RuleSet",
    "BlackjackTable",
    "Phase",
    "PlayerAction",
    "RoundState",
    "determine_outcomes",
    "init_state",
    "legal_actions",
    "next_state",
    "recommend_action",
]
