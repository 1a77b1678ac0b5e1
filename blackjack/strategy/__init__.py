"""Rules and strategy tables."""

from blackjack.strategy.rules import RuleSet
from blackjack.strategy.basic import BasicStrategy, Action

__all__ = [
    "RuleSet",
    "BasicStrategy",
    "Action",
]
