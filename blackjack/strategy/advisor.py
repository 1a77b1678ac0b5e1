"""Basic strategy advice for a round in progress."""

from functools import lru_cache

from blackjack.cards import card_value
from blackjack.hand import is_pair
from blackjack.strategy.basic import Action, BasicStrategy
from blackjack.strategy.rules import RuleSet
from blackjack.game.actions import PlayerAction, legal_actions, player_hand_value
from blackjack.game.errors import PhaseError
from blackjack.game.state import Phase, RoundState

_TO_PLAYER_ACTION = {
    Action.HIT: PlayerAction.HIT,
    Action.STAND: PlayerAction.STAND,
    Action.DOUBLE: PlayerAction.DOUBLE,
    Action.SPLIT: PlayerAction.SPLIT,
}
_FROM_PLAYER_ACTION = {player: action for action, player in _TO_PLAYER_ACTION.items()}


@lru_cache(maxsize=32)
def strategy_for(rules: RuleSet) -> BasicStrategy:
    """Build (once per rule set) the strategy tables for a table's rules."""
    return BasicStrategy(rules)


def recommend_action(state: RoundState) -> PlayerAction:
    """
    Recommend a basic strategy action for the actionable hand.

    The pair table is used when the hand is a pair that may be split right
    now, the soft table for soft totals and the hard table otherwise. A
    recommendation that is not currently legal falls back (double to hit or
    stand, split to hit) to one that is.

    Raises:
        PhaseError: If the round is not in the player-turn phase
    """
    if state.phase != Phase.PLAYER_TURN:
        raise PhaseError("recommend an action", Phase.PLAYER_TURN, state.phase)

    legal = legal_actions(state)
    hand = state.actionable_hand
    value = player_hand_value(state, state.actionable_hand_index)
    upcard = card_value(state.dealer_hand[0], ace_high=True)

    splittable = is_pair(hand) and PlayerAction.SPLIT in legal
    cell = strategy_for(state.rules).lookup(
        value.high,
        upcard,
        is_soft=value.is_soft,
        is_pair=splittable,
        pair_rank=card_value(hand[0], ace_high=True) if splittable else None,
    )
    allowed = {_FROM_PLAYER_ACTION[action] for action in legal}
    return _TO_PLAYER_ACTION[BasicStrategy.resolve(cell, allowed)]
