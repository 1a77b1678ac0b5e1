"""Player actions, the hand finishing rule and the legal-action oracle."""

from enum import Enum

from blackjack.hand import HandValue, ValueKind, hand_value, is_pair
from blackjack.game.errors import HandFinishedError, PhaseError
from blackjack.game.state import Phase, RoundState


class PlayerAction(Enum):
    """Decisions a player can make on the actionable hand."""

    HIT = "hit"
    STAND = "stand"
    DOUBLE = "double"
    SPLIT = "split"

    def __str__(self) -> str:
        return self.value


# Order in which legal actions are reported
ACTION_ORDER = (PlayerAction.HIT, PlayerAction.STAND, PlayerAction.DOUBLE, PlayerAction.SPLIT)

# Hard totals eligible for doubling under each double_on rule (None = any)
_DOUBLE_TOTALS: dict[str, range | None] = {
    "any": None,
    "9-11": range(9, 12),
    "10-11": range(10, 12),
}


def player_hand_value(state: RoundState, index: int) -> HandValue:
    """Value of a player hand, applying the split-ace demotion."""
    return hand_value(
        state.player_hands[index],
        state.rules,
        aces_were_split=state.hand_is_split_ace(index),
    )


def dealer_hand_value(state: RoundState) -> HandValue:
    """Value of the dealer's visible cards."""
    return hand_value(state.dealer_hand, state.rules)


def can_split_hand(state: RoundState, index: int) -> bool:
    """
    Check if a player hand may be split.

    The hand must be two cards of equal value, the table must still have
    room for another hand, and a pair of aces may only be split as many
    times as split_aces allows.
    """
    hand = state.player_hands[index]
    if not is_pair(hand):
        return False
    if len(state.player_hands) >= state.rules.max_hands_after_split:
        return False
    if hand[0].is_ace and state.aces_split >= state.rules.split_aces:
        return False
    return True


def hand_is_finished(state: RoundState, index: int) -> bool:
    """
    Check if a player hand can take no further decisions.

    A hand finishes when it busts, reaches 21, or is a natural. A two-card
    split-ace hand without hitting allowed is also finished, unless it is a
    pair of aces that may still be resplit.
    """
    hand = state.player_hands[index]
    if len(hand) < 2:
        return False

    value = player_hand_value(state, index)
    if value.is_bust or value.is_blackjack or value.is_twenty_one:
        return True

    if (
        len(hand) == 2
        and state.hand_is_split_ace(index)
        and not state.rules.hit_on_split_ace
    ):
        return not can_split_hand(state, index)

    return False


def _can_double(state: RoundState, index: int) -> bool:
    hand = state.player_hands[index]
    if len(hand) != 2:
        return False

    allowed_totals = _DOUBLE_TOTALS[state.rules.double_on]
    if allowed_totals is not None:
        value = player_hand_value(state, index)
        if value.kind != ValueKind.HARD or value.low not in allowed_totals:
            return False

    if index != 0 and not state.rules.double_after_split:
        return False
    if state.hand_is_split_ace(index) and not state.rules.double_on_split_ace:
        return False
    return True


def legal_actions(state: RoundState) -> tuple[PlayerAction, ...]:
    """
    List the actions legal for the actionable hand.

    Args:
        state: A round in the player-turn phase

    Returns:
        Legal actions in HIT, STAND, DOUBLE, SPLIT order

    Raises:
        PhaseError: If the round is not in the player-turn phase
        HandFinishedError: If the actionable hand has already finished
    """
    if state.phase != Phase.PLAYER_TURN:
        raise PhaseError("list legal actions", Phase.PLAYER_TURN, state.phase)

    index = state.actionable_hand_index
    if hand_is_finished(state, index):
        raise HandFinishedError(index)

    legal = {PlayerAction.STAND}
    if state.aces_split == 0 or state.rules.hit_on_split_ace:
        legal.add(PlayerAction.HIT)
    if _can_double(state, index):
        legal.add(PlayerAction.DOUBLE)
    if can_split_hand(state, index):
        legal.add(PlayerAction.SPLIT)

    return tuple(action for action in ACTION_ORDER if action in legal)
