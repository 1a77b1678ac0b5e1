"""
Round state machine.

The engine is a pure transition function: next_state(state, action) never
mutates its input and always returns a new RoundState. A driver calls it
repeatedly, passing an action only during the player's turn, until the
round reaches GAME_OVER.

Flow:
    DEALING: one card per call - player, dealer, player, dealer hole card.
        With a peeking dealer a natural ends the round at once; a player
        natural or 21 skips straight to the dealer.
    DEALING (after a split): the second card for the actionable split hand.
    PLAYER_TURN: hit, stand, double or split the actionable hand.
    DEALER_TURN: one card per call - reveal the hole card, then draw until
        the dealer stands.
    GAME_OVER: terminal.
"""

from dataclasses import replace
from decimal import Decimal
from random import Random
from typing import Callable

from blackjack.cards import Card, Shoe
from blackjack.hand import HandValue, ValueKind, hand_value
from blackjack.strategy.rules import RuleSet
from blackjack.game.actions import (
    PlayerAction,
    dealer_hand_value,
    hand_is_finished,
    legal_actions,
    player_hand_value,
)
from blackjack.game.errors import (
    IllegalActionError,
    PhaseError,
    UnreachableStateError,
)
from blackjack.game.state import Phase, RoundState, is_valid_transition

# Driver callback choosing an action for a player-turn state
ActionChooser = Callable[[RoundState], PlayerAction]


def init_state(
    starting_bet: Decimal | int | float | str,
    rules: RuleSet | None = None,
    rng: Random | None = None,
    shoe: Shoe | None = None,
) -> RoundState:
    """
    Create a fresh round ready to be dealt.

    Args:
        starting_bet: Stake for the opening hand
        rules: Table rules for the whole round (defaults if None)
        rng: Random number generator used to shuffle the shoe
        shoe: Pre-arranged shoe to deal from instead of a shuffled one

    Returns:
        A round in the DEALING phase with one empty player hand
    """
    rules = rules or RuleSet()
    bet = Decimal(str(starting_bet))
    if bet <= 0:
        raise ValueError(f"Bet must be positive, got {bet}")

    if shoe is None:
        shoe = Shoe.shuffled(num_decks=rules.num_decks, rng=rng)

    return RoundState(
        shoe=shoe,
        player_hands=((),),
        dealer_hand=(),
        phase=Phase.DEALING,
        starting_bet=bet,
        bets=(bet,),
        rules=rules,
    )


def next_state(
    state: RoundState,
    action: PlayerAction | str | None = None,
) -> RoundState:
    """
    Advance the round by one step.

    Args:
        state: Current round
        action: Player decision; required during PLAYER_TURN, ignored otherwise

    Returns:
        The new round state

    Raises:
        IllegalActionError: If the action is missing or not legal
        PhaseError: If the round is already over
        UnreachableStateError: If the state is outside the transition table
    """
    if state.phase == Phase.DEALING:
        new_state = _deal(state)
    elif state.phase == Phase.PLAYER_TURN:
        new_state = _player_turn(state, action)
    elif state.phase == Phase.DEALER_TURN:
        new_state = _dealer_turn(state)
    elif state.phase == Phase.GAME_OVER:
        raise PhaseError("advance the round", None, state.phase)
    else:
        raise UnreachableStateError(f"Unknown phase: {state.phase!r}")

    if not is_valid_transition(state.phase, new_state.phase):
        raise UnreachableStateError(
            f"Invalid phase change {state.phase} -> {new_state.phase}"
        )
    return new_state


def play_round(state: RoundState, choose_action: ActionChooser) -> RoundState:
    """Drive a round to GAME_OVER, asking choose_action on each player turn."""
    while state.phase != Phase.GAME_OVER:
        if state.phase == Phase.PLAYER_TURN:
            state = next_state(state, choose_action(state))
        else:
            state = next_state(state)
    return state


def _with_player_card(state: RoundState, index: int, card: Card, shoe: Shoe) -> RoundState:
    hands = list(state.player_hands)
    hands[index] = hands[index] + (card,)
    return replace(state, shoe=shoe, player_hands=tuple(hands))


def _after_card(state: RoundState) -> RoundState:
    """Continue after the actionable hand received a card."""
    if hand_is_finished(state, state.actionable_hand_index):
        return _finish_hand(state)
    return replace(state, phase=Phase.PLAYER_TURN)


def _finish_hand(state: RoundState) -> RoundState:
    """Move on from the actionable hand once it takes no more decisions."""
    hands = state.player_hands
    next_index = next(
        (i for i in range(state.actionable_hand_index + 1, len(hands)) if len(hands[i]) < 2),
        None,
    )
    if next_index is not None:
        # An unopened split hand still needs its second card
        return replace(state, actionable_hand_index=next_index, phase=Phase.DEALING)

    if all(player_hand_value(state, i).is_bust for i in range(len(hands))):
        return replace(state, phase=Phase.GAME_OVER)
    return replace(state, phase=Phase.DEALER_TURN)


def _only_naturals_remain(state: RoundState) -> bool:
    """Whether every player hand that did not bust is a natural."""
    values = [player_hand_value(state, i) for i in range(len(state.player_hands))]
    surviving = [value for value in values if not value.is_bust]
    return bool(surviving) and all(value.is_blackjack for value in surviving)


def dealer_stands(value: HandValue, rules: RuleSet) -> bool:
    """
    Check if the dealer stops drawing.

    The dealer stands on a natural and on any total of 17 or more, except a
    soft 17 when the rules make the dealer hit it.
    """
    if value.kind == ValueKind.BLACKJACK:
        return True
    if value.kind == ValueKind.HARD:
        return value.low >= 17
    if value.high == 17:
        return rules.dealer_stands_on_all_17
    return value.high > 17


def _deal(state: RoundState) -> RoundState:
    if len(state.player_hands) == 1:
        return _deal_opening(state)
    return _deal_split_hand(state)


def _deal_opening(state: RoundState) -> RoundState:
    """Deal the opening four cards one at a time."""
    player = state.player_hands[0]
    dealer = state.dealer_hand
    card, shoe = state.shoe.draw()

    if len(player) == 0:
        return _with_player_card(state, 0, card, shoe)

    if len(player) == 1 and len(dealer) == 0:
        return replace(state, shoe=shoe, dealer_hand=(card,))

    if len(player) == 1 and len(dealer) == 1:
        return _with_player_card(state, 0, card, shoe)

    if len(player) == 2 and len(dealer) == 1:
        dealt = replace(state, shoe=shoe, dealer_hand=(dealer[0], card.turned_down()))

        if state.rules.dealer_peeks:
            peeked = hand_value((dealer[0], card), state.rules)
            if peeked.is_blackjack:
                return replace(dealt, dealer_hand=(dealer[0], card), phase=Phase.GAME_OVER)

        player_value = player_hand_value(dealt, 0)
        if player_value.is_blackjack or player_value.is_twenty_one:
            # Dealer could still have a natural
            return replace(dealt, phase=Phase.DEALER_TURN)
        return replace(dealt, phase=Phase.PLAYER_TURN)

    raise UnreachableStateError(
        f"Cannot deal with {len(player)} player and {len(dealer)} dealer cards"
    )


def _deal_split_hand(state: RoundState) -> RoundState:
    """Deal the second card to a freshly split hand."""
    index = state.actionable_hand_index
    if len(state.player_hands[index]) != 1:
        raise UnreachableStateError(f"Split hand {index} is not waiting for a card")

    card, shoe = state.shoe.draw()
    return _after_card(_with_player_card(state, index, card, shoe))


def _player_turn(state: RoundState, action: PlayerAction | str | None) -> RoundState:
    legal = legal_actions(state)
    if isinstance(action, str):
        try:
            action = PlayerAction(action.lower())
        except ValueError:
            raise IllegalActionError(action, legal) from None
    if action is None or action not in legal:
        raise IllegalActionError(action, legal)

    index = state.actionable_hand_index

    if action == PlayerAction.HIT:
        card, shoe = state.shoe.draw()
        return _after_card(_with_player_card(state, index, card, shoe))

    if action == PlayerAction.STAND:
        return _finish_hand(state)

    if action == PlayerAction.DOUBLE:
        card, shoe = state.shoe.draw()
        doubled = _with_player_card(state, index, card, shoe)
        bets = list(state.bets)
        bets[index] += state.starting_bet
        return _finish_hand(replace(doubled, bets=tuple(bets)))

    if action == PlayerAction.SPLIT:
        first, second = state.player_hands[index]
        hands = state.player_hands
        bets = state.bets
        return replace(
            state,
            player_hands=hands[:index] + ((first,), (second,)) + hands[index + 1:],
            bets=bets[: index + 1] + (state.starting_bet,) + bets[index + 1:],
            aces_split=state.aces_split + (1 if first.is_ace else 0),
            phase=Phase.DEALING,
        )

    raise UnreachableStateError(f"Unhandled action: {action!r}")


def _dealer_turn(state: RoundState) -> RoundState:
    """Reveal the hole card or draw one card for the dealer."""
    if dealer_stands(dealer_hand_value(state), state.rules):
        return replace(state, phase=Phase.GAME_OVER)

    dealer = state.dealer_hand
    hidden = next((i for i, card in enumerate(dealer) if card.face_down), None)
    if hidden is not None:
        revealed = dealer[:hidden] + (dealer[hidden].turned_up(),) + dealer[hidden + 1:]
        new_state = replace(state, dealer_hand=revealed)
    else:
        card, shoe = state.shoe.draw()
        new_state = replace(state, shoe=shoe, dealer_hand=dealer + (card,))

    if _only_naturals_remain(new_state):
        # Naturals already decide the round; more dealer cards change nothing
        return replace(new_state, phase=Phase.GAME_OVER)
    if dealer_stands(dealer_hand_value(new_state), state.rules):
        return replace(new_state, phase=Phase.GAME_OVER)
    return replace(new_state, phase=Phase.DEALER_TURN)
