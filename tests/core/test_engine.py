"""Tests for the round state machine."""

import pytest
from dataclasses import replace
from decimal import Decimal

from blackjack.cards import parse_cards
from blackjack.hand import HandValue
from blackjack.strategy import RuleSet
from blackjack.game import (
    IllegalActionError,
    Phase,
    PhaseError,
    PlayerAction,
    Reason,
    Result,
    UnreachableStateError,
    determine_outcomes,
    init_state,
    legal_actions,
    net_result,
    next_state,
    play_round,
    settle,
)
from blackjack.game.actions import dealer_hand_value, player_hand_value
from blackjack.game.engine import dealer_stands
from blackjack.game.state import VALID_TRANSITIONS, is_valid_transition

from conftest import deal_round, run_dealer, stacked_shoe


class TestInitState:
    """Tests for init_state."""

    def test_fresh_round(self, rules):
        """A new round has one empty hand and the opening bet."""
        state = init_state(10, rules=rules, shoe=stacked_shoe("AS"))
        assert state.phase == Phase.DEALING
        assert state.player_hands == ((),)
        assert state.dealer_hand == ()
        assert state.bets == (Decimal("10"),)
        assert state.starting_bet == Decimal("10")
        assert state.rules is rules

    def test_shuffles_a_full_shoe(self, rng):
        """Without a stacked shoe the round gets a shuffled 8-deck shoe."""
        state = init_state(5, rng=rng)
        assert state.shoe.cards_remaining == 8 * 52

    @pytest.mark.parametrize("bet", [0, -5])
    def test_non_positive_bet_raises(self, bet):
        """Bets must be positive."""
        with pytest.raises(ValueError):
            init_state(bet)


class TestOpeningDeal:
    """Tests for the opening four cards."""

    def test_deal_order(self):
        """Player, dealer, player, dealer hole card, one card per step."""
        state = init_state(10, shoe=stacked_shoe("9S 6H 7D 10C"))

        state = next_state(state)
        assert state.player_hands == (parse_cards("9S"),)
        assert state.phase == Phase.DEALING

        state = next_state(state)
        assert state.dealer_hand == parse_cards("6H")

        state = next_state(state)
        assert state.player_hands == (parse_cards("9S 7D"),)
        assert state.phase == Phase.DEALING

        state = next_state(state)
        assert len(state.dealer_hand) == 2
        assert state.dealer_hand[1].face_down
        assert state.phase == Phase.PLAYER_TURN
        assert state.shoe.cards_remaining == 0

    def test_hole_card_hidden_from_value(self):
        """Only the upcard counts while the hole card is down."""
        state = deal_round("9S 6H 7D 10C")
        assert dealer_hand_value(state) == HandValue.hard(6)

    def test_transitions_do_not_mutate(self):
        """next_state returns a new state and leaves its input alone."""
        start = init_state(10, shoe=stacked_shoe("9S 6H 7D 10C"))
        after = next_state(start)
        assert start.player_hands == ((),)
        assert start.shoe.cards_remaining == 4
        assert after is not start

    def test_dealer_peek_natural_ends_round(self):
        """A peeking dealer with a natural reveals it and the round is over."""
        state = deal_round("9S AH 7D KC")
        assert state.phase == Phase.GAME_OVER
        assert not any(card.face_down for card in state.dealer_hand)
        assert determine_outcomes(state)[0].result == Result.DEALER_WIN
        assert determine_outcomes(state)[0].reason == Reason.BLACKJACK

    def test_dealer_peek_ten_up_ace_hole(self):
        """The peek finds a natural with the Ace in the hole."""
        state = deal_round("9S KH 7D AC")
        assert state.phase == Phase.GAME_OVER

    def test_dealer_peek_without_natural_keeps_hole_down(self):
        """No natural: the hole card stays face down for the player's turn."""
        state = deal_round("9S AH 7D 6C")
        assert state.phase == Phase.PLAYER_TURN
        assert state.dealer_hand[1].face_down

    def test_both_naturals_push(self):
        """Player and dealer naturals push."""
        state = deal_round("AS AH KD KC")
        assert state.phase == Phase.GAME_OVER
        assert determine_outcomes(state)[0].result == Result.PUSH
        assert settle(state) == (Decimal("10"),)

    def test_player_natural_skips_player_turn(self):
        """A player natural goes straight to the dealer."""
        state = deal_round("AS 6H KD 10C")
        assert state.phase == Phase.DEALER_TURN

    def test_natural_against_six_without_peek(self, no_peek_rules):
        """A-K against a 6 wins by blackjack and pays 3:2."""
        state = deal_round("AS 6H KD 10C", rules=no_peek_rules)
        assert state.phase == Phase.DEALER_TURN

        state = run_dealer(state)
        assert state.phase == Phase.GAME_OVER
        # Hole card revealed, no further cards once only naturals remain
        assert len(state.dealer_hand) == 2
        outcome = determine_outcomes(state)[0]
        assert outcome.result == Result.PLAYER_WIN
        assert outcome.reason == Reason.BLACKJACK
        assert settle(state) == (Decimal("25.0"),)

    def test_no_peek_dealer_natural_takes_double(self, no_peek_rules):
        """Without a peek a dealer natural also wins the doubled stake."""
        state = deal_round("6S AH 5D KC 9S", rules=no_peek_rules)
        assert state.phase == Phase.PLAYER_TURN

        state = run_dealer(next_state(state, PlayerAction.DOUBLE))
        assert state.phase == Phase.GAME_OVER
        assert state.bets == (Decimal("20"),)
        assert determine_outcomes(state)[0].reason == Reason.BLACKJACK
        assert net_result(state) == Decimal("-20")


class TestPlayerTurn:
    """Tests for player decisions."""

    def test_hit_to_bust_ends_round(self):
        """Hard 16 hit to 22 busts and the round is over at once."""
        state = deal_round("10S 7H 6D 10C 6S")
        state = next_state(state, PlayerAction.HIT)

        assert player_hand_value(state, 0).is_bust
        assert state.phase == Phase.GAME_OVER
        outcome = determine_outcomes(state)[0]
        assert outcome.result == Result.DEALER_WIN
        assert outcome.reason == Reason.PLAYER_BUST

    def test_hit_keeps_turn(self):
        """A hand under 21 keeps the turn after a hit."""
        state = deal_round("2S 7H 3D 10C 4S")
        state = next_state(state, PlayerAction.HIT)
        assert state.phase == Phase.PLAYER_TURN
        assert state.actionable_hand == parse_cards("2S 3D 4S")

    def test_hit_to_21_finishes_hand(self):
        """Reaching 21 finishes the hand."""
        state = deal_round("5S 7H 6D 10C KS")
        state = next_state(state, PlayerAction.HIT)
        assert state.phase == Phase.DEALER_TURN

    def test_string_actions(self):
        """Action names are accepted as well as enum members."""
        state = deal_round("10S 7H 6D 10C 6S")
        state = next_state(state, "hit")
        assert state.phase == Phase.GAME_OVER

    def test_double_draws_one_card(self):
        """A double adds the opening bet and exactly one card."""
        state = deal_round("6S 6H 5D 10C 2S 9C")
        state = next_state(state, PlayerAction.DOUBLE)
        assert state.bets == (Decimal("20"),)
        assert len(state.player_hands[0]) == 3
        assert state.phase == Phase.DEALER_TURN

    def test_illegal_action_raises(self):
        """Splitting a non-pair is refused with the legal actions attached."""
        state = deal_round("8S 6H 9D 10C")
        with pytest.raises(IllegalActionError) as exc_info:
            next_state(state, PlayerAction.SPLIT)
        assert exc_info.value.action == PlayerAction.SPLIT
        assert exc_info.value.legal_actions == legal_actions(state)
        assert "split" in str(exc_info.value)

    def test_missing_action_raises(self):
        """The player's turn needs an action."""
        state = deal_round("8S 6H 9D 10C")
        with pytest.raises(IllegalActionError):
            next_state(state)

    def test_unknown_action_raises(self):
        """Unknown action names are illegal actions."""
        state = deal_round("8S 6H 9D 10C")
        with pytest.raises(IllegalActionError, match="surrender"):
            next_state(state, "surrender")


class TestSplits:
    """Tests for splitting pairs."""

    def test_split_and_double(self):
        """Split eights, double the first hand, stand on the second."""
        state = deal_round("8S 6H 8D 10C 3S 9D 10H 9C")
        state = next_state(state, PlayerAction.SPLIT)
        assert state.phase == Phase.DEALING
        assert state.player_hands == (parse_cards("8S"), parse_cards("8D"))
        assert state.bets == (Decimal("10"), Decimal("10"))

        state = next_state(state)
        assert state.phase == Phase.PLAYER_TURN
        assert state.actionable_hand == parse_cards("8S 3S")
        assert PlayerAction.DOUBLE in legal_actions(state)

        state = next_state(state, PlayerAction.DOUBLE)
        assert state.phase == Phase.DEALING
        assert state.actionable_hand_index == 1
        assert state.bets == (Decimal("20"), Decimal("10"))

        state = next_state(state)
        assert state.actionable_hand == parse_cards("8D 10H")
        state = run_dealer(next_state(state, PlayerAction.STAND))

        assert state.phase == Phase.GAME_OVER
        assert [o.reason for o in determine_outcomes(state)] == [Reason.DEALER_BUST] * 2
        assert settle(state) == (Decimal("40"), Decimal("20"))
        assert net_result(state) == Decimal("30")

    def test_resplit_up_to_max_hands(self):
        """A pair dealt to a split hand can be split again while there is room."""
        state = deal_round("8S 6H 8D 10C 8C 2C")
        state = next_state(next_state(state, PlayerAction.SPLIT))
        assert state.actionable_hand == parse_cards("8S 8C")
        assert PlayerAction.SPLIT in legal_actions(state)

        state = next_state(next_state(state, PlayerAction.SPLIT))
        assert len(state.player_hands) == 3
        assert state.player_hands[1] == parse_cards("8C")
        assert len(state.bets) == 3

    def test_no_resplit_at_max_hands(self):
        """At the hand limit a pair cannot be split again."""
        rules = RuleSet(max_hands_after_split=2)
        state = deal_round("8S 6H 8D 10C 8C", rules=rules)
        state = next_state(next_state(state, PlayerAction.SPLIT))
        assert state.actionable_hand == parse_cards("8S 8C")
        assert PlayerAction.SPLIT not in legal_actions(state)

    def test_split_aces_get_one_card(self):
        """Split aces take one card each and an Ace-ten is only 21."""
        state = deal_round("AS 6H AD 10C KS 9D 5S")
        state = next_state(state, PlayerAction.SPLIT)
        assert state.aces_split == 1

        state = next_state(state)
        assert player_hand_value(state, 0) == HandValue.hard(21)
        assert state.phase == Phase.DEALING
        assert state.actionable_hand_index == 1

        state = next_state(state)
        assert state.phase == Phase.DEALER_TURN

        state = run_dealer(state)
        assert dealer_hand_value(state) == HandValue.hard(21)
        results = [o.result for o in determine_outcomes(state)]
        assert results == [Result.PUSH, Result.DEALER_WIN]

    def test_no_hit_after_splitting_aces(self):
        """Resplittable aces may be split again or stood, but not hit."""
        rules = RuleSet(split_aces=2)
        state = deal_round("AS 6H AD 10C AC", rules=rules)
        state = next_state(next_state(state, PlayerAction.SPLIT))
        assert state.phase == Phase.PLAYER_TURN
        assert legal_actions(state) == (PlayerAction.STAND, PlayerAction.SPLIT)


class TestDealerTurn:
    """Tests for the dealer's drawing rule."""

    def test_dealer_stands_on_soft_17(self):
        """S17: the dealer stops on A-6."""
        state = deal_round("10S 6H 9D AC 5S")
        state = run_dealer(next_state(state, PlayerAction.STAND))
        assert len(state.dealer_hand) == 2
        assert dealer_hand_value(state) == HandValue.soft(7, 17)
        assert determine_outcomes(state)[0].reason == Reason.HIGHER_HAND

    def test_dealer_hits_soft_17(self, h17_rules):
        """H17: the dealer draws to A-6 and can bust."""
        state = deal_round("10S 6H 9D AC 5S 10D", rules=h17_rules)
        state = next_state(state, PlayerAction.STAND)

        state = next_state(state)
        assert dealer_hand_value(state) == HandValue.soft(7, 17)
        assert state.phase == Phase.DEALER_TURN

        state = run_dealer(state)
        assert dealer_hand_value(state).is_bust
        assert determine_outcomes(state)[0].reason == Reason.DEALER_BUST

    def test_dealer_stands_rule(self, rules, h17_rules):
        """Hard 17 always stands; soft 17 follows the rules; 16 hits."""
        assert dealer_stands(HandValue.hard(17), rules)
        assert dealer_stands(HandValue.hard(17), h17_rules)
        assert dealer_stands(HandValue.soft(7, 17), rules)
        assert not dealer_stands(HandValue.soft(7, 17), h17_rules)
        assert dealer_stands(HandValue.soft(8, 18), h17_rules)
        assert not dealer_stands(HandValue.hard(16), rules)
        assert dealer_stands(HandValue.blackjack(), rules)


class TestGameOver:
    """Tests for the terminal phase and the transition graph."""

    def test_transition_from_game_over_raises(self):
        """GAME_OVER is terminal."""
        state = deal_round("9S AH 7D KC")
        with pytest.raises(PhaseError) as exc_info:
            next_state(state)
        assert exc_info.value.actual == Phase.GAME_OVER

    def test_game_over_has_no_edges(self):
        """No phase follows GAME_OVER."""
        assert VALID_TRANSITIONS[Phase.GAME_OVER] == []
        assert not is_valid_transition(Phase.DEALER_TURN, Phase.PLAYER_TURN)
        assert is_valid_transition(Phase.PLAYER_TURN, Phase.DEALING)

    def test_unknown_phase_raises(self):
        """A state outside the graph is reported, not guessed at."""
        state = replace(deal_round("9S 6H 7D 10C"), phase="bogus")
        with pytest.raises(UnreachableStateError):
            next_state(state)

    def test_play_round_reaches_game_over(self, rng):
        """play_round drives a round to the end."""
        state = play_round(init_state(10, rng=rng), lambda s: PlayerAction.STAND)
        assert state.phase == Phase.GAME_OVER
        assert len(determine_outcomes(state)) == len(state.player_hands)
