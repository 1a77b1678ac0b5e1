"""Tests for the legal-action oracle."""

import pytest
from dataclasses import replace
from random import Random

from blackjack.cards import parse_cards
from blackjack.strategy import RuleSet
from blackjack.game import (
    HandFinishedError,
    Phase,
    PhaseError,
    PlayerAction,
    init_state,
    legal_actions,
    next_state,
)
from blackjack.game.actions import hand_is_finished

from conftest import deal_round


class TestLegalActions:
    """Tests for legal_actions."""

    def test_pair_on_opening_hand(self):
        """A fresh pair can do everything."""
        state = deal_round("8S 6H 8D 10C")
        assert legal_actions(state) == (
            PlayerAction.HIT,
            PlayerAction.STAND,
            PlayerAction.DOUBLE,
            PlayerAction.SPLIT,
        )

    def test_no_double_after_hit(self):
        """Doubling needs exactly two cards."""
        state = deal_round("2S 7H 3D 10C 4S")
        state = next_state(state, PlayerAction.HIT)
        assert legal_actions(state) == (PlayerAction.HIT, PlayerAction.STAND)

    @pytest.mark.parametrize(
        "cards, double_on, allowed",
        [
            ("4S 7H 5D 10C", "9-11", True),
            ("4S 7H 5D 10C", "10-11", False),
            ("6S 7H 4D 10C", "10-11", True),
            ("8S 7H 4D 10C", "9-11", False),
            ("AS 7H 6D 10C", "9-11", False),
            ("AS 7H 6D 10C", "any", True),
        ],
    )
    def test_double_on_restriction(self, cards, double_on, allowed):
        """Restricted doubling only applies to hard totals in range."""
        state = deal_round(cards, rules=RuleSet(double_on=double_on))
        assert (PlayerAction.DOUBLE in legal_actions(state)) == allowed

    def test_no_double_after_split(self):
        """Without DAS only the first hand may double after a split."""
        rules = RuleSet(double_after_split=False)
        state = deal_round("8S 6H 8D 10C 3S 2C", rules=rules)
        state = next_state(next_state(state, PlayerAction.SPLIT))
        assert state.actionable_hand_index == 0
        assert state.actionable_hand == parse_cards("8S 3S")
        assert PlayerAction.DOUBLE in legal_actions(state)

        state = next_state(next_state(state, PlayerAction.STAND))
        assert state.actionable_hand_index == 1
        assert state.actionable_hand == parse_cards("8D 2C")
        assert legal_actions(state) == (PlayerAction.HIT, PlayerAction.STAND)

    def test_liberal_split_aces(self):
        """Aces may be resplit, hit and doubled at a liberal table."""
        state = deal_round("AS 6H AD 10C AC", rules=RuleSet.liberal_splits())
        state = next_state(next_state(state, PlayerAction.SPLIT))
        assert legal_actions(state) == (
            PlayerAction.HIT,
            PlayerAction.STAND,
            PlayerAction.DOUBLE,
            PlayerAction.SPLIT,
        )

    def test_no_split_aces(self):
        """split_aces=0 never splits aces but other pairs still split."""
        rules = RuleSet(split_aces=0)
        assert PlayerAction.SPLIT not in legal_actions(deal_round("AS 6H AD 10C", rules=rules))
        assert PlayerAction.SPLIT in legal_actions(deal_round("8S 6H 8D 10C", rules=rules))

    def test_outside_player_turn_raises(self):
        """The oracle is only defined during the player's turn."""
        state = init_state(10, rng=Random(1))
        with pytest.raises(PhaseError) as exc_info:
            legal_actions(state)
        assert exc_info.value.expected == Phase.PLAYER_TURN
        assert exc_info.value.actual == Phase.DEALING

    def test_finished_hand_raises(self):
        """A bust hand takes no more actions."""
        state = deal_round("10S 7H 6D 10C")
        busted = replace(state, player_hands=(parse_cards("10S 6D KD"),))
        assert hand_is_finished(busted, 0)
        with pytest.raises(HandFinishedError):
            legal_actions(busted)

    def test_one_card_hand_is_not_finished(self):
        """A split hand waiting for its second card is still open."""
        state = deal_round("8S 6H 8D 10C")
        state = next_state(state, PlayerAction.SPLIT)
        assert not hand_is_finished(state, 0)
        assert not hand_is_finished(state, 1)


class TestOracleInvariants:
    """Randomised checks that the oracle never offers an impossible action."""

    @pytest.mark.parametrize(
        "rules",
        [RuleSet(), RuleSet.liberal_splits(), RuleSet(max_hands_after_split=2), RuleSet.european()],
    )
    def test_random_play(self, rules):
        rng = Random(1234)
        for _ in range(300):
            state = init_state(10, rules=rules, rng=rng)
            while state.phase != Phase.GAME_OVER:
                if state.phase != Phase.PLAYER_TURN:
                    state = next_state(state)
                    continue

                legal = legal_actions(state)
                hand = state.actionable_hand
                assert PlayerAction.STAND in legal
                if PlayerAction.SPLIT in legal:
                    assert len(state.player_hands) < rules.max_hands_after_split
                    assert len(hand) == 2
                if PlayerAction.DOUBLE in legal:
                    assert len(hand) == 2
                state = next_state(state, rng.choice(legal))

            assert len(state.player_hands) <= rules.max_hands_after_split
            assert len(state.bets) == len(state.player_hands)
