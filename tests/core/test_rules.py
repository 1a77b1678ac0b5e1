"""Tests for table rules."""

import pytest

from blackjack.strategy import RuleSet


class TestRuleSet:
    """Tests for RuleSet defaults, presets and validation."""

    def test_defaults(self, rules):
        """Test the default table."""
        assert rules.num_decks == 8
        assert rules.dealer_stands_on_all_17
        assert not rules.dealer_hits_soft_17
        assert rules.dealer_peeks
        assert rules.split_aces == 1
        assert not rules.hit_on_split_ace
        assert rules.max_hands_after_split == 4
        assert rules.double_on == "any"
        assert rules.double_after_split
        assert not rules.double_on_split_ace
        assert rules.blackjack_payout == 1.5
        assert rules.ace_and_ten_counts_as_blackjack
        assert not rules.split_ace_can_be_blackjack

    def test_rules_are_immutable(self, rules):
        """Rules cannot change once built."""
        with pytest.raises(AttributeError):
            rules.num_decks = 6

    def test_presets(self):
        """Test named rule sets."""
        assert RuleSet.vegas_strip().num_decks == 6
        assert RuleSet.downtown_vegas().dealer_hits_soft_17
        assert RuleSet.atlantic_city().num_decks == 8
        european = RuleSet.european()
        assert not european.dealer_peeks
        assert european.double_on == "9-11"
        liberal = RuleSet.liberal_splits()
        assert liberal.split_aces == 3
        assert liberal.hit_on_split_ace

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"num_decks": 0},
            {"num_decks": 9},
            {"split_aces": 4},
            {"split_aces": -1},
            {"max_hands_after_split": 0},
            {"max_hands_after_split": 5},
            {"double_on": "8-11"},
            {"blackjack_payout": 0.5},
        ],
    )
    def test_invalid_rules_raise(self, kwargs):
        """Out-of-range rules are rejected."""
        with pytest.raises(ValueError):
            RuleSet(**kwargs)

    def test_can_split(self):
        """A single-hand table allows no splits."""
        assert RuleSet().can_split
        assert not RuleSet(max_hands_after_split=1).can_split
