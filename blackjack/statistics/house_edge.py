"""House edge estimates from table rules."""

from decimal import Decimal

from blackjack.strategy.rules import RuleSet


class HouseEdgeCalculator:
    """
    Estimate the house edge for a rule set.

    Starts from a baseline edge for six decks, dealer standing on soft 17,
    3:2 naturals, double on any two cards and double after split, then adds
    the usual effect of each rule variation.
    """

    # Rule effects on house edge (in percentage points)
    # Positive = increases house edge (bad for player)
    # Negative = decreases house edge (good for player)
    _RULE_EFFECTS = {
        # Number of decks (baseline is 6)
        "single_deck": Decimal("-0.48"),
        "double_deck": Decimal("-0.19"),
        "four_deck": Decimal("-0.06"),
        "six_deck": Decimal("0.00"),
        "eight_deck": Decimal("+0.02"),
        # Dealer rules
        "h17": Decimal("+0.22"),
        "dealer_no_peek": Decimal("+0.11"),
        # Blackjack payout
        "bj_6_5": Decimal("+1.39"),
        "bj_1_1": Decimal("+2.27"),
        # Double rules
        "no_das": Decimal("+0.14"),
        "double_10_11_only": Decimal("+0.18"),
        "double_9_11_only": Decimal("+0.09"),
        # Split rules
        "no_split_aces": Decimal("+0.18"),
        "no_resplit": Decimal("+0.03"),
        "resplit_aces": Decimal("-0.08"),
        "hit_split_aces": Decimal("-0.19"),
    }

    _DECK_EFFECTS = {
        1: "single_deck",
        2: "double_deck",
        4: "four_deck",
        6: "six_deck",
        8: "eight_deck",
    }

    _BASELINE = Decimal("0.50")

    def __init__(self, rules: RuleSet) -> None:
        self.rules = rules

    def calculate(self) -> Decimal:
        """
        Calculate the house edge for the configured rules.

        Returns:
            House edge as a percentage (e.g., 0.50 for 0.50%)
        """
        rules = self.rules
        edge = self._BASELINE

        # Deck counts between the tabulated ones use the next smaller count
        decks = max((n for n in self._DECK_EFFECTS if n <= rules.num_decks), default=1)
        edge += self._RULE_EFFECTS[self._DECK_EFFECTS[decks]]

        if rules.dealer_hits_soft_17:
            edge += self._RULE_EFFECTS["h17"]
        if not rules.dealer_peeks:
            edge += self._RULE_EFFECTS["dealer_no_peek"]

        if rules.blackjack_payout <= 1.0:
            edge += self._RULE_EFFECTS["bj_1_1"]
        elif rules.blackjack_payout <= 1.2:
            edge += self._RULE_EFFECTS["bj_6_5"]

        if not rules.double_after_split:
            edge += self._RULE_EFFECTS["no_das"]
        if rules.double_on == "10-11":
            edge += self._RULE_EFFECTS["double_10_11_only"]
        elif rules.double_on == "9-11":
            edge += self._RULE_EFFECTS["double_9_11_only"]

        if rules.split_aces == 0:
            edge += self._RULE_EFFECTS["no_split_aces"]
        elif rules.split_aces > 1:
            edge += self._RULE_EFFECTS["resplit_aces"]
        if rules.split_aces and rules.hit_on_split_ace:
            edge += self._RULE_EFFECTS["hit_split_aces"]
        if rules.max_hands_after_split <= 2:
            edge += self._RULE_EFFECTS["no_resplit"]

        return edge

    def expected_loss(self, total_wagered: Decimal) -> Decimal:
        """Expected loss on a given amount of initial bets."""
        return (total_wagered * self.calculate() / 100).quantize(Decimal("0.01"))
