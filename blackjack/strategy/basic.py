"""Basic strategy tables for blackjack."""

from enum import Enum, auto
from typing import Collection, Mapping

from blackjack.strategy.rules import RuleSet


class Action(Enum):
    """Strategy table cells."""

    HIT = auto()
    STAND = auto()
    DOUBLE = auto()
    SPLIT = auto()

    # Conditional actions (fallback if primary not allowed)
    DOUBLE_OR_HIT = auto()  # Double if allowed, else hit
    DOUBLE_OR_STAND = auto()  # Double if allowed, else stand
    SPLIT_OR_HIT = auto()  # Split if allowed, else hit

    def __str__(self) -> str:
        return self.name.replace("_OR_", "/").replace("_", " ")


# Type aliases for clarity
DealerUpcard = int  # 2-11 (11 = Ace)
PlayerTotal = int  # Hard total or soft total value
TableKey = tuple[int, int]  # (player total or pair card value, dealer upcard)

_FALLBACKS: Mapping[Action, tuple[Action, ...]] = {
    Action.HIT: (Action.HIT, Action.STAND),
    Action.STAND: (Action.STAND,),
    Action.DOUBLE: (Action.DOUBLE, Action.HIT, Action.STAND),
    Action.SPLIT: (Action.SPLIT, Action.HIT, Action.STAND),
    Action.DOUBLE_OR_HIT: (Action.DOUBLE, Action.HIT, Action.STAND),
    Action.DOUBLE_OR_STAND: (Action.DOUBLE, Action.STAND),
    Action.SPLIT_OR_HIT: (Action.SPLIT, Action.HIT, Action.STAND),
}


class BasicStrategy:
    """
    Basic strategy lookup tables.

    Pre-computed dictionaries for O(1) lookup.
    Tables vary based on rule set (H17/S17, DAS).
    """

    def __init__(self, rules: RuleSet | None = None) -> None:
        """
        Initialize basic strategy for given rules.

        Args:
            rules: Rule set to generate strategy for. Uses default if None.
        """
        self.rules = rules or RuleSet()
        self._hard_table = self._build_hard_table()
        self._soft_table = self._build_soft_table()
        self._pair_table = self._build_pair_table()

    def get_action(
        self,
        player_total: int,
        dealer_upcard: int,
        is_soft: bool = False,
        is_pair: bool = False,
        pair_rank: int | None = None,
        can_double: bool = True,
        can_split: bool = True,
        can_hit: bool = True,
    ) -> Action:
        """
        Get the basic strategy action.

        Args:
            player_total: Player's hand total (high side for soft hands)
            dealer_upcard: Dealer's upcard value (2-11, Ace=11)
            is_soft: Whether the hand is soft
            is_pair: Whether the hand is a pair
            pair_rank: The card value of the pair (2-11, Ace=11)
            can_double: Whether doubling is allowed
            can_split: Whether splitting is allowed
            can_hit: Whether hitting is allowed

        Returns:
            The recommended action, one of HIT, STAND, DOUBLE or SPLIT
        """
        allowed = {Action.STAND}
        if can_hit:
            allowed.add(Action.HIT)
        if can_double:
            allowed.add(Action.DOUBLE)
        if can_split:
            allowed.add(Action.SPLIT)

        return self.resolve(self.lookup(
            player_total, dealer_upcard,
            is_soft=is_soft,
            is_pair=is_pair and can_split,
            pair_rank=pair_rank,
        ), allowed)

    def lookup(
        self,
        player_total: int,
        dealer_upcard: int,
        is_soft: bool = False,
        is_pair: bool = False,
        pair_rank: int | None = None,
    ) -> Action:
        """Return the raw table cell, which may be conditional."""
        # Check for pairs first
        if is_pair and pair_rank is not None:
            action = self._pair_table.get((pair_rank, dealer_upcard))
            if action:
                return action

        # Check soft hands
        if is_soft:
            action = self._soft_table.get((player_total, dealer_upcard))
            if action:
                return action

        # Hard hands
        action = self._hard_table.get((player_total, dealer_upcard))
        if action:
            return action

        # Default actions for edge cases
        if player_total >= 17:
            return Action.STAND
        return Action.HIT

    @staticmethod
    def resolve(action: Action, allowed: Collection[Action]) -> Action:
        """Resolve a table cell to the first allowed plain action."""
        for candidate in _FALLBACKS[action]:
            if candidate in allowed:
                return candidate
        return Action.STAND

    def _build_hard_table(self) -> Mapping[TableKey, Action]:
        """Build hard totals strategy table."""
        H = Action.HIT
        S = Action.STAND
        D = Action.DOUBLE_OR_HIT

        # Dealer upcards: 2, 3, 4, 5, 6, 7, 8, 9, 10, A(11)
        table: dict[TableKey, Action] = {}

        # Hard 4-8: Always hit
        for total in range(4, 9):
            for dealer in range(2, 12):
                table[(total, dealer)] = H

        # Hard 9
        for dealer in [2, 7, 8, 9, 10, 11]:
            table[(9, dealer)] = H
        for dealer in [3, 4, 5, 6]:
            table[(9, dealer)] = D

        # Hard 10
        for dealer in [10, 11]:
            table[(10, dealer)] = H
        for dealer in range(2, 10):
            table[(10, dealer)] = D

        # Hard 11 (hit vs Ace when the dealer stands on soft 17)
        for dealer in range(2, 11):
            table[(11, dealer)] = D
        table[(11, 11)] = D if self.rules.dealer_hits_soft_17 else H

        # Hard 12
        table[(12, 2)] = H
        table[(12, 3)] = H
        for dealer in [4, 5, 6]:
            table[(12, dealer)] = S
        for dealer in range(7, 12):
            table[(12, dealer)] = H

        # Hard 13-16
        for total in range(13, 17):
            for dealer in range(2, 7):
                table[(total, dealer)] = S
            for dealer in range(7, 12):
                table[(total, dealer)] = H

        # Hard 17+: Always stand
        for total in range(17, 22):
            for dealer in range(2, 12):
                table[(total, dealer)] = S

        return table

    def _build_soft_table(self) -> Mapping[TableKey, Action]:
        """Build soft totals strategy table."""
        H = Action.HIT
        S = Action.STAND
        D = Action.DOUBLE_OR_HIT
        Ds = Action.DOUBLE_OR_STAND

        table: dict[TableKey, Action] = {}

        # Soft 12 (A,A when it cannot be split)
        for dealer in range(2, 12):
            table[(12, dealer)] = H

        # Soft 13 (A,2)
        for dealer in [2, 3, 4, 7, 8, 9, 10, 11]:
            table[(13, dealer)] = H
        for dealer in [5, 6]:
            table[(13, dealer)] = D

        # Soft 14 (A,3)
        for dealer in [2, 3, 4, 7, 8, 9, 10, 11]:
            table[(14, dealer)] = H
        for dealer in [5, 6]:
            table[(14, dealer)] = D

        # Soft 15 (A,4)
        for dealer in [2, 3, 7, 8, 9, 10, 11]:
            table[(15, dealer)] = H
        for dealer in [4, 5, 6]:
            table[(15, dealer)] = D

        # Soft 16 (A,5)
        for dealer in [2, 3, 7, 8, 9, 10, 11]:
            table[(16, dealer)] = H
        for dealer in [4, 5, 6]:
            table[(16, dealer)] = D

        # Soft 17 (A,6)
        for dealer in [2, 7, 8, 9, 10, 11]:
            table[(17, dealer)] = H
        for dealer in [3, 4, 5, 6]:
            table[(17, dealer)] = D

        # Soft 18 (A,7)
        table[(18, 2)] = Ds if self.rules.dealer_hits_soft_17 else S
        for dealer in [3, 4, 5, 6]:
            table[(18, dealer)] = Ds
        for dealer in [7, 8]:
            table[(18, dealer)] = S
        for dealer in [9, 10, 11]:
            table[(18, dealer)] = H

        # Soft 19 (A,8)
        for dealer in range(2, 12):
            table[(19, dealer)] = S
        if self.rules.dealer_hits_soft_17:
            table[(19, 6)] = Ds

        # Soft 20 (A,9): Always stand
        for dealer in range(2, 12):
            table[(20, dealer)] = S

        return table

    def _build_pair_table(self) -> Mapping[TableKey, Action]:
        """Build pair splitting strategy table."""
        H = Action.HIT
        S = Action.STAND
        P = Action.SPLIT
        Ph = Action.SPLIT_OR_HIT
        D = Action.DOUBLE_OR_HIT
        das = self.rules.double_after_split

        table: dict[TableKey, Action] = {}

        # Pair of 2s
        for dealer in [2, 3]:
            table[(2, dealer)] = Ph if das else H
        for dealer in [4, 5, 6, 7]:
            table[(2, dealer)] = Ph
        for dealer in [8, 9, 10, 11]:
            table[(2, dealer)] = H

        # Pair of 3s
        for dealer in [2, 3]:
            table[(3, dealer)] = Ph if das else H
        for dealer in [4, 5, 6, 7]:
            table[(3, dealer)] = Ph
        for dealer in [8, 9, 10, 11]:
            table[(3, dealer)] = H

        # Pair of 4s
        for dealer in [2, 3, 4, 7, 8, 9, 10, 11]:
            table[(4, dealer)] = H
        for dealer in [5, 6]:
            table[(4, dealer)] = Ph if das else H

        # Pair of 5s: Never split, treat as hard 10
        for dealer in range(2, 10):
            table[(5, dealer)] = D
        for dealer in [10, 11]:
            table[(5, dealer)] = H

        # Pair of 6s
        table[(6, 2)] = Ph if das else H
        for dealer in [3, 4, 5, 6]:
            table[(6, dealer)] = Ph
        for dealer in [7, 8, 9, 10, 11]:
            table[(6, dealer)] = H

        # Pair of 7s
        for dealer in range(2, 8):
            table[(7, dealer)] = Ph
        for dealer in [8, 9, 10, 11]:
            table[(7, dealer)] = H

        # Pair of 8s: Always split
        for dealer in range(2, 12):
            table[(8, dealer)] = P

        # Pair of 9s
        for dealer in [2, 3, 4, 5, 6, 8, 9]:
            table[(9, dealer)] = P
        for dealer in [7, 10, 11]:
            table[(9, dealer)] = S

        # Pair of 10s: Never split
        for dealer in range(2, 12):
            table[(10, dealer)] = S

        # Pair of Aces: Always split
        for dealer in range(2, 12):
            table[(11, dealer)] = P

        return table

    @property
    def hard_table(self) -> Mapping[TableKey, Action]:
        """Return the hard totals strategy table."""
        return self._hard_table

    @property
    def soft_table(self) -> Mapping[TableKey, Action]:
        """Return the soft totals strategy table."""
        return self._soft_table

    @property
    def pair_table(self) -> Mapping[TableKey, Action]:
        """Return the pair splitting strategy table."""
        return self._pair_table
