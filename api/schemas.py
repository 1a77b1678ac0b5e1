"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal

from blackjack.strategy.rules import RuleSet


class RulesRequest(BaseModel):
    """Table rules; omitted fields take the table defaults."""

    num_decks: int = Field(default=8, ge=1, le=8)
    dealer_stands_on_all_17: bool = True
    dealer_peeks: bool = True
    split_aces: int = Field(default=1, ge=0, le=3)
    hit_on_split_ace: bool = False
    max_hands_after_split: int = Field(default=4, ge=1, le=4)
    double_on: Literal["any", "9-11", "10-11"] = "any"
    double_after_split: bool = True
    double_on_split_ace: bool = False
    blackjack_payout: float = Field(default=1.5, ge=1.0)
    ace_and_ten_counts_as_blackjack: bool = True
    split_ace_can_be_blackjack: bool = False

    def to_ruleset(self) -> RuleSet:
        return RuleSet(**self.model_dump())

    @classmethod
    def from_ruleset(cls, rules: RuleSet) -> "RulesRequest":
        return cls(**{name: getattr(rules, name) for name in cls.model_fields})


# Game schemas
class NewGameRequest(BaseModel):
    """Request to open a table."""

    rules: RulesRequest | None = None
    bankroll: float | None = Field(default=None, gt=0)


class NewGameResponse(BaseModel):
    """A freshly opened table."""

    session_id: str
    bankroll: float
    rules: RulesRequest


class BetRequest(BaseModel):
    """Request to place a bet."""

    amount: int = Field(..., ge=1, description="Bet amount")


class ActionRequest(BaseModel):
    """Request for player action."""

    action: Literal["hit", "stand", "double", "split"]


class CardResponse(BaseModel):
    """Card representation; a face-down card hides its rank and suit."""

    model_config = ConfigDict(from_attributes=True)

    rank: str | None
    suit: str | None
    value: int
    face_down: bool = False


class HandResponse(BaseModel):
    """Hand representation."""

    cards: list[CardResponse]
    value: int | str
    is_soft: bool
    is_blackjack: bool
    is_busted: bool
    bet: float | None = None


class GameStateResponse(BaseModel):
    """Current table state."""

    phase: str
    player_hands: list[HandResponse]
    actionable_hand_index: int
    dealer_hand: HandResponse
    dealer_showing: CardResponse | None
    bankroll: float
    legal_actions: list[str]
    cards_remaining: int


class SuggestionResponse(BaseModel):
    """Basic strategy advice for the actionable hand."""

    action: str
    legal_actions: list[str]


class HandResultResponse(BaseModel):
    """Outcome of one player hand."""

    hand_index: int
    result: Literal["player-win", "dealer-win", "push"]
    reason: Literal["blackjack", "player-bust", "dealer-bust", "higher-hand"] | None
    bet: float
    payout: float


class RoundResultResponse(BaseModel):
    """Settled round."""

    hands: list[HandResultResponse]
    net: float
    bankroll: float


# Stats schemas
class SimulateRequest(BaseModel):
    """Request for a Monte Carlo run."""

    num_rounds: int = Field(default=10_000, ge=1)
    bet: int = Field(default=1, ge=1)
    seed: int | None = None
    rules: RulesRequest | None = None


class SimulationResponse(BaseModel):
    """Monte Carlo run summary."""

    rounds: int
    hands: int
    wins: int
    losses: int
    pushes: int
    blackjacks: int
    total_wagered: float
    net: float
    house_edge_percent: float
    standard_error_percent: float
    expected_house_edge_percent: float
    elapsed_seconds: float


class HouseEdgeResponse(BaseModel):
    """House edge calculation result."""

    house_edge_percent: float
    rules: RulesRequest
