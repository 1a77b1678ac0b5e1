"""Round state machine, outcome resolution and table driver."""

from blackjack.game.state import Phase, RoundState
from blackjack.game.errors import (
    InvalidUseError,
    IllegalActionError,
    PhaseError,
    HandFinishedError,
    UnreachableStateError,
)
from blackjack.game.actions import PlayerAction, legal_actions
from blackjack.game.engine import init_state, next_state, play_round
from blackjack.game.outcome import (
    HandOutcome,
    Reason,
    Result,
    determine_outcomes,
    net_result,
    settle,
)
from blackjack.game.events import GameEvent, EventType, EventEmitter
from blackjack.game.table import BlackjackTable

__all__ = [
    "Phase",
    "RoundState",
    "InvalidUseError",
    "IllegalActionError",
    "PhaseError",
    "HandFinishedError",
    "UnreachableStateError",
    "PlayerAction",
    "legal_actions",
    "init_state",
    "next_state",
    "play_round",
    "HandOutcome",
    "Reason",
    "Result",
    "determine_outcomes",
    "net_result",
    "settle",
    "GameEvent",
    "EventType",
    "EventEmitter",
    "BlackjackTable",
]
