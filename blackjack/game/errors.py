"""Errors raised when the engine is driven incorrectly."""

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from blackjack.game.actions import PlayerAction
    from blackjack.game.state import Phase


class InvalidUseError(RuntimeError):
    """
    The engine was called in a way the rules do not allow.

    These errors indicate a bug in the driver, not a recoverable condition.
    """


class IllegalActionError(InvalidUseError):
    """A player action was missing or is not legal for the actionable hand."""

    def __init__(
        self,
        action: "PlayerAction | str | None",
        legal_actions: Iterable["PlayerAction"],
    ) -> None:
        self.action = action
        self.legal_actions = tuple(legal_actions)
        legal = ", ".join(str(a) for a in self.legal_actions) or "none"
        if action is None:
            message = f"A player action is required (legal actions: {legal})"
        else:
            message = f"Illegal action '{action}' (legal actions: {legal})"
        super().__init__(message)


class PhaseError(InvalidUseError):
    """An operation was called in the wrong phase of the round."""

    def __init__(
        self,
        operation: str,
        expected: "Phase | None",
        actual: "Phase",
    ) -> None:
        self.operation = operation
        self.expected = expected
        self.actual = actual
        message = f"Cannot {operation} during {actual}"
        if expected is not None:
            message += f" (requires {expected})"
        super().__init__(message)


class HandFinishedError(InvalidUseError):
    """The actionable hand has already finished and takes no more actions."""

    def __init__(self, hand_index: int) -> None:
        self.hand_index = hand_index
        super().__init__(f"Hand {hand_index} is already finished")


class UnreachableStateError(InvalidUseError):
    """A state or phase change not covered by the transition table."""

    def __init__(self, message: str = "Unreachable code has been reached") -> None:
        super().__init__(message)
