"""
Custom exception hierarchy for the Monopoly engine.

Expected negative outcomes (not enough money, property already owned)
are reported through ``RuleCheck`` and ``CommandResult`` values. The
errors below are raised only for caller misuse.
"""


class MonopolyError(Exception):
    """Base exception for all game-related errors."""


class InvalidArgumentError(MonopolyError, ValueError):
    """A null, empty, negative or out-of-range argument was supplied."""


class PreconditionFailedError(MonopolyError):
    """The operation is not legal in the current game state."""


class CapacityExceededError(MonopolyError):
    """The game already holds the maximum number of players."""


class InvalidTransitionError(MonopolyError):
    """A state machine was asked to move along an unlisted edge."""

    def __init__(self, source, target):
        self.source = source
        self.target = target
        super().__init__(f"Invalid transition: {source} -> {target}")


class SnapshotFormatError(MonopolyError):
    """A serialized snapshot could not be parsed or is inconsistent."""
