"""
Exceptions raised by the rules engine.
"""


class AvalonError(Exception):
    """Base class for every rules-engine failure."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(self.message)


class InvalidConfigError(AvalonError):
    """Raised when a ruleset or variant combination cannot be played."""


class IllegalStateError(AvalonError):
    """Raised when an action is not allowed in the current stage of the game."""


class InvalidInputError(AvalonError):
    """Raised when an action argument is malformed (bad seat, wrong vote count, ...)."""
