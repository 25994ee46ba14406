"""Error taxonomy for the game engine."""


class TabooGameError(Exception):
    """Base class for all taboogame errors."""


class InvalidTransition(TabooGameError):
    """An operation was invoked in a phase that does not permit it."""

    def __init__(self, action: str, phase: str, reason: str | None = None):
        self.action = action
        self.phase = phase
        message = f"{action!r} not allowed in phase {phase}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SkipLimitReached(InvalidTransition):
    """A skip was requested after the round's skips were used up."""


class ConfigurationError(TabooGameError, ValueError):
    """Malformed settings, config file, or word corpus."""
