"""Exceptions raised by claw-hooks."""


class ClawHooksError(Exception):
    """Base exception for claw-hooks errors."""

    pass


class ConfigError(ClawHooksError):
    """Configuration file could not be read, parsed or validated."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class InputError(ClawHooksError):
    """Hook payload from the agent could not be decoded."""

    pass
