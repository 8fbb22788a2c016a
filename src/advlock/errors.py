"""Exceptions raised by advlock.

Contention and I/O failures while locking are reported as booleans, not
exceptions. Only bad input and the context-manager helpers raise.
"""


class AdvlockError(Exception):
    """Base class for advlock errors."""


class InvalidPathError(AdvlockError, ValueError):
    """The directory of the file to lock does not exist or cannot be resolved."""


class LockNotAcquiredError(AdvlockError):
    """A scoped lock helper could not acquire its lock."""

    def __init__(self, path, attempts: int | None = None):
        self.path = path
        self.attempts = attempts
        msg = f"Could not acquire lock on {path}"
        if attempts:
            msg += f" after {attempts} attempt(s)"
        super().__init__(msg)


class ConfigError(AdvlockError, ValueError):
    """A configuration value could not be parsed."""
