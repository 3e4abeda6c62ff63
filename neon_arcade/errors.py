"""
Exception hierarchy for the arcade engine.

Gameplay input that arrives out of order is never an error: the games
ignore it. Exceptions are reserved for programming errors and for the
persistence collaborator.
"""


class ArcadeError(Exception):
    """Base class for engine errors."""


class InvariantViolation(ArcadeError, AssertionError):
    """An internal invariant was broken (e.g. a second SessionResult)."""


class StorageError(ArcadeError):
    """The key-value store could not read or write its medium."""


class RandomExhausted(ArcadeError):
    """A scripted random source ran out of values."""
