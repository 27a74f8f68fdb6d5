"""Exceptions raised by the resolution engine and its collaborators.

Classes:
    ShortenerError:
        Generic base class for all RedisLink errors.

    NotFoundError:
        Raised when a short code is absent from both cache and record store.

    DuplicateKeyError:
        Raised by a record store when an insert violates a uniqueness constraint.
        Absorbed by the resolution engine under normal load.

    GenerationExhaustedError:
        Raised when every attempt to allocate an unused short code collided.

    StoreUnavailableError:
        Raised when the record store cannot be reached.

    InvalidInputError:
        Raised when a long URL or short code falls outside the configured limits.

Cache failures are deliberately absent: cache strategies absorb them and report
misses instead.

Example:
    >>> from redislink.exceptions import NotFoundError
    >>> raise NotFoundError("Short link 'abc123' not found.")
    Traceback (most recent call last):
        ...
    redislink.exceptions.NotFoundError: Short link 'abc123' not found.
"""

from typing import Optional


class ShortenerError(Exception):
    """Generic base class for RedisLink errors."""

    pass


class NotFoundError(ShortenerError):
    """Exception raised when a short code does not resolve to any record."""

    pass


class DuplicateKeyError(ShortenerError):
    """Exception raised when a record with the same long URL or code already exists.

    Attributes:
        field (Optional[str]):
            Name of the violated unique field, "long_url" or "code".
            None if the store could not tell which one.
        value (Optional[str]):
            The conflicting value.
    """

    def __init__(self, field: Optional[str], value: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(f"Record with {field or 'unique key'} '{value}' already exists.")


class GenerationExhaustedError(ShortenerError):
    """Exception raised when the short code retry budget is used up."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not allocate an unused short code after {attempts} attempts.")


class StoreUnavailableError(ShortenerError):
    """Exception raised when the record store cannot be reached (connection, timeout, etc.)."""

    pass


class InvalidInputError(ShortenerError):
    """Exception raised when a long URL or short code is rejected."""

    pass
