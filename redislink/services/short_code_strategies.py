"""
Short code generation strategies for the resolution engine.
Uses Strategy Pattern to allow different generation algorithms.

Generators are stateless and make no uniqueness promise: the record store's
unique constraint on `code` is the arbiter, and the engine retries on collision.
"""

import secrets
from abc import ABC, abstractmethod

from nanoid import generate

from redislink.config import URL_SAFE_ALPHABET


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    def __init__(self, length: int = 8, alphabet: str = URL_SAFE_ALPHABET):
        if not 1 <= length <= 20:
            raise ValueError(f"Short code length must be between 1 and 20 (given: {length}).")
        self.length = length
        self.alphabet = alphabet

    @abstractmethod
    def generate(self) -> str:
        """
        Generate a candidate short code.

        Returns:
            A URL-safe code of `length` characters drawn from `alphabet`
        """
        pass


class NanoIdShortCodeStrategy(ShortCodeStrategy):
    """
    NanoID generation strategy (default).

    Pros: cryptographically random, tiny, no DB queries
    Cons: collisions are possible (and retried), codes are not sequential
    """

    def generate(self) -> str:
        return generate(self.alphabet, self.length)


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random generation strategy using the `secrets` module.

    Same guarantees as NanoID without the extra dependency.
    """

    def generate(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))
