"""
Factory for creating short code generation strategies.
"""

from enum import Enum
from typing import Optional

from redislink.config import Settings
from redislink.services.short_code_strategies import (
    ShortCodeStrategy,
    NanoIdShortCodeStrategy,
    RandomShortCodeStrategy,
)


class ShortCodeStrategyType(Enum):
    """Available short code generation strategies"""
    NANOID = "nanoid"
    RANDOM = "random"


class ShortCodeFactory:
    """Factory for creating short code generation strategies from settings"""

    @classmethod
    def create_strategy(
        cls,
        strategy_type: Optional[ShortCodeStrategyType] = None,
        settings: Optional[Settings] = None,
    ) -> ShortCodeStrategy:
        """
        Create a short code generation strategy.

        Args:
            strategy_type: Type of strategy to create.
                          If None, uses value from settings.
            settings: Application settings (length, alphabet).
                      If None, defaults are used.

        Returns:
            A new ShortCodeStrategy

        Raises:
            ValueError: If strategy_type is unknown
        """
        settings = settings if settings is not None else Settings(_env_file=None)

        # Use default from settings if not specified
        if strategy_type is None:
            strategy_type = ShortCodeStrategyType(settings.short_code_strategy)

        if strategy_type == ShortCodeStrategyType.NANOID:
            return NanoIdShortCodeStrategy(
                length=settings.short_code_length,
                alphabet=settings.short_code_alphabet,
            )
        elif strategy_type == ShortCodeStrategyType.RANDOM:
            return RandomShortCodeStrategy(
                length=settings.short_code_length,
                alphabet=settings.short_code_alphabet,
            )
        else:
            raise ValueError(f"Unknown strategy type: {strategy_type}")
