"""
Tests for short code generation strategies.
"""
import re

import pytest

from redislink.config import Settings
from redislink.services.short_code_strategies import (
    NanoIdShortCodeStrategy,
    RandomShortCodeStrategy,
)
from redislink.services.short_code_factory import (
    ShortCodeFactory,
    ShortCodeStrategyType
)


URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


class TestNanoIdStrategy:
    """Test NanoID strategy"""

    def test_generates_correct_length(self):
        """Test that codes have the configured length"""
        strategy = NanoIdShortCodeStrategy(length=8)

        code = strategy.generate()

        assert len(code) == 8
        assert URL_SAFE.match(code)

    def test_codes_are_random(self):
        """Test that repeated calls do not repeat themselves"""
        strategy = NanoIdShortCodeStrategy(length=12)

        codes = {strategy.generate() for _ in range(100)}

        assert len(codes) == 100

    def test_respects_alphabet(self):
        """Test that only alphabet characters are used"""
        strategy = NanoIdShortCodeStrategy(length=20, alphabet="ab")

        assert set(strategy.generate()) <= {"a", "b"}


class TestRandomStrategy:
    """Test secrets-based strategy"""

    def test_generates_correct_length(self):
        """Test that codes have the configured length and charset"""
        strategy = RandomShortCodeStrategy(length=5, alphabet="XYZ")

        code = strategy.generate()

        assert len(code) == 5
        assert set(code) <= set("XYZ")

    @pytest.mark.parametrize("length", [0, 21])
    def test_rejects_bad_length(self, length):
        """Test length bounds"""
        with pytest.raises(ValueError):
            RandomShortCodeStrategy(length=length)


class TestShortCodeFactory:
    """Test strategy factory"""

    def test_creates_random_strategy(self):
        """Test factory creates random strategy"""
        strategy = ShortCodeFactory.create_strategy(ShortCodeStrategyType.RANDOM)
        assert isinstance(strategy, RandomShortCodeStrategy)

    def test_creates_nanoid_strategy(self):
        """Test factory creates NanoID strategy"""
        strategy = ShortCodeFactory.create_strategy(ShortCodeStrategyType.NANOID)
        assert isinstance(strategy, NanoIdShortCodeStrategy)

    def test_creates_default_from_settings(self):
        """Test factory uses settings when no type specified"""
        settings = Settings(_env_file=None, short_code_strategy="random", short_code_length=6, short_code_alphabet="ab")

        strategy = ShortCodeFactory.create_strategy(settings=settings)

        assert isinstance(strategy, RandomShortCodeStrategy)
        assert strategy.length == 6
        assert strategy.alphabet == "ab"
