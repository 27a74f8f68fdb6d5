"""
Test configuration and fixtures for the resolution engine.
This centralizes all test setup, making individual tests clean.
"""

import asyncio
import itertools
from typing import Iterable, Optional

import pytest

from redislink.cache.keys import CacheKeySchema
from redislink.cache.strategies import CacheStrategy, InMemoryCache
from redislink.config import Settings
from redislink.services.resolution_engine import ResolutionEngine
from redislink.services.short_code_strategies import ShortCodeStrategy
from redislink.storage.strategies import InMemoryRecordStore, RecordStoreStrategy, SQLAlchemyRecordStore


BASE_URL = "https://svc"


class SequenceShortCodeStrategy(ShortCodeStrategy):
    """Hands out codes from a fixed sequence so collisions can be forced"""

    def __init__(self, codes: Iterable[str]):
        super().__init__()
        self._codes = iter(codes)
        self.calls = 0

    def generate(self) -> str:
        self.calls += 1
        return next(self._codes)


def counting_codes(prefix: str = "code"):
    return (f"{prefix}{i:04d}" for i in itertools.count(1))


@pytest.fixture
def settings():
    """Settings isolated from any .env file, with in-memory backends"""
    return Settings(
        _env_file=None,
        base_url=BASE_URL,
        cache_backend="memory",
        record_store_backend="memory",
        database_url="sqlite://",
    )


@pytest.fixture
def cache():
    """Connected in-memory cache, fresh for each test"""
    cache = InMemoryCache(default_ttl=60)
    asyncio.run(cache.connect())
    return cache


@pytest.fixture
def records():
    """
    SQLAlchemy record store on a private in-memory SQLite database.
    Tables are created by connect() and vanish with the engine.
    """
    store = SQLAlchemyRecordStore(database_url="sqlite://")
    asyncio.run(store.connect())
    try:
        yield store
    finally:
        asyncio.run(store.disconnect())


@pytest.fixture
def make_engine(cache, records):
    """
    Build a ResolutionEngine, defaulting to the fixtures above and a
    generator that never repeats itself.
    """
    def _make(
        codes: Optional[Iterable[str]] = None,
        cache: CacheStrategy = cache,
        records: RecordStoreStrategy = records,
        max_code_attempts: int = 5,
    ) -> ResolutionEngine:
        return ResolutionEngine(
            cache,
            records,
            SequenceShortCodeStrategy(codes if codes is not None else counting_codes()),
            base_url=BASE_URL,
            cache_ttl=60,
            max_code_attempts=max_code_attempts,
            keys=CacheKeySchema("test"),
        )

    return _make


@pytest.fixture
def memory_records():
    """Connected in-memory record store"""
    store = InMemoryRecordStore()
    asyncio.run(store.connect())
    return store
