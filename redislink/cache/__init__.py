"""
Cache module for RedisLink.
Implements Strategy Pattern for flexible, fail-open cache backends.
"""

from .keys import CacheKeySchema
from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache
from .factory import CacheBackend, CacheFactory

__all__ = [
    "CacheKeySchema",
    "CacheStrategy",
    "RedisCache",
    "InMemoryCache",
    "NullCache",
    "CacheBackend",
    "CacheFactory",
]
