"""
Factory for creating cache instances.

The factory only builds; it neither connects nor keeps instances around.
The composition root owns the instance and its lifecycle.
"""

from enum import Enum

from redislink.config import Settings
from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache


class CacheBackend(Enum):
    """Available cache backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class CacheFactory:
    """Simple factory for creating cache instances from settings."""

    @classmethod
    def create(cls, backend: CacheBackend, settings: Settings) -> CacheStrategy:
        """
        Create a cache instance.

        Args:
            backend: Type of cache backend (from enum)
            settings: Application settings (TTL, Redis URL, retry budget)

        Returns:
            A new, not yet connected cache instance
        """
        if backend == CacheBackend.REDIS:
            return RedisCache(
                redis_url=settings.redis_url,
                default_ttl=settings.cache_ttl,
                max_retries=settings.cache_max_retries,
                socket_timeout=settings.cache_socket_timeout,
                retry_delay=settings.cache_retry_delay,
            )

        elif backend == CacheBackend.MEMORY:
            return InMemoryCache(default_ttl=settings.cache_ttl)

        elif backend == CacheBackend.NULL:
            return NullCache(default_ttl=settings.cache_ttl)

        else:
            raise ValueError(f"Unknown cache backend: {backend}")
