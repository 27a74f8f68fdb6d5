"""
Cache strategies using Strategy Pattern.
Allows switching between different cache backends (Redis, In-Memory, Null).

Every strategy is fail-open: an unreachable or misbehaving cache is reported
as a miss (reads) or as False (writes), never as an exception. Callers treat
write results as informational only.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from redislink.schemas.health import CacheStatus


logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 86400  # 24 hours


def serialize(value: Any) -> str:
    """Render a JSON-serializable value in canonical text form (sorted keys, compact)."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def deserialize(raw: Optional[Any], key: str = "") -> Optional[Any]:
    """Decode stored text back into a value; undecodable entries count as a miss."""
    if raw is None:
        return None
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)
    except ValueError:
        logger.warning("Discarding undecodable cache entry.", extra={"key": key})
        return None


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    This is the Strategy Pattern interface - the resolution engine talks to
    any cache backend through it without knowing which one is configured.

    All I/O methods are async because cache operations involve network I/O
    (for Redis). Connection state is kept per instance:
    `connected`, `retry_count` and `max_retries`.
    """

    backend = "abstract"

    def __init__(self, default_ttl: int = DEFAULT_CACHE_TTL, max_retries: int = 0):
        self.default_ttl = default_ttl
        self.max_retries = max_retries
        self.retry_count = 0
        self.connected = False
        self._gave_up = False

    @abstractmethod
    async def connect(self) -> bool:
        """
        Establish the connection. Idempotent, never raises.

        Returns:
            True if the cache is connected afterwards
        """
        pass

    async def reconnect(self) -> bool:
        """Reset the retry budget and connect again."""
        self.retry_count = 0
        self._gave_up = False
        return await self.connect()

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the connection. Subsequent operations behave as disconnected."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Deserialized value, or None on miss, when disconnected or on error
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache with TTL (Time To Live).

        Args:
            key: Cache key
            value: JSON-serializable value, stored in canonical text form
            ttl: Time to live in seconds (default: the configured cache TTL)

        Returns:
            True if stored, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete key from cache.

        Returns:
            True if a key was deleted, False otherwise
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Check if key exists in cache.

        Returns:
            True if exists, False otherwise (including when disconnected)
        """
        pass

    def status(self) -> CacheStatus:
        """Return a snapshot of the connection state."""
        return CacheStatus(
            backend=self.backend,
            connected=self.connected,
            retry_count=self.retry_count,
            max_retries=self.max_retries,
            exhausted=self._gave_up,
        )


class RedisCache(CacheStrategy):
    """
    Redis cache implementation with async operations (redis.asyncio).

    Production cache shared by every process of the service.

    Reconnection policy:
    - Every failed connection attempt, and every command failing with a
      connection or timeout error, marks the cache disconnected and counts
      one retry (up to `max_retries`).
    - While disconnected, commands return a miss immediately and schedule a
      single background reconnect attempt; callers never wait for it.
    - Once the budget is used up no further attempts are made until
      `reconnect()` is called. Traffic keeps flowing through the record store.
    - A successful connect resets the retry counter.
    - After `disconnect()` nothing reconnects in the background; only an
      explicit `connect()` or `reconnect()` opens the connection again.
    """

    backend = "redis"

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        default_ttl: int = DEFAULT_CACHE_TTL,
        max_retries: int = 3,
        socket_timeout: float = 2.0,
        retry_delay: float = 0.1,
        redis_client: Optional[redis.Redis] = None,
    ):
        """
        Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            default_ttl: TTL applied when `set` gets none
            max_retries: Reconnect budget before caching is given up
            socket_timeout: Connect/read timeout in seconds
            retry_delay: Pause before each background reconnect attempt
            redis_client: Pre-built client. If None, one is created from redis_url
                (no connection is opened until `connect()`)
        """
        super().__init__(default_ttl=default_ttl, max_retries=max_retries)
        if redis_client is None:
            redis_client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=socket_timeout,
                socket_timeout=socket_timeout,
            )
        self.redis = redis_client
        self.retry_delay = retry_delay
        self._connect_task: Optional[asyncio.Task] = None
        # Set by disconnect(); only connect() clears it
        self._closed = False

    async def connect(self) -> bool:
        self._closed = False
        if self.connected:
            return True
        # Concurrent callers share one in-flight attempt
        if self._connect_task is None or self._connect_task.done():
            self._connect_task = asyncio.create_task(self._connect())
        task = self._connect_task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # The caller itself was cancelled
            if not task.cancelled():
                raise
            # disconnect() cancelled the attempt
            return False

    async def _connect(self, delay: float = 0.0) -> bool:
        if delay:
            await asyncio.sleep(delay)
        if self._gave_up:
            logger.debug("Redis retry budget exhausted, not connecting.")
            return False
        try:
            await self.redis.ping()
        except (RedisError, OSError) as exc:
            self._connection_failed("PING", exc)
            return False

        self.connected = True
        self.retry_count = 0
        logger.info("Redis connected.", extra={"backend": self.backend})
        return True

    def _connection_failed(self, operation: str, exc: BaseException) -> None:
        self.connected = False
        if self.retry_count < self.max_retries:
            self.retry_count += 1
            logger.warning(
                "Redis %s failed, retrying connection (%d/%d).",
                operation,
                self.retry_count,
                self.max_retries,
                extra={"error": str(exc)},
            )
        else:
            self._gave_up = True
            logger.warning(
                "Redis %s failed, retry budget exhausted. Continuing without caching.",
                operation,
                extra={"error": str(exc)},
            )

    def _schedule_reconnect(self) -> None:
        if self._gave_up or self._closed:
            return
        if self._connect_task is not None and not self._connect_task.done():
            return
        self._connect_task = asyncio.get_running_loop().create_task(self._connect(self.retry_delay))

    async def _run(self, operation: str, key: str, command: Callable[[], Awaitable[Any]], default: Any) -> Any:
        if not self.connected:
            self._schedule_reconnect()
            logger.debug("Redis not connected, skipping %s.", operation, extra={"key": key})
            return default
        try:
            return await command()
        except (RedisConnectionError, RedisTimeoutError, OSError) as exc:
            self._connection_failed(operation, exc)
        except RedisError as exc:
            logger.error("Redis %s error.", operation, extra={"key": key, "error": str(exc)})
        return default

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._run("GET", key, lambda: self.redis.get(key), None)
        return deserialize(raw, key)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            text = serialize(value)
        except (TypeError, ValueError) as exc:
            logger.error("Refusing to cache unserializable value.", extra={"key": key, "error": str(exc)})
            return False
        ttl = self.default_ttl if ttl is None else ttl
        return bool(await self._run("SET", key, lambda: self.redis.set(key, text, ex=ttl), False))

    async def delete(self, key: str) -> bool:
        return bool(await self._run("DEL", key, lambda: self.redis.delete(key), 0))

    async def exists(self, key: str) -> bool:
        return bool(await self._run("EXISTS", key, lambda: self.redis.exists(key), 0))

    async def disconnect(self) -> None:
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
        self._connect_task = None
        self._closed = True
        was_connected = self.connected
        self.connected = False
        try:
            await self.redis.aclose()
        except (RedisError, OSError) as exc:
            logger.warning("Error closing Redis connection.", extra={"error": str(exc)})
        else:
            if was_connected:
                logger.info("Redis connection closed.")


class InMemoryCache(CacheStrategy):
    """
    In-memory cache implementation using Python dict.

    Pros:
    - Very fast (no network overhead)
    - No external dependencies
    - Good for development and testing

    Cons:
    - Not shared between processes
    - Lost on restart

    Values are stored as canonical JSON text with an absolute expiry taken
    from `clock`, so reads hand out copies and TTLs behave like Redis.
    """

    backend = "memory"

    def __init__(self, default_ttl: int = DEFAULT_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        super().__init__(default_ttl=default_ttl)
        self._cache: Dict[str, Tuple[str, float]] = {}
        self._clock = clock

    async def connect(self) -> bool:
        self.connected = True
        return True

    async def disconnect(self) -> None:
        self.connected = False

    def _live(self, key: str) -> Optional[str]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        text, expires_at = entry
        if self._clock() >= expires_at:
            del self._cache[key]
            return None
        return text

    async def get(self, key: str) -> Optional[Any]:
        if not self.connected:
            return None
        return deserialize(self._live(key), key)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if not self.connected:
            return False
        try:
            text = serialize(value)
        except (TypeError, ValueError) as exc:
            logger.error("Refusing to cache unserializable value.", extra={"key": key, "error": str(exc)})
            return False
        ttl = self.default_ttl if ttl is None else ttl
        self._cache[key] = (text, self._clock() + ttl)
        return True

    async def delete(self, key: str) -> bool:
        if not self.connected or self._live(key) is None:
            return False
        del self._cache[key]
        return True

    async def exists(self, key: str) -> bool:
        return self.connected and self._live(key) is not None

    def clear(self) -> None:
        """Drop every entry (tests)."""
        self._cache.clear()


class NullCache(CacheStrategy):
    """
    Null Object Pattern - cache that does nothing.

    Used for:
    - Disabling cache in certain environments
    - Testing the store-only path

    Reads always miss and writes report False, since nothing is ever stored.
    """

    backend = "null"

    async def connect(self) -> bool:
        self.connected = True
        return True

    async def disconnect(self) -> None:
        self.connected = False

    async def get(self, key: str) -> Optional[Any]:
        """Always returns None (cache miss)"""
        return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return False

    async def delete(self, key: str) -> bool:
        return False

    async def exists(self, key: str) -> bool:
        """Always returns False"""
        return False
