"""
Cache-aside resolution engine.

Orchestrates the cache, the record store and the short code generator:
- create_short_link: cache by long URL -> record store -> generate + insert
- resolve_code: cache by code -> record store

The cache is consulted first and populated lazily; it is never authoritative.
The record store's uniqueness constraints are the only strong guarantee, so
the engine holds no locks and is safe to call concurrently.
"""

import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from redislink.cache.keys import CacheKeySchema
from redislink.cache.strategies import CacheStrategy
from redislink.config import Settings
from redislink.exceptions import DuplicateKeyError, GenerationExhaustedError, NotFoundError
from redislink.schemas.health import HealthReport
from redislink.schemas.url import (
    CachedLink,
    CachedRedirect,
    CreateStatus,
    ShortLink,
    ShortLinkResult,
    URLRecord,
)
from redislink.services.short_code_strategies import ShortCodeStrategy
from redislink.services.validators import validate_code, validate_long_url
from redislink.storage.strategies import RecordStoreStrategy


logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)


class ResolutionEngine:
    """
    Resolution engine with dependency injection for cache, record store and
    code generator.

    Collaborators are owned by the composition root and passed in by reference;
    the engine only issues operation calls on them.
    """

    def __init__(
        self,
        cache: CacheStrategy,
        records: RecordStoreStrategy,
        generator: ShortCodeStrategy,
        *,
        base_url: str,
        cache_ttl: int,
        max_code_attempts: int = 5,
        max_url_length: int = 2048,
        keys: Optional[CacheKeySchema] = None,
    ):
        if max_code_attempts < 1:
            raise ValueError(f"max_code_attempts must be at least 1 (given: {max_code_attempts}).")

        self.cache = cache
        self.records = records
        self.generator = generator
        self.base_url = base_url
        self.cache_ttl = cache_ttl
        self.max_code_attempts = max_code_attempts
        self.max_url_length = max_url_length
        self.keys = keys if keys is not None else CacheKeySchema()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cache: CacheStrategy,
        records: RecordStoreStrategy,
        generator: ShortCodeStrategy,
    ) -> "ResolutionEngine":
        return cls(
            cache,
            records,
            generator,
            base_url=settings.base_url,
            cache_ttl=settings.cache_ttl,
            max_code_attempts=settings.max_code_attempts,
            max_url_length=settings.max_url_length,
            keys=CacheKeySchema(settings.cache_key_prefix or None),
        )

    async def create_short_link(self, long_url: str) -> ShortLinkResult:
        """Return the short link for a long URL, creating it on first sight.

        Flow:
        1. Cache hit under the link key: return it without touching the store
        2. Record store hit: repopulate the link key, return it
        3. Otherwise generate a code and insert, retrying on code collisions

        Raises:
            InvalidInputError: long_url is empty, too long or not http(s)
            GenerationExhaustedError: every attempt collided
            StoreUnavailableError: the record store cannot be reached
        """
        long_url = validate_long_url(long_url, self.max_url_length)
        link_key = self.keys.link_key(long_url)

        # Step 1: Try cache first (Cache-Aside Pattern)
        cached = await self._cache_get(link_key, CachedLink)
        if cached is not None and cached.long_url == long_url:
            logger.debug("Link served from cache.", extra={"long_url": long_url, "code": cached.code})
            return ShortLinkResult(
                link=ShortLink(code=cached.code, short_url=cached.short_url, long_url=cached.long_url),
                status=CreateStatus.CACHED,
            )

        # Step 2: Cache MISS - the record store is the source of truth
        record = await self.records.find_by_long_url(long_url)
        if record is not None:
            return await self._existing(record)

        # Step 3: Allocate a new code
        for attempt in range(1, self.max_code_attempts + 1):
            code = self.generator.generate()
            try:
                record = await self.records.create(long_url, code)
            except DuplicateKeyError as exc:
                if exc.field == "long_url":
                    # A concurrent creator won the race; converge on its record
                    record = await self.records.find_by_long_url(long_url)
                    if record is not None:
                        logger.debug("Lost create race, using existing record.", extra={"long_url": long_url})
                        return await self._existing(record)
                    logger.warning(
                        "Long URL reported as duplicate but not found.",
                        extra={"long_url": long_url, "attempt": attempt},
                    )
                else:
                    logger.info(
                        "Short code collision, retrying.",
                        extra={"code": code, "attempt": attempt, "max_attempts": self.max_code_attempts},
                    )
                continue

            link = ShortLink.from_record(record, self.base_url)
            await self._cache_set(link_key, CachedLink(**link.model_dump()))
            await self._cache_set(self.keys.redirect_key(link.code), CachedRedirect(long_url=link.long_url))
            logger.debug("Short link created.", extra={"long_url": long_url, "code": link.code})
            return ShortLinkResult(link=link, status=CreateStatus.CREATED)

        logger.error(
            "Short code retry budget exhausted.",
            extra={"long_url": long_url, "attempts": self.max_code_attempts},
        )
        raise GenerationExhaustedError(self.max_code_attempts)

    async def resolve_code(self, code: str) -> str:
        """Return the long URL a short code points to.

        Raises:
            InvalidInputError: code has the wrong length or characters
            NotFoundError: no record has this code
            StoreUnavailableError: the record store cannot be reached
        """
        code = validate_code(code)
        redirect_key = self.keys.redirect_key(code)

        cached = await self._cache_get(redirect_key, CachedRedirect)
        if cached is not None:
            logger.debug("Redirect served from cache.", extra={"code": code})
            return cached.long_url

        record = await self.records.find_by_code(code)
        if record is None:
            raise NotFoundError(f"Short link '{code}' not found.")

        await self._cache_set(redirect_key, CachedRedirect(long_url=record.long_url))
        return record.long_url

    def health(self) -> HealthReport:
        """Connection status of both collaborators; `healthy` follows the store."""
        return HealthReport(cache=self.cache.status(), store=self.records.status())

    async def _existing(self, record: URLRecord) -> ShortLinkResult:
        link = ShortLink.from_record(record, self.base_url)
        await self._cache_set(self.keys.link_key(link.long_url), CachedLink(**link.model_dump()))
        return ShortLinkResult(link=link, status=CreateStatus.EXISTING)

    async def _cache_get(self, key: str, model: Type[P]) -> Optional[P]:
        payload: Any = await self.cache.get(key)
        if payload is None:
            return None
        try:
            return model.model_validate(payload)
        except ValidationError:
            logger.warning("Ignoring malformed cache payload.", extra={"key": key})
            return None

    async def _cache_set(self, key: str, payload: BaseModel) -> None:
        # Best-effort: the result is informational only
        if not await self.cache.set(key, payload.model_dump(), ttl=self.cache_ttl):
            logger.debug("Cache write skipped.", extra={"key": key})
