"""
Composition root for dependency injection.

This module wires settings into one cache, one record store, one code
generator and the resolution engine that uses them. Nothing here is a hidden
singleton: the container owns every instance and its lifecycle, and the host
process owns the container.

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (inject fakes)
- Flexible (swap implementations via config)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from redislink.cache.factory import CacheBackend, CacheFactory
from redislink.cache.strategies import CacheStrategy
from redislink.config import Settings, get_settings
from redislink.services.resolution_engine import ResolutionEngine
from redislink.services.short_code_factory import ShortCodeFactory
from redislink.services.short_code_strategies import ShortCodeStrategy
from redislink.storage.factory import RecordStoreBackend, RecordStoreFactory
from redislink.storage.strategies import RecordStoreStrategy


logger = logging.getLogger(__name__)


@dataclass
class ShortenerContainer:
    settings: Settings
    cache: CacheStrategy
    records: RecordStoreStrategy
    generator: ShortCodeStrategy
    engine: ResolutionEngine

    async def startup(self) -> None:
        """
        Connect collaborators.

        The record store comes first and its failure is fatal
        (StoreUnavailableError propagates). The cache is fail-open:
        a failed connect is logged and requests run store-only.
        """
        await self.records.connect()
        if not await self.cache.connect():
            logger.warning(
                "Cache unavailable at startup, serving from the record store only.",
                extra={"backend": self.cache.backend},
            )
        logger.info(
            "%s started.",
            self.settings.app_name,
            extra={"environment": self.settings.environment, "healthy": self.engine.health().healthy},
        )

    async def shutdown(self) -> None:
        await self.cache.disconnect()
        await self.records.disconnect()
        logger.info("%s stopped.", self.settings.app_name)


def build_container(settings: Optional[Settings] = None) -> ShortenerContainer:
    """
    Build every collaborator from settings (not yet connected).

    Args:
        settings: Application settings. If None, the process-wide settings are used.

    Returns:
        ShortenerContainer ready for `startup()`
    """
    settings = settings if settings is not None else get_settings()

    cache = CacheFactory.create(CacheBackend(settings.cache_backend), settings)
    records = RecordStoreFactory.create(RecordStoreBackend(settings.record_store_backend), settings)
    generator = ShortCodeFactory.create_strategy(settings=settings)
    engine = ResolutionEngine.from_settings(settings, cache, records, generator)

    return ShortenerContainer(
        settings=settings,
        cache=cache,
        records=records,
        generator=generator,
        engine=engine,
    )
