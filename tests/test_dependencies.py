"""
Tests for the composition root and logging setup.
"""

import asyncio
import json
import logging
import sys

import pytest

from redislink.cache.strategies import InMemoryCache, RedisCache
from redislink.config import Settings
from redislink.dependencies import build_container
from redislink.exceptions import StoreUnavailableError
from redislink.logging_config import JsonFormatter, configure_logging
from redislink.schemas.url import CreateStatus
from redislink.storage.strategies import InMemoryRecordStore


class TestContainer:
    """Test container wiring and lifecycle"""

    def test_wiring(self, settings):
        """Test collaborators follow settings and are shared with the engine"""
        container = build_container(settings)

        assert isinstance(container.cache, InMemoryCache)
        assert isinstance(container.records, InMemoryRecordStore)
        assert container.engine.cache is container.cache
        assert container.engine.records is container.records
        assert container.engine.keys.prefix == settings.cache_key_prefix

    def test_lifecycle(self, settings):
        """Test startup, a request, and shutdown"""
        container = build_container(settings)

        async def scenario():
            await container.startup()
            result = await container.engine.create_short_link("https://example.com/a")
            resolved = await container.engine.resolve_code(result.link.code)
            health = container.engine.health()
            await container.shutdown()
            return result, resolved, health

        result, resolved, health = asyncio.run(scenario())

        assert result.status == CreateStatus.CREATED
        assert result.link.short_url.startswith("https://svc/")
        assert resolved == "https://example.com/a"
        assert health.healthy is True
        assert health.cache.connected is True
        assert container.engine.health().healthy is False

    def test_cache_outage_at_startup_is_not_fatal(self, settings):
        """Test startup with an unreachable Redis"""
        settings = settings.model_copy(
            update={"cache_backend": "redis", "redis_url": "redis://127.0.0.1:1/0", "cache_max_retries": 0}
        )
        container = build_container(settings)
        assert isinstance(container.cache, RedisCache)

        async def scenario():
            await container.startup()
            health = container.engine.health()
            long_url = await container.engine.resolve_code(
                (await container.engine.create_short_link("https://example.com/a")).link.code
            )
            await container.shutdown()
            return health, long_url

        health, long_url = asyncio.run(scenario())

        assert health.healthy is True
        assert health.cache.connected is False
        assert long_url == "https://example.com/a"

    def test_store_outage_at_startup_is_fatal(self, settings, tmp_path):
        """Test startup fails when the record store cannot be reached"""
        settings = settings.model_copy(
            update={
                "record_store_backend": "sqlalchemy",
                "database_url": f"sqlite:///{tmp_path}/missing/dir/db.sqlite",
            }
        )
        container = build_container(settings)

        with pytest.raises(StoreUnavailableError):
            asyncio.run(container.startup())


class TestJsonFormatter:
    """Test structured log output"""

    def test_includes_extras(self):
        """Test message, level and extra fields end up in the JSON"""
        record = logging.LogRecord("redislink.test", logging.INFO, __file__, 1, "Short link %s.", ("created",), None)
        record.code = "abc123XY"

        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "Short link created."
        assert payload["level"] == "INFO"
        assert payload["logger"] == "redislink.test"
        assert payload["code"] == "abc123XY"
        assert payload["timestamp"].endswith("Z")


@pytest.fixture
def restore_logging():
    """Put the root logger and quieted loggers back after configure_logging()"""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    quieted = {name: logging.getLogger(name).level for name in ("sqlalchemy.engine", "redis")}
    try:
        yield
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        for name, level in quieted.items():
            logging.getLogger(name).setLevel(level)


class TestConfigureLogging:
    """Test the logging setup entry point"""

    def test_installs_json_stdout_handler(self, restore_logging):
        """Test root gets one JSON handler on stdout and noisy libraries are quieted"""
        configure_logging("debug")

        root = logging.getLogger()
        json_handlers = [handler for handler in root.handlers if isinstance(handler.formatter, JsonFormatter)]

        assert root.level == logging.DEBUG
        assert len(json_handlers) == 1
        assert isinstance(json_handlers[0], logging.StreamHandler)
        assert json_handlers[0].stream is sys.stdout
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("redis").level == logging.WARNING

    def test_level_defaults_to_settings(self, restore_logging, monkeypatch):
        """Test that the log_level setting is used when no level is given"""
        monkeypatch.setattr("redislink.logging_config.get_settings", lambda: Settings(_env_file=None, log_level="warning"))

        configure_logging()

        assert logging.getLogger().level == logging.WARNING
