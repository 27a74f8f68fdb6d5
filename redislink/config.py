from functools import lru_cache
import string

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "_-"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below

    Settings are read once at startup and frozen for the process lifetime.
    """

    # Environment
    environment: str = "development"
    app_name: str = "RedisLink"
    log_level: str = "INFO"

    # Short URLs are rendered as "<base_url>/<code>"
    base_url: str = "http://localhost:3000"

    # Record store (source of truth)
    record_store_backend: str = "sqlalchemy"  # Options: "sqlalchemy", "memory"
    database_url: str = "sqlite:///./redislink.db"

    # Cache settings
    cache_backend: str = "redis"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = Field(default=86400, gt=0)  # 24 hours
    cache_max_retries: int = Field(default=3, ge=0)
    cache_socket_timeout: float = Field(default=2.0, gt=0)
    cache_retry_delay: float = Field(default=0.1, ge=0)  # pause before a background reconnect
    cache_key_prefix: str = "redislink"

    # Accepted input
    max_url_length: int = Field(default=2048, gt=0)

    # Short code generation
    short_code_strategy: str = "nanoid"  # Options: "nanoid", "random"
    short_code_length: int = Field(default=8, ge=1, le=20)
    short_code_alphabet: str = URL_SAFE_ALPHABET
    max_code_attempts: int = Field(default=5, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("short_code_alphabet")
    @classmethod
    def _check_alphabet(cls, value: str) -> str:
        invalid = set(value) - set(URL_SAFE_ALPHABET)
        if invalid:
            raise ValueError(f"short_code_alphabet contains non URL-safe characters: {''.join(sorted(invalid))!r}")
        if len(set(value)) < 2:
            raise ValueError("short_code_alphabet needs at least two distinct characters")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first call."""
    return Settings()
