from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


CODE_PATTERN = r"^[A-Za-z0-9_-]{1,20}$"


def build_short_url(base_url: str, code: str) -> str:
    """Render the public short URL for a code."""
    return f"{base_url.rstrip('/')}/{code}"


class URLRecord(BaseModel):
    """Durable mapping between one long URL and one short code.

    from_attributes=True lets the record be built straight from the ORM row.
    Records are never updated, hence frozen.
    """
    code: str = Field(..., pattern=CODE_PATTERN)
    long_url: str = Field(..., min_length=1)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite drops the offset on read; stored values are always UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class ShortLink(BaseModel):
    """What callers get back from create_short_link"""
    code: str
    short_url: str
    long_url: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_record(cls, record: URLRecord, base_url: str) -> "ShortLink":
        return cls(
            code=record.code,
            short_url=build_short_url(base_url, record.code),
            long_url=record.long_url,
        )


class CreateStatus(str, Enum):
    """Which path produced a ShortLink"""
    CACHED = "served from cache"
    EXISTING = "already exists"
    CREATED = "created"


class ShortLinkResult(BaseModel):
    link: ShortLink
    status: CreateStatus

    model_config = ConfigDict(frozen=True)


# Cache payloads. The link payload answers "does this long URL already have a
# code"; the redirect payload carries only what a redirect needs.

class CachedLink(ShortLink):
    pass


class CachedRedirect(BaseModel):
    long_url: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)
