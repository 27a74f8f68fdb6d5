from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from redislink.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class URL(Base):
    """
    Durable URL record - the single source of truth.

    Uniqueness is enforced here, not in the cache or the code generator:
    - code is the primary key (one record per code)
    - long_url carries a unique index (one record per long URL)
    Rows are written once and never updated.
    """
    __tablename__ = "urls"

    code = Column(String(20), primary_key=True)
    # Note: unique=True + index=True creates a unique index
    long_url = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
