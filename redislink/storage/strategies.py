"""
Record store strategies using Strategy Pattern.

The record store is the source of truth for URL records:
- SQLAlchemy: any SQL database SQLAlchemy speaks (SQLite by default)
- In-memory: development and tests

Unlike the cache, the record store is NOT fail-open: an outage surfaces as
StoreUnavailableError, and uniqueness violations as DuplicateKeyError.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from redislink.database.connection import Base, build_engine, build_session_factory
from redislink.exceptions import DuplicateKeyError, StoreUnavailableError
from redislink.models.url import URL
from redislink.schemas.health import RecordStoreStatus
from redislink.schemas.url import URLRecord
from .helpers import handle_store_errors


logger = logging.getLogger(__name__)


class RecordStoreStrategy(ABC):
    """
    Abstract base class for record store strategies.

    This interface defines how URL records are persisted and looked up.
    Implementations must enforce one record per long URL and one record per
    code at insert time; that constraint is what keeps concurrent creators
    consistent, since the engine itself holds no locks.

    Pattern: Strategy Pattern
    """

    backend = "abstract"

    def __init__(self):
        self.connected = False

    @abstractmethod
    async def connect(self) -> None:
        """
        Prepare the store (schema) and verify it is reachable.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release pooled connections"""
        pass

    @abstractmethod
    async def find_by_long_url(self, long_url: str) -> Optional[URLRecord]:
        """Get the record for a long URL, or None"""
        pass

    @abstractmethod
    async def find_by_code(self, code: str) -> Optional[URLRecord]:
        """Get the record for a short code, or None"""
        pass

    @abstractmethod
    async def create(self, long_url: str, code: str) -> URLRecord:
        """
        Insert a new record.

        Args:
            long_url: The long URL
            code: The candidate short code

        Returns:
            The stored record

        Raises:
            DuplicateKeyError: field "long_url" if the long URL already has a
                record, otherwise field "code" if the code is taken
            StoreUnavailableError: If the store cannot be reached
        """
        pass

    def status(self) -> RecordStoreStatus:
        return RecordStoreStatus(backend=self.backend, connected=self.connected)


class SQLAlchemyRecordStore(RecordStoreStrategy):
    """
    SQLAlchemy implementation of the record store.

    One engine (connection pool) per store, one short-lived session per
    operation, so a single store instance is safely shared by concurrent
    requests. Timeouts come from the engine/driver configuration.

    The unique constraints of the `urls` table arbitrate races: a losing
    insert gets an IntegrityError, which is rolled back and classified by
    re-reading which key now exists.
    """

    backend = "sqlalchemy"

    def __init__(self, database_url: str = "sqlite:///./redislink.db", engine: Optional[Engine] = None):
        """
        Initialize SQLAlchemy record store.

        Args:
            database_url: SQLAlchemy database URL (ignored when engine is given)
            engine: Pre-built engine
        """
        super().__init__()
        self.engine = engine if engine is not None else build_engine(database_url)
        self.session_factory = build_session_factory(self.engine)

    @handle_store_errors
    async def connect(self) -> None:
        # Create tables
        Base.metadata.create_all(bind=self.engine)
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Record store connected.", extra={"backend": self.backend})

    async def disconnect(self) -> None:
        self.engine.dispose()
        self.connected = False
        logger.info("Record store connection closed.", extra={"backend": self.backend})

    @handle_store_errors
    async def find_by_long_url(self, long_url: str) -> Optional[URLRecord]:
        with self.session_factory() as session:
            return self._to_record(session.query(URL).filter(URL.long_url == long_url).first())

    @handle_store_errors
    async def find_by_code(self, code: str) -> Optional[URLRecord]:
        with self.session_factory() as session:
            return self._to_record(session.get(URL, code))

    @handle_store_errors
    async def create(self, long_url: str, code: str) -> URLRecord:
        url = URL(code=code, long_url=long_url, created_at=datetime.now(timezone.utc))
        with self.session_factory() as session:
            session.add(url)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise self._classify_conflict(session, long_url, code) from exc
            return self._to_record(url)

    @staticmethod
    def _classify_conflict(session: Session, long_url: str, code: str) -> DuplicateKeyError:
        # Long URL first: a concurrent creator of the same URL is the common case
        if session.query(URL.code).filter(URL.long_url == long_url).first() is not None:
            return DuplicateKeyError("long_url", long_url)
        if session.get(URL, code) is not None:
            return DuplicateKeyError("code", code)
        return DuplicateKeyError(None, code)

    @staticmethod
    def _to_record(url: Optional[URL]) -> Optional[URLRecord]:
        return URLRecord.model_validate(url) if url is not None else None


class InMemoryRecordStore(RecordStoreStrategy):
    """
    In-memory record store using two dict indexes.

    Check-and-insert happens without yielding to the event loop, so it is
    atomic for coroutines exactly like a database unique constraint.

    `latency` simulates a network round trip: every call sleeps that long
    (yielding to the event loop even at 0), which lets concurrent callers
    interleave the way they would against a real database.
    """

    backend = "memory"

    def __init__(self, latency: float = 0.0):
        super().__init__()
        self.latency = latency
        self._by_code: Dict[str, URLRecord] = {}
        self._by_long_url: Dict[str, URLRecord] = {}

    def __len__(self) -> int:
        return len(self._by_code)

    async def _round_trip(self) -> None:
        if not self.connected:
            raise StoreUnavailableError("In-memory record store is not connected.")
        await asyncio.sleep(self.latency)

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def find_by_long_url(self, long_url: str) -> Optional[URLRecord]:
        await self._round_trip()
        return self._by_long_url.get(long_url)

    async def find_by_code(self, code: str) -> Optional[URLRecord]:
        await self._round_trip()
        return self._by_code.get(code)

    async def create(self, long_url: str, code: str) -> URLRecord:
        await self._round_trip()
        if long_url in self._by_long_url:
            raise DuplicateKeyError("long_url", long_url)
        if code in self._by_code:
            raise DuplicateKeyError("code", code)

        record = URLRecord(code=code, long_url=long_url, created_at=datetime.now(timezone.utc))
        self._by_code[code] = record
        self._by_long_url[long_url] = record
        return record
