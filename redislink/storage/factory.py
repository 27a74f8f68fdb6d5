"""
Factory for creating record store instances.
"""

from enum import Enum

from redislink.config import Settings
from .strategies import RecordStoreStrategy, SQLAlchemyRecordStore, InMemoryRecordStore


class RecordStoreBackend(Enum):
    """Available record store backends"""
    SQLALCHEMY = "sqlalchemy"
    MEMORY = "memory"


class RecordStoreFactory:
    """Simple factory for creating record store instances from settings."""

    @classmethod
    def create(cls, backend: RecordStoreBackend, settings: Settings) -> RecordStoreStrategy:
        """
        Create a record store instance.

        Args:
            backend: Type of storage backend (from enum)
            settings: Application settings

        Returns:
            A new, not yet connected record store
        """
        if backend == RecordStoreBackend.SQLALCHEMY:
            return SQLAlchemyRecordStore(database_url=settings.database_url)

        elif backend == RecordStoreBackend.MEMORY:
            return InMemoryRecordStore()

        else:
            raise ValueError(f"Unknown record store backend: {backend}")
