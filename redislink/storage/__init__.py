"""
Record store module for RedisLink.
Implements Strategy Pattern for the durable URL record store.
"""

from .strategies import RecordStoreStrategy, SQLAlchemyRecordStore, InMemoryRecordStore
from .factory import RecordStoreBackend, RecordStoreFactory

__all__ = [
    "RecordStoreStrategy",
    "SQLAlchemyRecordStore",
    "InMemoryRecordStore",
    "RecordStoreBackend",
    "RecordStoreFactory",
]
