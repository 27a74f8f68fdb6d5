"""
Database models for RedisLink.

Only durable URL records live in the database; cache entries are owned by
the cache strategies.
"""

from .url import URL

__all__ = ["URL"]
