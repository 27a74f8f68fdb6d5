import functools
from collections.abc import Callable
from typing import Optional


__all__ = ["CacheKeySchema"]  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f"{self.prefix}:{key}" if self.prefix else key

    return wrapper


class CacheKeySchema:
    """Provide namespaced cache keys for the two lookup directions.

    Long URLs and short codes share one cache keyspace, so each gets its own
    namespace segment. A long URL can therefore never shadow a short code (or
    the reverse), whatever characters either contains.

    An optional prefix namespaces every key per app and environment,
    e.g. "redislink:prod".
    """

    def __init__(self, prefix: Optional[str] = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f"Prefix must be of type string (given type: {type(prefix)}).")

        self.prefix = prefix

    @prefix_key
    def link_key(self, long_url: str) -> str:
        return f"links:by-url:{long_url}"

    @prefix_key
    def redirect_key(self, code: str) -> str:
        return f"links:by-code:{code}"
