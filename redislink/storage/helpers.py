import functools
from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from redislink.exceptions import StoreUnavailableError


__all__ = ["handle_store_errors"]

F = TypeVar("F", bound=Callable[..., Any])


def handle_store_errors(method: F) -> F:
    """Wrap SQLAlchemy-backed record store methods to translate connectivity errors

    Tracks the store's `connected` flag from the outcome of each call.
    Integrity errors are not touched: the store classifies those itself.

    Args:
        method (Callable[..., Any]):
            Async store method which may raise OperationalError, InterfaceError
            or a pool TimeoutError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises StoreUnavailableError instead.

    Example:
        >>> @handle_store_errors
        ... async def find_by_code(self, code):
        ...     ...
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            result = await method(self, *args, **kwargs)
        except (OperationalError, InterfaceError, PoolTimeoutError) as e:
            self.connected = False
            target = self.engine.url.render_as_string(hide_password=True)
            raise StoreUnavailableError(f"Can't reach the record store at {target}.") from e
        self.connected = True
        return result

    return wrapper
