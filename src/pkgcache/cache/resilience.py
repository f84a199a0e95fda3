"""Best-effort policy for cache storage operations.

Storage failures during mutation are classified, logged and discarded, so the
cache can never be the source of a client-visible storage exception. Errors
raised above the storage boundary (e.g. a package that cannot be serialized)
are not storage errors and propagate unchanged.
"""

import enum
import functools
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from pkgcache.exceptions import CacheAccessError, CacheError, CachePermissionError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable)


class StorageFailure(enum.Enum):
    """Kinds of storage failure the cache recovers from."""

    ACCESS = "access"
    NOT_FOUND = "not_found"
    IO = "io"
    UNKNOWN = "unknown"


def is_storage_error(exc: BaseException) -> bool:
    """True if *exc* originates at or below the storage boundary."""
    return isinstance(exc, (OSError, CacheError))


def classify_storage_error(exc: BaseException) -> StorageFailure:
    """Map an exception to a StorageFailure kind.

    Examples:
        >>> classify_storage_error(PermissionError("denied"))
        <StorageFailure.ACCESS: 'access'>
        >>> classify_storage_error(FileNotFoundError("gone"))
        <StorageFailure.NOT_FOUND: 'not_found'>
    """
    if isinstance(exc, (PermissionError, CachePermissionError, CacheAccessError)):
        return StorageFailure.ACCESS
    if isinstance(exc, FileNotFoundError):
        return StorageFailure.NOT_FOUND
    if isinstance(exc, OSError):
        return StorageFailure.IO
    return StorageFailure.UNKNOWN


@contextmanager
def best_effort(operation: str) -> Iterator[None]:
    """Run a block, discarding any storage error it raises.

    Args:
        operation: Description used in log messages

    Examples:
        >>> with best_effort("delete A.1.0.nupkg"):
        ...     raise PermissionError("read-only")
    """
    try:
        yield
    except Exception as e:
        if not is_storage_error(e):
            raise
        kind = classify_storage_error(e)
        if kind is StorageFailure.NOT_FOUND:
            logger.debug(f"Cache {operation}: file already gone ({e})")
        else:
            logger.warning(f"Cache {operation} failed ({kind.value}): {e}")


def swallow_storage_errors(operation: str) -> Callable[[F], F]:
    """Decorator form of ``best_effort``; the wrapped call returns None on failure."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with best_effort(operation):
                return func(*args, **kwargs)
            return None

        return wrapper  # type: ignore[return-value]

    return decorator
