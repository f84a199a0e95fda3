"""Storage backends for file I/O operations.

This module provides the filesystem abstraction the package cache writes
through, including a null backend for unavailable cache locations.
"""

from pkgcache.storage.backend import (
    LocalStorageBackend,
    NullStorageBackend,
    StorageBackend,
)

__all__ = [
    "StorageBackend",
    "LocalStorageBackend",
    "NullStorageBackend",
]
