"""Local package cache.

Key components:
- PackageCache: Bounded cache, package repository and dependency resolver
- CacheConfig: Configuration management and cache path resolution
- best_effort: Policy that discards storage failures during mutation
"""

from pkgcache.cache.config import (
    ENV_CACHE_PATH,
    CacheConfig,
    default_app_data_root,
    get_cache_path,
)
from pkgcache.cache.manager import PackageCache, get_default_cache, set_default_cache
from pkgcache.cache.resilience import (
    StorageFailure,
    best_effort,
    classify_storage_error,
    swallow_storage_errors,
)

__all__ = [
    "PackageCache",
    "CacheConfig",
    "ENV_CACHE_PATH",
    "get_cache_path",
    "default_app_data_root",
    "get_default_cache",
    "set_default_cache",
    "StorageFailure",
    "best_effort",
    "classify_storage_error",
    "swallow_storage_errors",
]
