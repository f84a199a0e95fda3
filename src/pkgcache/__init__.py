"""pkgcache: Bounded machine-wide cache of downloaded package archives."""

__version__ = "0.1.0"

from pkgcache.cache import CacheConfig, PackageCache
from pkgcache.package import Package, PackageDependency
from pkgcache.versioning import SemanticVersion, VersionSpec

__all__ = [
    "PackageCache",
    "CacheConfig",
    "Package",
    "PackageDependency",
    "SemanticVersion",
    "VersionSpec",
    "__version__",
]
