"""Machine-wide cache of downloaded package archives.

The cache is a flat directory with one file per (id, version). The directory
listing is the only index: every read re-scans storage because other
processes may change the directory at any time, and there is no locking.
"""

import logging
import os
from typing import Callable, Iterator, Optional, Tuple, Union

from pkgcache.cache.config import (
    DEFAULT_MAX_PACKAGES,
    CacheConfig,
    default_app_data_root,
    get_cache_path,
)
from pkgcache.cache.resilience import (
    best_effort,
    is_storage_error,
    swallow_storage_errors,
)
from pkgcache.exceptions import PackageFormatError
from pkgcache.package import PACKAGE_EXTENSION, Package, PackageDependency
from pkgcache.repository import DependencyResolver, PackageRepository
from pkgcache.storage import LocalStorageBackend, NullStorageBackend, StorageBackend
from pkgcache.versioning import SemanticVersion

logger = logging.getLogger(__name__)

PACKAGE_PATTERN = f"*{PACKAGE_EXTENSION}"


class PackageCache(PackageRepository, DependencyResolver):
    """Bounded local package cache that doubles as a repository and resolver.

    Storage failures never escape: mutations swallow them and reads report
    "nothing found". Once ``max_packages`` files are cached, the next add
    wipes the whole cache before writing.

    Examples:
        >>> cache = PackageCache(LocalStorageBackend("/tmp/pkgcache"))
        >>> cache.add_package(Package("A", SemanticVersion("1.0")))
        >>> cache.exists("A")
        True
    """

    def __init__(
        self,
        storage: StorageBackend,
        max_packages: int = DEFAULT_MAX_PACKAGES,
    ):
        """Initialize the cache.

        Args:
            storage: Backend rooted at the cache directory
            max_packages: Capacity threshold
        """
        self.storage = storage
        self.max_packages = max_packages

    @classmethod
    def create_default(
        cls,
        get_app_data_root: Callable[[], str] = default_app_data_root,
        get_environment_variable: Callable[[str], Optional[str]] = os.environ.get,
        config: Optional[CacheConfig] = None,
    ) -> "PackageCache":
        """Build a cache at the default location.

        If the cache location cannot be resolved (e.g. a restricted
        environment denies access), the cache is backed by the null storage
        backend instead of raising.

        Args:
            get_app_data_root: Returns the application data directory
            get_environment_variable: Reads the environment override
            config: Cache configuration; an explicit ``cache_dir`` skips
                path resolution

        Returns:
            PackageCache instance
        """
        config = config or CacheConfig()
        if not config.enabled:
            return cls(NullStorageBackend(), config.max_packages)

        try:
            if config.cache_dir is not None:
                path = str(config.cache_dir)
            else:
                path = get_cache_path(get_environment_variable, get_app_data_root)
            storage: StorageBackend = LocalStorageBackend(path)
        except Exception as e:
            if not is_storage_error(e):
                raise
            logger.warning(f"Cannot access package cache location, caching disabled: {e}")
            storage = NullStorageBackend()

        return cls(storage, config.max_packages)

    @property
    def source(self) -> str:
        return self.storage.root

    def get_package_file_path(self, package: Package) -> str:
        """Full path of the file a package is (or would be) cached in."""
        return self.storage.get_full_path(package.file_name)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_package_files(self, pattern: str = PACKAGE_PATTERN) -> Iterator[str]:
        """Raw file names of cached packages.

        Enumeration failures end the listing early instead of raising.
        """
        try:
            yield from self.storage.get_files(pattern)
        except Exception as e:
            if not is_storage_error(e):
                raise
            logger.warning(f"Cannot enumerate package cache {self.source!r}: {e}")

    def _read_package(self, file_name: str) -> Optional[Package]:
        try:
            return Package.from_bytes(self.storage.open_file(file_name))
        except PackageFormatError as e:
            logger.warning(f"Skipping unreadable cached package {file_name}: {e}")
        except Exception as e:
            if not is_storage_error(e):
                raise
            # Deleted by another process, or locked
            logger.debug(f"Cannot open cached package {file_name}: {e}")
        return None

    def _iter_entries(self, pattern: str) -> Iterator[Tuple[str, Package]]:
        for file_name in self.get_package_files(pattern):
            package = self._read_package(file_name)
            if package is not None:
                yield file_name, package

    def _file_exists(self, file_name: str) -> bool:
        try:
            return self.storage.file_exists(file_name)
        except Exception as e:
            if not is_storage_error(e):
                raise
            logger.debug(f"Cannot check for cached package {file_name}: {e}")
            return False

    def _find_entry(
        self, package_id: str, version: SemanticVersion
    ) -> Optional[Tuple[str, Package]]:
        file_name = Package(package_id, version).file_name
        if self._file_exists(file_name):
            package = self._read_package(file_name)
            if package is not None:
                return file_name, package

        # The file may have been written with an equivalent spelling of the
        # version, e.g. "1.0" vs "1.0.0"
        wanted = package_id.lower()
        for name, package in self._iter_entries(f"{package_id}.*{PACKAGE_EXTENSION}"):
            if package.id.lower() == wanted and package.version == version:
                return name, package
        return None

    def get_packages(self) -> Iterator[Package]:
        for _, package in self._iter_entries(PACKAGE_PATTERN):
            yield package

    def find_packages_by_id(self, package_id: str) -> Iterator[Package]:
        wanted = package_id.lower()
        # "A.*" also matches files of "A.B"; filter on the manifest id
        for _, package in self._iter_entries(f"{package_id}.*{PACKAGE_EXTENSION}"):
            if package.id.lower() == wanted:
                yield package

    def find_package(
        self, package_id: str, version: Optional[SemanticVersion] = None
    ) -> Optional[Package]:
        if version is None:
            return super().find_package(package_id)
        entry = self._find_entry(package_id, version)
        return entry[1] if entry else None

    def exists(
        self,
        package_or_id: Union[Package, str],
        version: Optional[SemanticVersion] = None,
    ) -> bool:
        if isinstance(package_or_id, Package):
            return self.exists(package_or_id.id, package_or_id.version)
        return super().exists(package_or_id, version)

    def resolve_dependency(
        self,
        dependency: PackageDependency,
        allow_prerelease_versions: bool,
        prefer_listed_packages: bool,
    ) -> Optional[Package]:
        """Pick the highest cached version satisfying a dependency.

        Args:
            dependency: Id and optional version range
            allow_prerelease_versions: Consider pre-release versions
            prefer_listed_packages: Ignored; every cached package counts as listed

        Returns:
            Best matching package, or None
        """
        spec = dependency.version_spec
        candidates = [
            p
            for p in self.find_packages_by_id(dependency.id)
            if (spec is None or spec.satisfies(p.version))
            and (allow_prerelease_versions or p.is_release_version)
        ]
        return max(candidates, key=lambda p: p.version, default=None)

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_package(self, package: Package) -> None:
        """Cache a package, wiping the cache first if it is full.

        Storage failures are logged and discarded; a failed add only means
        the package is fetched again next time.

        Raises:
            PackageSerializationError: If the package cannot be written to bytes
        """
        data = package.to_bytes()
        file_name = package.file_name

        # Cached files are never modified in place: remove, then add
        with best_effort(f"replace {package}"):
            self._delete_identity(package)

        with best_effort(f"add {package}"):
            count = sum(1 for _ in self.storage.get_files(PACKAGE_PATTERN))
            if count >= self.max_packages:
                logger.info(
                    f"Package cache holds {count} packages (limit {self.max_packages}), clearing"
                )
                self.clear()
            self.storage.add_file(file_name, data)

    def remove_package(self, package: Package) -> None:
        """Remove a cached package; a missing file is not an error."""
        with best_effort(f"remove {package}"):
            self._delete_identity(package)

    def _delete_identity(self, package: Package) -> None:
        """Delete every file holding the package's identity.

        The same identity may be cached under another spelling of its id or
        version ("a.1.0.nupkg" vs "A.1.0.0.nupkg").
        """
        if self.storage.file_exists(package.file_name):
            self.storage.delete_file(package.file_name)
        wanted = package.id.lower()
        stale = [
            name
            for name, cached in self._iter_entries(f"{package.id}.*{PACKAGE_EXTENSION}")
            if cached.id.lower() == wanted and cached.version == package.version
        ]
        for name in stale:
            self.storage.delete_file(name)

    def clear(self) -> None:
        """Delete every cached package file, one at a time.

        Partial writes left behind by crashed writers are removed too.
        """
        for file_name in list(self.get_package_files()):
            self._delete_quietly(file_name)
        for file_name in list(self._get_temp_files()):
            self._delete_quietly(file_name)

    def _get_temp_files(self) -> Iterator[str]:
        try:
            yield from self.storage.get_temp_files()
        except Exception as e:
            if not is_storage_error(e):
                raise
            logger.warning(f"Cannot enumerate temp files in {self.source!r}: {e}")

    @swallow_storage_errors("delete")
    def _delete_quietly(self, file_name: str) -> None:
        self.storage.delete_file(file_name)

    def __repr__(self) -> str:
        return f"PackageCache({self.storage!r}, max_packages={self.max_packages})"


# Process-wide default cache
_default_cache: Optional[PackageCache] = None


def get_default_cache() -> PackageCache:
    """Get the process-wide cache, creating it on first use.

    Returns:
        Default PackageCache instance
    """
    global _default_cache
    if _default_cache is None:
        _default_cache = PackageCache.create_default(config=CacheConfig.from_env())
    return _default_cache


def set_default_cache(cache: Optional[PackageCache]) -> None:
    """Replace the process-wide cache; None resets it.

    Args:
        cache: PackageCache instance to use globally
    """
    global _default_cache
    _default_cache = cache
