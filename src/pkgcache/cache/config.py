"""Cache configuration and cache path resolution."""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ENV_CACHE_PATH = "NuGetCachePath"
ENV_MAX_PACKAGES = "PKGCACHE_MAX_PACKAGES"
ENV_ENABLED = "PKGCACHE_ENABLED"

CACHE_SUBDIRS = ("NuGet", "Cache")
DEFAULT_MAX_PACKAGES = 100


def default_app_data_root() -> str:
    """Per-user application data directory for this platform.

    Returns:
        LOCALAPPDATA/APPDATA on Windows, ~/Library/Caches on macOS and
        XDG_CACHE_HOME or ~/.cache elsewhere
    """
    home = os.path.expanduser("~")

    if sys.platform == "win32":
        base = (os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or "").strip()
        if base:
            return base
        return os.path.join(home, "AppData", "Local")

    if sys.platform == "darwin":
        return os.path.join(home, "Library", "Caches")

    xdg = (os.environ.get("XDG_CACHE_HOME") or "").strip()
    if xdg:
        return xdg
    return os.path.join(home, ".cache")


def _separator_for(root: str) -> str:
    # Keep the separator style of the root we were given
    if "\\" in root and "/" not in root:
        return "\\"
    return os.sep


def get_cache_path(
    get_environment_variable: Callable[[str], Optional[str]],
    get_app_data_root: Callable[[], str],
) -> str:
    """Resolve the cache root directory.

    An environment override wins and is returned verbatim; the application
    data root is only consulted when no override is set.

    Args:
        get_environment_variable: Reads an environment variable by name
        get_app_data_root: Returns the application data directory; may raise
            in restricted environments

    Returns:
        Cache root path

    Examples:
        >>> get_cache_path(lambda _: "/opt/cache", lambda: "/home/me/.cache")
        '/opt/cache'
        >>> get_cache_path(lambda _: "", lambda: "/home/me/.cache")
        '/home/me/.cache/NuGet/Cache'
    """
    override = get_environment_variable(ENV_CACHE_PATH)
    if override and override.strip():
        return override

    app_data = get_app_data_root()
    sep = _separator_for(app_data)
    base = app_data.rstrip("\\/")
    if not base or base.endswith(":"):
        # Filesystem or drive root, e.g. "/" or "C:\"
        return base + sep + sep.join(CACHE_SUBDIRS)
    return sep.join([base, *CACHE_SUBDIRS])


@dataclass
class CacheConfig:
    """Configuration for the local package cache.

    Attributes:
        cache_dir: Root directory for cached packages. None means resolve it
            with ``get_cache_path`` at construction time.
        max_packages: Capacity threshold; adding a package when this many
            files are cached wipes the cache first
        enabled: If False, the cache runs against the null storage backend
    """

    cache_dir: Optional[Path] = None
    max_packages: int = DEFAULT_MAX_PACKAGES
    enabled: bool = True

    def __post_init__(self):
        """Ensure cache_dir is an expanded Path object."""
        if self.cache_dir is not None:
            self.cache_dir = Path(self.cache_dir).expanduser()
        if self.max_packages < 1:
            raise ValueError(f"max_packages must be positive, got {self.max_packages}")

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Create configuration from environment variables.

        Environment variables:
            PKGCACHE_MAX_PACKAGES: Capacity threshold
            PKGCACHE_ENABLED: Enable caching (true/false)

        Returns:
            CacheConfig instance
        """
        config = cls()

        # NuGetCachePath is left to get_cache_path, which uses it verbatim
        raw_max = os.getenv(ENV_MAX_PACKAGES)
        if raw_max:
            try:
                value = int(raw_max)
                if value < 1:
                    raise ValueError(value)
                config.max_packages = value
            except ValueError:
                logger.warning(
                    f"Ignoring invalid {ENV_MAX_PACKAGES}={raw_max!r}, "
                    f"using {DEFAULT_MAX_PACKAGES}"
                )

        if os.getenv(ENV_ENABLED):
            config.enabled = os.getenv(ENV_ENABLED, "").lower() not in ("false", "0", "no")

        return config
