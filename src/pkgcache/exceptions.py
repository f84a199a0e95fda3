"""Exception hierarchy for pkgcache.

Storage-side errors (``CacheError`` and subclasses) are recovered inside the
cache's mutation operations. Package-side errors (``PackageError`` and
subclasses) describe bad package data and always propagate to the caller.
"""


class CacheError(Exception):
    """Base exception for cache storage errors."""

    pass


class CachePermissionError(CacheError):
    """Raised when cache directory permissions are insufficient."""

    pass


class CacheAccessError(CacheError):
    """Raised when the cache location cannot be determined or accessed.

    Typically seen in restricted execution environments that deny
    filesystem or environment introspection.
    """

    pass


class PackageError(Exception):
    """Base exception for package data errors."""

    pass


class PackageFormatError(PackageError):
    """Raised when a package archive cannot be parsed."""

    pass


class PackageSerializationError(PackageError):
    """Raised when a package cannot be written to bytes."""

    pass
