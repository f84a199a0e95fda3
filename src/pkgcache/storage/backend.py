"""Storage backends the package cache writes through.

The cache never touches the OS directly; it is handed a StorageBackend rooted
at the cache directory. All paths passed to a backend are flat file names
relative to its root.
"""

import fnmatch
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Union

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class StorageBackend(ABC):
    """Filesystem primitives used by the package cache.

    Every call may fail with ``OSError``; callers decide how to recover.
    """

    @property
    @abstractmethod
    def root(self) -> str:
        """Root directory of this backend, or "" when there is none."""
        pass

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def add_file(self, path: str, data: bytes) -> None:
        """Write *data* to *path*, replacing any existing file."""
        pass

    @abstractmethod
    def open_file(self, path: str) -> bytes:
        pass

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """Delete *path*. A missing file is not an error."""
        pass

    @abstractmethod
    def get_files(self, pattern: str = "*") -> Iterator[str]:
        """Lazily yield file names under the root matching a glob *pattern*."""
        pass

    def get_temp_files(self) -> Iterator[str]:
        """Lazily yield leftover partial writes under the root.

        Backends that write in place have none.
        """
        return iter(())

    def get_full_path(self, path: str) -> str:
        """Join *path* onto the backend root.

        Examples:
            >>> LocalStorageBackend("/tmp/cache").get_full_path("A.1.0.nupkg")
            '/tmp/cache/A.1.0.nupkg'
        """
        if not self.root:
            return path
        return os.path.join(self.root, path)


class LocalStorageBackend(StorageBackend):
    """StorageBackend over a local directory.

    The root directory is created lazily on the first write, so constructing
    a backend never touches the filesystem.
    """

    def __init__(self, root: Union[str, Path]):
        self._root = Path(root)

    @property
    def root(self) -> str:
        return str(self._root)

    def file_exists(self, path: str) -> bool:
        return (self._root / path).is_file()

    def add_file(self, path: str, data: bytes) -> None:
        target = self._root / path
        target.parent.mkdir(parents=True, exist_ok=True)

        # Write to temp file first (atomic write)
        temp_path = target.with_name(f".{target.name}.{os.getpid()}{TEMP_SUFFIX}")
        try:
            with open(temp_path, "wb") as f:
                f.write(data)
            os.replace(temp_path, target)
        except OSError:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError as cleanup_error:
                    logger.warning(f"Failed to clean up temp file {temp_path}: {cleanup_error}")
            raise

    def open_file(self, path: str) -> bytes:
        with open(self._root / path, "rb") as f:
            return f.read()

    def delete_file(self, path: str) -> None:
        try:
            (self._root / path).unlink()
        except FileNotFoundError:
            # Another process may have removed it already
            pass

    def get_files(self, pattern: str = "*") -> Iterator[str]:
        if not self._root.is_dir():
            return
        with os.scandir(self._root) as entries:
            for entry in entries:
                if entry.name.startswith("."):
                    continue
                if entry.is_file() and fnmatch.fnmatch(entry.name.lower(), pattern.lower()):
                    yield entry.name

    def get_temp_files(self) -> Iterator[str]:
        # Left behind when a writer dies between write and rename
        if not self._root.is_dir():
            return
        with os.scandir(self._root) as entries:
            for entry in entries:
                if (
                    entry.name.startswith(".")
                    and entry.name.endswith(TEMP_SUFFIX)
                    and entry.is_file()
                ):
                    yield entry.name

    def __repr__(self) -> str:
        return f"LocalStorageBackend({self.root!r})"


class NullStorageBackend(StorageBackend):
    """A backend with nothing in it that discards every write.

    Used when the real cache location cannot be determined or accessed, so
    the cache degrades to "always empty" instead of failing.
    """

    @property
    def root(self) -> str:
        return ""

    def file_exists(self, path: str) -> bool:
        return False

    def add_file(self, path: str, data: bytes) -> None:
        pass

    def open_file(self, path: str) -> bytes:
        raise FileNotFoundError(path)

    def delete_file(self, path: str) -> None:
        pass

    def get_files(self, pattern: str = "*") -> Iterator[str]:
        return iter(())

    def __repr__(self) -> str:
        return "NullStorageBackend()"
