"""Shared fixtures and test doubles for pkgcache tests."""

import fnmatch
from typing import Dict, Iterator, Optional

import pytest

from pkgcache.package import Package, PackageDependency
from pkgcache.storage import StorageBackend
from pkgcache.versioning import SemanticVersion, VersionSpec


class MemoryStorageBackend(StorageBackend):
    """In-memory StorageBackend keyed by flat file name."""

    def __init__(self, root: str = "/mem/cache"):
        self._root = root
        self.files: Dict[str, bytes] = {}

    @property
    def root(self) -> str:
        return self._root

    def file_exists(self, path: str) -> bool:
        return path in self.files

    def add_file(self, path: str, data: bytes) -> None:
        self.files[path] = data

    def open_file(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def delete_file(self, path: str) -> None:
        self.files.pop(path, None)

    def get_files(self, pattern: str = "*") -> Iterator[str]:
        for name in list(self.files):
            if fnmatch.fnmatch(name.lower(), pattern.lower()):
                yield name


def make_package(
    package_id: str,
    version: str = "1.0",
    dependencies: Optional[Dict[str, str]] = None,
    description: str = "",
) -> Package:
    """Build a small package with one content file."""
    deps = [
        PackageDependency(dep_id, VersionSpec.parse(spec) if spec else None)
        for dep_id, spec in (dependencies or {}).items()
    ]
    return Package(
        id=package_id,
        version=SemanticVersion(version),
        description=description,
        dependencies=deps,
        files={"content/readme.txt": f"{package_id} {version}".encode()},
    )


@pytest.fixture
def memory_storage():
    """Create an empty in-memory storage backend."""
    return MemoryStorageBackend()


@pytest.fixture
def package_factory():
    """Factory for small test packages."""
    return make_package
