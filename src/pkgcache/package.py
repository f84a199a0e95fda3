"""Package model and the zip-based package archive codec.

A package archive is a zip file holding a ``manifest.json`` (id, version,
description, dependencies) plus the package's content files.
"""

import io
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import orjson

from pkgcache.exceptions import PackageFormatError, PackageSerializationError
from pkgcache.versioning import SemanticVersion, VersionSpec

PACKAGE_EXTENSION = ".nupkg"
MANIFEST_FILE = "manifest.json"


def package_file_name(package_id: str, version: SemanticVersion) -> str:
    """Flat file name for a package identity.

    Examples:
        >>> package_file_name("Newtonsoft.Json", SemanticVersion("4.0.1"))
        'Newtonsoft.Json.4.0.1.nupkg'
    """
    return f"{package_id}.{version}{PACKAGE_EXTENSION}"


@dataclass(frozen=True)
class PackageDependency:
    """A dependency on another package, optionally bounded by a version range."""

    id: str
    version_spec: Optional[VersionSpec] = None

    def __str__(self) -> str:
        spec = str(self.version_spec) if self.version_spec is not None else ""
        return f"{self.id} {spec}".strip()


@dataclass(eq=False)
class Package:
    """An immutable-by-convention package: identity, metadata and content.

    Two packages are equal when their ids match case-insensitively and their
    versions are equal.
    """

    id: str
    version: SemanticVersion
    description: str = ""
    dependencies: List[PackageDependency] = field(default_factory=list)
    files: Dict[str, bytes] = field(default_factory=dict)
    listed: bool = True

    def __post_init__(self):
        if isinstance(self.version, str):
            self.version = SemanticVersion(self.version)

    @property
    def is_release_version(self) -> bool:
        return not self.version.is_prerelease

    @property
    def file_name(self) -> str:
        return package_file_name(self.id, self.version)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Package):
            return NotImplemented
        return self.id.lower() == other.id.lower() and self.version == other.version

    def __hash__(self) -> int:
        return hash((self.id.lower(), self.version))

    def __str__(self) -> str:
        return f"{self.id} {self.version}"

    def _manifest(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "version": str(self.version),
            "description": self.description,
            "listed": self.listed,
            "dependencies": [
                {
                    "id": dep.id,
                    "version": str(dep.version_spec) if dep.version_spec else "",
                }
                for dep in self.dependencies
            ],
            "files": sorted(self.files),
        }

    def to_bytes(self) -> bytes:
        """Serialize the package to a zip archive.

        Returns:
            Archive bytes

        Raises:
            PackageSerializationError: If the manifest or content cannot be written
        """
        buffer = io.BytesIO()
        try:
            manifest = orjson.dumps(self._manifest(), option=orjson.OPT_INDENT_2)
            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
                archive.writestr(MANIFEST_FILE, manifest)
                for name, content in self.files.items():
                    if name == MANIFEST_FILE:
                        raise PackageSerializationError(
                            f"Content file name '{name}' is reserved"
                        )
                    archive.writestr(name, content)
        except PackageSerializationError:
            raise
        except (TypeError, ValueError, orjson.JSONEncodeError) as e:
            raise PackageSerializationError(f"Cannot serialize package {self}: {e}") from e
        return buffer.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Package":
        """Parse a package archive.

        Args:
            data: Archive bytes as produced by ``to_bytes``

        Returns:
            Package instance

        Raises:
            PackageFormatError: If the archive or its manifest is malformed
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                manifest = orjson.loads(archive.read(MANIFEST_FILE))
                files = {
                    name: archive.read(name)
                    for name in archive.namelist()
                    if name != MANIFEST_FILE
                }
        except (zipfile.BadZipFile, KeyError, EOFError, zlib.error, orjson.JSONDecodeError) as e:
            raise PackageFormatError(f"Invalid package archive: {e}") from e

        if not isinstance(manifest, dict) or not manifest.get("id"):
            raise PackageFormatError("Package manifest is missing 'id'")

        try:
            version = SemanticVersion(manifest.get("version", ""))
            dependencies = [
                PackageDependency(
                    dep["id"], VersionSpec.parse(dep.get("version")) if dep.get("version") else None
                )
                for dep in manifest.get("dependencies") or []
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise PackageFormatError(f"Invalid package manifest: {e}") from e

        return cls(
            id=manifest["id"],
            version=version,
            description=manifest.get("description") or "",
            dependencies=dependencies,
            files=files,
            listed=bool(manifest.get("listed", True)),
        )
