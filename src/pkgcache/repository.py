"""Package repository and dependency resolver interfaces.

``PackageRepository`` supplies lookup, bulk lookup and update diffing on top
of a single abstract ``get_packages()`` enumeration; concrete repositories
override the lookups they can answer more cheaply.
"""

from abc import ABC, abstractmethod
from itertools import groupby
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from pkgcache.package import Package, PackageDependency
from pkgcache.versioning import SemanticVersion


def select_latest(packages: Iterable[Package]) -> Optional[Package]:
    """Pick the latest stable package, falling back to the latest overall.

    Returns:
        Best package, or None if *packages* is empty
    """
    latest: Optional[Package] = None
    latest_stable: Optional[Package] = None
    for package in packages:
        if latest is None or package.version > latest.version:
            latest = package
        if package.is_release_version and (
            latest_stable is None or package.version > latest_stable.version
        ):
            latest_stable = package
    return latest_stable or latest


class PackageRepository(ABC):
    """Read/write access to a set of packages keyed by (id, version)."""

    @property
    @abstractmethod
    def source(self) -> str:
        """Location of this repository."""
        pass

    @abstractmethod
    def get_packages(self) -> Iterator[Package]:
        pass

    @abstractmethod
    def add_package(self, package: Package) -> None:
        pass

    @abstractmethod
    def remove_package(self, package: Package) -> None:
        pass

    def find_packages_by_id(self, package_id: str) -> Iterator[Package]:
        """All versions of *package_id*, matched case-insensitively."""
        wanted = package_id.lower()
        return (p for p in self.get_packages() if p.id.lower() == wanted)

    def find_package(
        self, package_id: str, version: Optional[SemanticVersion] = None
    ) -> Optional[Package]:
        """Find a package by id, or by id and exact version.

        Args:
            package_id: Package id
            version: Exact version; if None the latest stable version is
                preferred, then the latest pre-release

        Returns:
            Matching package or None
        """
        candidates = self.find_packages_by_id(package_id)
        if version is None:
            return select_latest(candidates)
        return next((p for p in candidates if p.version == version), None)

    def try_find_package(
        self, package_id: str, version: SemanticVersion
    ) -> Tuple[bool, Optional[Package]]:
        package = self.find_package(package_id, version)
        return package is not None, package

    def exists(
        self,
        package_or_id: Union[Package, str],
        version: Optional[SemanticVersion] = None,
    ) -> bool:
        """Check for a package by object, by id, or by id and version."""
        if isinstance(package_or_id, Package):
            return self.exists(package_or_id.id, package_or_id.version)
        if version is None:
            return next(iter(self.find_packages_by_id(package_or_id)), None) is not None
        return self.find_package(package_or_id, version) is not None

    def find_packages(self, package_ids: Iterable[str]) -> List[Package]:
        """Best match for each id that is present; missing ids are skipped."""
        found = []
        seen = set()
        for package_id in package_ids:
            if package_id.lower() in seen:
                continue
            seen.add(package_id.lower())
            package = self.find_package(package_id)
            if package is not None:
                found.append(package)
        return found

    def get_updates(
        self,
        packages: Iterable[Package],
        include_prerelease: bool,
        include_all_versions: bool,
    ) -> List[Package]:
        """Compute newer versions available for a set of installed packages.

        Args:
            packages: Currently installed packages
            include_prerelease: Allow pre-release candidates
            include_all_versions: Return every newer version instead of only
                the highest one per id

        Returns:
            Update candidates, ordered by id then version
        """
        installed = {}
        for package in packages:
            key = package.id.lower()
            # Diff against the lowest installed version of each id
            if key not in installed or package.version < installed[key].version:
                installed[key] = package

        updates: List[Package] = []
        for key, current in installed.items():
            candidates = sorted(
                (
                    p
                    for p in self.find_packages_by_id(current.id)
                    if p.version > current.version
                    and (include_prerelease or p.is_release_version)
                ),
                key=lambda p: p.version,
            )
            if not candidates:
                continue
            if include_all_versions:
                updates.extend(candidates)
            else:
                updates.append(candidates[-1])

        updates.sort(key=lambda p: (p.id.lower(), p.version))
        return updates

    def group_by_id(self) -> Iterator[Tuple[str, List[Package]]]:
        """Cached packages grouped by lower-cased id, versions ascending."""
        ordered = sorted(self.get_packages(), key=lambda p: (p.id.lower(), p.version))
        for key, group in groupby(ordered, key=lambda p: p.id.lower()):
            yield key, list(group)


class DependencyResolver(ABC):
    """Resolves a dependency spec to a concrete package."""

    @abstractmethod
    def resolve_dependency(
        self,
        dependency: PackageDependency,
        allow_prerelease_versions: bool,
        prefer_listed_packages: bool,
    ) -> Optional[Package]:
        pass
