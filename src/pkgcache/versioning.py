"""Semantic versions and version ranges for cached packages.

Versions follow the ``major.minor[.build[.revision]][-special]`` shape used by
package galleries. Ranges use interval notation, e.g. ``[1.0,2.0)``.
"""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Optional, Tuple

_VERSION_RE = re.compile(
    r"^(?P<numbers>\d+(?:\s*\.\s*\d+){0,3})(?:-(?P<special>[A-Za-z][0-9A-Za-z-]*))?$"
)


@total_ordering
@dataclass(frozen=True)
class SemanticVersion:
    """Comparable package version.

    Missing build and revision components compare as zero, so ``1.0`` and
    ``1.0.0`` are equal. A non-empty ``special`` tag marks a pre-release,
    which sorts before the release with the same numbers.

    The original text is kept in ``raw`` and returned by ``str()``; package
    file names are derived from it.

    Examples:
        >>> SemanticVersion("1.0-beta") < SemanticVersion("1.0")
        True
        >>> SemanticVersion("1.0") == SemanticVersion("1.0.0.0")
        True
    """

    raw: str
    numbers: Tuple[int, int, int, int]
    special: str

    def __init__(self, raw: str):
        text = raw.strip() if isinstance(raw, str) else ""
        match = _VERSION_RE.match(text)
        if not match:
            raise ValueError(f"'{raw}' is not a valid version string")

        parts = [int(p) for p in re.split(r"\s*\.\s*", match.group("numbers"))]
        if len(parts) == 1:
            # A bare major version is read as major.0
            text = f"{parts[0]}.0" + (f"-{match.group('special')}" if match.group("special") else "")
        parts.extend([0] * (4 - len(parts)))

        object.__setattr__(self, "raw", text)
        object.__setattr__(self, "numbers", tuple(parts))
        object.__setattr__(self, "special", match.group("special") or "")

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        return cls(text)

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional["SemanticVersion"]:
        """Parse *text*, returning None instead of raising."""
        if not text:
            return None
        try:
            return cls(text)
        except ValueError:
            return None

    @property
    def is_prerelease(self) -> bool:
        return bool(self.special)

    def _compare(self, other: "SemanticVersion") -> int:
        if self.numbers != other.numbers:
            return -1 if self.numbers < other.numbers else 1

        left, right = self.special.lower(), other.special.lower()
        if left == right:
            return 0
        # Releases sort after any pre-release of the same numbers
        if not left:
            return 1
        if not right:
            return -1
        return -1 if left < right else 1

    def __lt__(self, other: "SemanticVersion") -> bool:  # type: ignore[override]
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._compare(other) < 0

    def __eq__(self, other: object) -> bool:  # type: ignore[override]
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._compare(other) == 0

    def __hash__(self) -> int:  # type: ignore[override]
        return hash((self.numbers, self.special.lower()))

    def __str__(self) -> str:  # type: ignore[override]
        return self.raw

    def __repr__(self) -> str:
        return f"SemanticVersion('{self.raw}')"


@dataclass(frozen=True)
class VersionSpec:
    """A range of acceptable versions.

    A bound of None leaves that side of the range open.
    """

    min_version: Optional[SemanticVersion] = None
    is_min_inclusive: bool = False
    max_version: Optional[SemanticVersion] = None
    is_max_inclusive: bool = False

    @classmethod
    def exact(cls, version: SemanticVersion) -> "VersionSpec":
        return cls(version, True, version, True)

    @classmethod
    def parse(cls, text: Optional[str]) -> "VersionSpec":
        """Parse interval notation into a VersionSpec.

        Args:
            text: Range string. A plain version means "at least this
                version"; empty or None means any version.

        Returns:
            Parsed VersionSpec

        Raises:
            ValueError: If the range is malformed

        Examples:
            >>> VersionSpec.parse("[1.0,2.0)").satisfies(SemanticVersion("1.5"))
            True
            >>> VersionSpec.parse("1.0").satisfies(SemanticVersion("0.9"))
            False
        """
        if text is None or not text.strip():
            return cls()
        text = text.strip()

        plain = SemanticVersion.try_parse(text)
        if plain is not None:
            return cls(min_version=plain, is_min_inclusive=True)

        if len(text) < 3 or text[0] not in "[(" or text[-1] not in "])":
            raise ValueError(f"'{text}' is not a valid version range")

        min_inclusive = text[0] == "["
        max_inclusive = text[-1] == "]"
        inner = text[1:-1]
        parts = inner.split(",")
        if len(parts) > 2:
            raise ValueError(f"'{text}' is not a valid version range")

        if len(parts) == 1:
            # [1.0] is the only legal single-value interval
            if not (min_inclusive and max_inclusive):
                raise ValueError(f"'{text}' is not a valid version range")
            return cls.exact(_parse_bound(parts[0], text))

        low, high = (p.strip() for p in parts)
        if not low and not high:
            raise ValueError(f"'{text}' is not a valid version range")

        min_version = _parse_bound(low, text) if low else None
        max_version = _parse_bound(high, text) if high else None
        return cls(min_version, min_inclusive, max_version, max_inclusive)

    def satisfies(self, version: SemanticVersion) -> bool:
        if self.min_version is not None:
            if self.is_min_inclusive:
                if version < self.min_version:
                    return False
            elif version <= self.min_version:
                return False
        if self.max_version is not None:
            if self.is_max_inclusive:
                if version > self.max_version:
                    return False
            elif version >= self.max_version:
                return False
        return True

    def __str__(self) -> str:
        if self.min_version is None and self.max_version is None:
            return ""
        if (
            self.min_version is not None
            and self.is_min_inclusive
            and self.max_version is None
        ):
            return str(self.min_version)
        if (
            self.min_version is not None
            and self.min_version == self.max_version
            and self.is_min_inclusive
            and self.is_max_inclusive
        ):
            return f"[{self.min_version}]"
        low = str(self.min_version) if self.min_version is not None else ""
        high = str(self.max_version) if self.max_version is not None else ""
        return (
            ("[" if self.is_min_inclusive else "(")
            + f"{low}, {high}"
            + ("]" if self.is_max_inclusive else ")")
        )


def _parse_bound(value: str, whole: str) -> SemanticVersion:
    version = SemanticVersion.try_parse(value.strip())
    if version is None:
        raise ValueError(f"'{whole}' is not a valid version range")
    return version
