"""Tests for semantic versions and version ranges."""

import pytest

from pkgcache.versioning import SemanticVersion, VersionSpec


class TestSemanticVersion:
    """Test version parsing and ordering."""

    def test_parse_keeps_original_text(self):
        """Test str() returns the version as written."""
        assert str(SemanticVersion("1.0")) == "1.0"
        assert str(SemanticVersion("2.1.3.4")) == "2.1.3.4"
        assert str(SemanticVersion("1.0-beta")) == "1.0-beta"

    def test_bare_major_is_padded(self):
        """Test a single component is read as major.0."""
        assert str(SemanticVersion("3")) == "3.0"
        assert SemanticVersion("3") == SemanticVersion("3.0.0")

    def test_missing_components_compare_as_zero(self):
        """Test 1.0 and 1.0.0.0 are the same version."""
        assert SemanticVersion("1.0") == SemanticVersion("1.0.0.0")
        assert hash(SemanticVersion("1.0")) == hash(SemanticVersion("1.0.0"))

    def test_numeric_ordering(self):
        """Test components compare numerically, not lexically."""
        assert SemanticVersion("1.10") > SemanticVersion("1.9")
        assert SemanticVersion("99.0") > SemanticVersion("9.0")
        assert SemanticVersion("1.0.0.1") > SemanticVersion("1.0")

    def test_prerelease_sorts_before_release(self):
        """Test pre-release versions come before the release."""
        assert SemanticVersion("1.0-beta") < SemanticVersion("1.0")
        assert SemanticVersion("1.0-alpha") < SemanticVersion("1.0-beta")
        assert SemanticVersion("1.0-beta") > SemanticVersion("0.9")

    def test_special_tag_is_case_insensitive(self):
        """Test special tags compare ignoring case."""
        assert SemanticVersion("1.0-BETA") == SemanticVersion("1.0-beta")

    def test_is_prerelease(self):
        """Test pre-release detection."""
        assert SemanticVersion("1.0-rc1").is_prerelease is True
        assert SemanticVersion("1.0").is_prerelease is False

    @pytest.mark.parametrize("text", ["", "abc", "1.0.0.0.0", "1.0-", "1.0-1abc", "v1.0"])
    def test_invalid_versions_raise(self, text):
        """Test malformed versions raise ValueError."""
        with pytest.raises(ValueError):
            SemanticVersion(text)

    def test_try_parse_returns_none(self):
        """Test try_parse never raises."""
        assert SemanticVersion.try_parse("not-a-version") is None
        assert SemanticVersion.try_parse(None) is None
        assert SemanticVersion.try_parse("1.2") == SemanticVersion("1.2")

    def test_sorting(self):
        """Test a list of versions sorts correctly."""
        versions = [SemanticVersion(v) for v in ["2.0", "1.0-beta", "1.0", "1.5"]]
        assert [str(v) for v in sorted(versions)] == ["1.0-beta", "1.0", "1.5", "2.0"]


class TestVersionSpec:
    """Test version range parsing and matching."""

    def test_plain_version_is_minimum(self):
        """Test '1.0' means 1.0 or higher."""
        spec = VersionSpec.parse("1.0")
        assert spec.satisfies(SemanticVersion("1.0"))
        assert spec.satisfies(SemanticVersion("5.0"))
        assert not spec.satisfies(SemanticVersion("0.9"))

    def test_exact_version(self):
        """Test '[1.0]' matches only 1.0."""
        spec = VersionSpec.parse("[1.0]")
        assert spec.satisfies(SemanticVersion("1.0.0"))
        assert not spec.satisfies(SemanticVersion("1.1"))

    def test_half_open_range(self):
        """Test '[1.0,2.0)' excludes the upper bound."""
        spec = VersionSpec.parse("[1.0,2.0)")
        assert spec.satisfies(SemanticVersion("1.0"))
        assert spec.satisfies(SemanticVersion("1.9.9"))
        assert not spec.satisfies(SemanticVersion("2.0"))

    def test_open_lower_bound(self):
        """Test '(,1.0]' means at most 1.0."""
        spec = VersionSpec.parse("(,1.0]")
        assert spec.min_version is None
        assert spec.satisfies(SemanticVersion("0.1"))
        assert spec.satisfies(SemanticVersion("1.0"))
        assert not spec.satisfies(SemanticVersion("1.0.1"))

    def test_exclusive_minimum(self):
        """Test '(1.0,)' means strictly greater than 1.0."""
        spec = VersionSpec.parse("(1.0,)")
        assert not spec.satisfies(SemanticVersion("1.0"))
        assert spec.satisfies(SemanticVersion("1.0.1"))

    def test_empty_means_any(self):
        """Test empty or None accepts every version."""
        assert VersionSpec.parse("").satisfies(SemanticVersion("0.0"))
        assert VersionSpec.parse(None).satisfies(SemanticVersion("99.0-alpha"))

    @pytest.mark.parametrize("text", ["[1.0", "(1.0)", "[1.0,2.0,3.0]", "(,)", "[a,b]", "x"])
    def test_invalid_ranges_raise(self, text):
        """Test malformed ranges raise ValueError."""
        with pytest.raises(ValueError):
            VersionSpec.parse(text)

    def test_str_formats(self):
        """Test ranges render back to interval notation."""
        assert str(VersionSpec.parse("1.0")) == "1.0"
        assert str(VersionSpec.parse("[1.0]")) == "[1.0]"
        assert str(VersionSpec.parse("[1.0,2.0)")) == "[1.0, 2.0)"
        assert str(VersionSpec.parse("")) == ""
