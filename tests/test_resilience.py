"""Tests for storage error classification and the best-effort policy."""

import logging

import pytest

from pkgcache.cache.resilience import (
    StorageFailure,
    best_effort,
    classify_storage_error,
    is_storage_error,
    swallow_storage_errors,
)
from pkgcache.exceptions import (
    CacheAccessError,
    CacheError,
    CachePermissionError,
    PackageSerializationError,
)


class TestClassifyStorageError:
    """Test mapping exceptions to failure kinds."""

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (PermissionError("denied"), StorageFailure.ACCESS),
            (CacheAccessError("restricted"), StorageFailure.ACCESS),
            (CachePermissionError("denied"), StorageFailure.ACCESS),
            (FileNotFoundError("gone"), StorageFailure.NOT_FOUND),
            (IsADirectoryError("dir"), StorageFailure.IO),
            (OSError(28, "No space left on device"), StorageFailure.IO),
            (CacheError("other"), StorageFailure.UNKNOWN),
        ],
    )
    def test_classification(self, exc, expected):
        """Test each exception type maps to its failure kind."""
        assert classify_storage_error(exc) is expected

    def test_is_storage_error(self):
        """Test only OSError and CacheError count as storage errors."""
        assert is_storage_error(OSError())
        assert is_storage_error(CacheAccessError())
        assert not is_storage_error(ValueError())
        assert not is_storage_error(PackageSerializationError())


class TestBestEffort:
    """Test the best-effort context manager."""

    def test_swallows_access_failure(self, caplog):
        """Test access failures are discarded and logged as warnings."""
        with caplog.at_level(logging.WARNING, logger="pkgcache.cache.resilience"):
            with best_effort("add A 1.0"):
                raise PermissionError("Can't touch me.")

        assert "add A 1.0" in caplog.text
        assert "access" in caplog.text

    def test_not_found_logged_at_debug(self, caplog):
        """Test not-found failures are treated as success."""
        with caplog.at_level(logging.DEBUG, logger="pkgcache.cache.resilience"):
            with best_effort("delete A.1.0.nupkg"):
                raise FileNotFoundError("gone")

        records = [r for r in caplog.records if r.name == "pkgcache.cache.resilience"]
        assert records and all(r.levelno == logging.DEBUG for r in records)

    def test_propagates_non_storage_errors(self):
        """Test errors from above the storage boundary propagate."""
        with pytest.raises(PackageSerializationError):
            with best_effort("add A 1.0"):
                raise PackageSerializationError("bad package")

        with pytest.raises(KeyError):
            with best_effort("add A 1.0"):
                raise KeyError("bug")

    def test_no_error_passes_through(self):
        """Test the block runs normally when nothing fails."""
        ran = []
        with best_effort("noop"):
            ran.append(True)
        assert ran == [True]


class TestSwallowStorageErrors:
    """Test the decorator form."""

    def test_returns_value_on_success(self):
        """Test the wrapped function's result is returned."""

        @swallow_storage_errors("compute")
        def compute():
            return 42

        assert compute() == 42

    def test_returns_none_on_storage_error(self):
        """Test storage failures turn into a None result."""

        @swallow_storage_errors("delete")
        def delete():
            raise OSError("locked")

        assert delete() is None

    def test_preserves_metadata(self):
        """Test functools.wraps keeps the function name."""

        @swallow_storage_errors("delete")
        def delete_file():
            pass

        assert delete_file.__name__ == "delete_file"
