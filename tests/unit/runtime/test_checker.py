"""Tests for the interpreter compatibility check."""

from __future__ import annotations

import logging
import platform
import sys

import pytest

from server_bootstrap.runtime import (
    RuntimeChecker,
    RuntimeMetadata,
    RuntimeMetadataRepository,
)

logger = logging.getLogger("test.runtime")


class FixedRepository(RuntimeMetadataRepository):
    def __init__(self, metadata: RuntimeMetadata | None = None) -> None:
        self.metadata = metadata

    def get_metadata(self) -> RuntimeMetadata:
        if self.metadata is None:
            raise OSError("metadata unavailable")
        return self.metadata


def _check(metadata: RuntimeMetadata | None) -> bool:
    return RuntimeChecker(
        logger, FixedRepository(metadata)
    ).check_compatibility_and_issue_warning()


class TestRuntimeChecker:
    """Tests for RuntimeChecker."""

    def test_supported(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert _check(RuntimeMetadata("CPython", (3, 12, 1)))
        assert caplog.records == []

    def test_unsupported_implementation(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert not _check(RuntimeMetadata("PyPy", (3, 11, 0)))
        assert "unsupported Python implementation (PyPy 3.11.0)" in caplog.text

    def test_old_version(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert not _check(RuntimeMetadata("CPython", (3, 9, 18)))
        assert "unsupported version of Python (3.9.18)" in caplog.text
        assert "Python 3.11 or newer" in caplog.text

    def test_both_problems_warn_twice(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert not _check(RuntimeMetadata("Jython", (2, 7, 3)))
        assert len(caplog.records) == 2

    def test_metadata_failure_only_warns(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            assert not _check(None)
        assert "Unable to determine runtime environment" in caplog.text


class TestRuntimeMetadataRepository:
    """Tests for reading the current interpreter."""

    def test_current_interpreter(self) -> None:
        metadata = RuntimeMetadataRepository().get_metadata()
        assert metadata.implementation == platform.python_implementation()
        assert metadata.version == tuple(sys.version_info[:3])
