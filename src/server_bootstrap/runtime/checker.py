"""Interpreter compatibility check.

Runs once at startup and only ever warns: an unsupported interpreter is
reported, never refused.
"""

from __future__ import annotations

import logging
import platform
import sys
from dataclasses import dataclass

SUPPORTED_IMPLEMENTATIONS: frozenset[str] = frozenset({"CPython"})
MINIMUM_PYTHON_VERSION: tuple[int, int] = (3, 11)


@dataclass(frozen=True)
class RuntimeMetadata:
    """Identity of the running interpreter."""

    implementation: str
    version: tuple[int, int, int]

    @property
    def version_string(self) -> str:
        return ".".join(str(part) for part in self.version)


class RuntimeMetadataRepository:
    """Reads interpreter metadata from the current process."""

    def get_metadata(self) -> RuntimeMetadata:
        return RuntimeMetadata(
            implementation=platform.python_implementation(),
            version=tuple(sys.version_info[:3]),
        )


class RuntimeChecker:
    """Warns when the interpreter is not one the server is tested on."""

    def __init__(
        self,
        log: logging.Logger,
        repository: RuntimeMetadataRepository | None = None,
    ) -> None:
        self._log = log
        self._repository = repository or RuntimeMetadataRepository()

    def check_compatibility_and_issue_warning(self) -> bool:
        """Check the interpreter and log a warning if it is unsupported.

        Returns:
            True if the interpreter is supported. False if a warning was
            logged, including when the metadata could not be read.
        """
        try:
            metadata = self._repository.get_metadata()
        except Exception as e:
            self._log.warning("Unable to determine runtime environment: %s", e)
            return False

        compatible = True
        if metadata.implementation not in SUPPORTED_IMPLEMENTATIONS:
            self._log.warning(
                "You are using an unsupported Python implementation (%s %s). "
                "Please use %s.",
                metadata.implementation,
                metadata.version_string,
                " or ".join(sorted(SUPPORTED_IMPLEMENTATIONS)),
            )
            compatible = False
        if metadata.version[:2] < MINIMUM_PYTHON_VERSION:
            self._log.warning(
                "You are using an unsupported version of Python (%s). "
                "Please use Python %d.%d or newer.",
                metadata.version_string,
                *MINIMUM_PYTHON_VERSION,
            )
            compatible = False
        return compatible
