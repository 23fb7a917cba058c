"""Exception hierarchy for server bootstrap.

Startup failures are classified by exception type. The orchestrator maps
:class:`DependencyStartupError` to the dependency exit code and everything
else to the server exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from server_bootstrap.lifecycle.container import LifecycleFailure


class BootstrapError(Exception):
    """Base exception for all bootstrap errors."""


class ConfigurationError(BootstrapError, ValueError):
    """Raised when configuration cannot be read or holds a malformed value."""


class ServerStartupError(BootstrapError):
    """Raised when the network-facing server cannot be started."""


class DependencyStartupError(BootstrapError):
    """Raised when the backing store or another dependency cannot start."""


class StoreLocationInUseError(DependencyStartupError):
    """Raised when another process holds the database location."""

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"Database location is locked: {location}")


class BootstrapStateError(BootstrapError, RuntimeError):
    """Raised when a lifecycle operation is invalid for the current state."""


class LifecycleShutdownError(BootstrapError):
    """Raised when one or more lifecycle resources failed to stop."""

    def __init__(self, failures: list[LifecycleFailure]) -> None:
        self.failures = failures
        names = ", ".join(f.name for f in failures)
        super().__init__(f"Failed to stop lifecycle resources: {names}")
