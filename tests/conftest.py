"""Shared test fixtures for server bootstrap."""

from __future__ import annotations

import logging
import signal
from collections.abc import Callable
from pathlib import Path

import pytest

from server_bootstrap.bootstrap.orchestrator import (
    BootstrapOrchestrator,
    create_orchestrator,
)
from server_bootstrap.bootstrap.shutdown import ShutdownCoordinator
from server_bootstrap.bootstrap.variants import BootstrapVariant
from server_bootstrap.logging.service import CONSOLE_LOGGER_NAME


class RecordingServer:
    """Server double that records calls and can be told to fail."""

    def __init__(
        self,
        events: list[str] | None = None,
        location: str = "/var/lib/test/data.db",
        start_error: BaseException | None = None,
        stop_error: BaseException | None = None,
    ) -> None:
        self.events = events if events is not None else []
        self._location = location
        self.start_error = start_error
        self.stop_error = stop_error
        self.start_calls = 0
        self.stop_calls = 0

    def start(self) -> None:
        self.start_calls += 1
        self.events.append("server.start")
        if self.start_error is not None:
            raise self.start_error

    def stop(self) -> None:
        self.stop_calls += 1
        self.events.append("server.stop")
        if self.stop_error is not None:
            raise self.stop_error

    def location(self) -> str:
        return self._location


def make_variant(
    server: RecordingServer,
    name: str = "test",
    capabilities: frozenset[str] = frozenset({"community", "test"}),
) -> BootstrapVariant:
    """Variant whose factory always returns ``server``."""
    return BootstrapVariant(
        name=name,
        server_factory=lambda config, logging_service: server,
        capabilities=capabilities,
    )


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Save and restore root logger state between tests."""
    root = logging.getLogger()
    console = logging.getLogger(CONSOLE_LOGGER_NAME)
    original_handlers = root.handlers[:]
    original_console_handlers = console.handlers[:]
    original_level = root.level
    yield
    root.handlers[:] = original_handlers
    console.handlers[:] = original_console_handlers
    root.setLevel(original_level)


@pytest.fixture
def usr1_received():
    """Install a SIGUSR1 handler that records deliveries, restored afterwards."""
    received: list[int] = []
    original = signal.signal(
        signal.SIGUSR1, lambda signum, frame: received.append(signum)
    )
    yield received
    signal.signal(signal.SIGUSR1, original if original is not None else signal.SIG_DFL)


@pytest.fixture
def bootstrap_env(tmp_path: Path) -> dict[str, str]:
    """Environment pointing all bootstrap state at a temp directory."""
    return {
        "SERVER_BOOTSTRAP_DATA_DIR": str(tmp_path),
        "SERVER_BOOTSTRAP_PORT": "0",
    }


@pytest.fixture
def make_orchestrator(
    bootstrap_env: dict[str, str],
) -> Callable[..., BootstrapOrchestrator]:
    """Build orchestrators that never touch real signal handlers.

    Every orchestrator built is stopped at teardown so no atexit hook
    outlives the test.
    """
    created: list[BootstrapOrchestrator] = []

    def _make(variant: BootstrapVariant, **kwargs) -> BootstrapOrchestrator:
        kwargs.setdefault("env", bootstrap_env)
        kwargs.setdefault(
            "coordinator", ShutdownCoordinator(install_signal_handlers=False)
        )
        orchestrator = create_orchestrator(variant, **kwargs)
        created.append(orchestrator)
        return orchestrator

    yield _make

    for orchestrator in created:
        orchestrator.stop()
        # A failed stop leaves the hook and resources in place
        orchestrator.coordinator.remove_hook()
        orchestrator.lifecycle.shutdown()


@pytest.fixture
def events() -> list[str]:
    """Shared call log for ordering assertions."""
    return []


@pytest.fixture
def server(events: list[str]) -> RecordingServer:
    return RecordingServer(events)


@pytest.fixture
def variant(server: RecordingServer) -> BootstrapVariant:
    return make_variant(server)


@pytest.fixture
def server_cls() -> type[RecordingServer]:
    """The RecordingServer class, for tests that need more than one."""
    return RecordingServer
