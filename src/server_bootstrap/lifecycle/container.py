"""Lifecycle container for resources owned by the bootstrap process.

Resources are started the moment they are registered and stopped in the
exact reverse of registration order when the container shuts down.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TypeVar, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Lifecycle(Protocol):
    """A resource that can be started and stopped."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


L = TypeVar("L", bound=Lifecycle)


@dataclass
class LifecycleEntry:
    """A registered resource."""

    name: str
    start: Callable[[], None]
    stop: Callable[[], None]
    started: bool = False
    """True once start() returned normally; cleared after stop() is attempted."""

    source: object | None = None
    """The registered resource object, None for plain callbacks."""


@dataclass(frozen=True)
class LifecycleFailure:
    """A resource whose stop() raised during shutdown."""

    name: str
    error: Exception


class LifecycleContainer:
    """Ordered registry of start/stop-able resources.

    ``add()`` is fail-fast: a resource whose ``start()`` raises is never
    registered, and the caller is responsible for shutting down whatever was
    added before it. ``shutdown()`` is best-effort: every started entry gets
    its ``stop()`` attempted even if an earlier one failed.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._entries: list[LifecycleEntry] = []
        self._log = log or logger
        self._shut_down = False

    @property
    def names(self) -> list[str]:
        """Registered entry names in registration order."""
        return [entry.name for entry in self._entries]

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, resource: L, name: str | None = None) -> L:
        """Register and immediately start a resource.

        Args:
            resource: Object exposing start() and stop().
            name: Diagnostic name. Defaults to the resource's class name.

        Returns:
            The resource, so construction can be chained.

        Raises:
            ValueError: If the resource is already registered.
            Exception: Whatever the resource's start() raised.
        """
        if any(entry.source is resource for entry in self._entries):
            raise ValueError(f"Resource already registered: {resource!r}")
        entry = LifecycleEntry(
            name=name or type(resource).__name__,
            start=resource.start,
            stop=resource.stop,
            source=resource,
        )
        self._start_entry(entry)
        return resource

    def add_callbacks(
        self,
        name: str,
        start: Callable[[], None],
        stop: Callable[[], None],
    ) -> None:
        """Register and immediately start a resource given as two callables."""
        self._start_entry(LifecycleEntry(name=name, start=start, stop=stop))

    def _start_entry(self, entry: LifecycleEntry) -> None:
        if self._shut_down:
            raise ValueError(
                f"Cannot add {entry.name!r}: lifecycle container is shut down"
            )
        entry.start()
        entry.started = True
        self._entries.append(entry)
        self._log.debug("Started lifecycle resource: %s", entry.name)

    def shutdown(self) -> list[LifecycleFailure]:
        """Stop every started resource in reverse registration order.

        Returns:
            Resources whose stop() raised. Empty on a clean shutdown and on
            any call after the first.
        """
        if self._shut_down:
            return []
        self._shut_down = True

        failures: list[LifecycleFailure] = []
        for entry in reversed(self._entries):
            if not entry.started:
                continue
            entry.started = False
            try:
                entry.stop()
            except Exception as e:
                self._log.error(
                    "Failed to stop lifecycle resource %s: %s",
                    entry.name,
                    e,
                    exc_info=True,
                )
                failures.append(LifecycleFailure(name=entry.name, error=e))
            else:
                self._log.debug("Stopped lifecycle resource: %s", entry.name)
        return failures
