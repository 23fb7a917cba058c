"""Ordered start/stop management of owned sub-resources.

Exports:
    Lifecycle: Protocol for resources exposing start() and stop()
    LifecycleContainer: Starts resources on registration, stops in reverse
    LifecycleEntry: A registered (name, start, stop) triple
    LifecycleFailure: A resource that raised while stopping
"""

from server_bootstrap.lifecycle.container import (
    Lifecycle,
    LifecycleContainer,
    LifecycleEntry,
    LifecycleFailure,
)

__all__ = [
    "Lifecycle",
    "LifecycleContainer",
    "LifecycleEntry",
    "LifecycleFailure",
]
