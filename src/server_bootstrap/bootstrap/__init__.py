"""Process bootstrap: variant selection, startup sequencing and shutdown.

Exports:
    BootstrapOrchestrator: Startup/shutdown state machine
    LifecycleState: Orchestrator states
    create_orchestrator: Factory building an orchestrator for a variant
    BootstrapVariant: Descriptor of a way to build the managed server
    COMMUNITY_VARIANT: Baseline variant
    select_variant: Most-specialized fold over candidate variants
    discover_variants: Entry point discovery of installed variants
    load_most_specialized_variant: Discovery plus selection
    ShutdownCoordinator: Signal/atexit hook bound to one teardown path
    ShutdownToken: Single-use teardown guard
    ExitCode, StopCode: Results of start() and stop()
"""

from server_bootstrap.bootstrap.exit_codes import ExitCode, StopCode
from server_bootstrap.bootstrap.orchestrator import (
    BootstrapOrchestrator,
    LifecycleState,
    create_orchestrator,
)
from server_bootstrap.bootstrap.selector import (
    VARIANT_ENTRY_POINT_GROUP,
    discover_variants,
    load_most_specialized_variant,
    select_variant,
)
from server_bootstrap.bootstrap.shutdown import ShutdownCoordinator, ShutdownToken
from server_bootstrap.bootstrap.variants import COMMUNITY_VARIANT, BootstrapVariant

__all__ = [
    "COMMUNITY_VARIANT",
    "VARIANT_ENTRY_POINT_GROUP",
    "BootstrapOrchestrator",
    "BootstrapVariant",
    "ExitCode",
    "LifecycleState",
    "ShutdownCoordinator",
    "ShutdownToken",
    "StopCode",
    "create_orchestrator",
    "discover_variants",
    "load_most_specialized_variant",
    "select_variant",
]
