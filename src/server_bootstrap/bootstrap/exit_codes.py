"""Exit codes reported by the bootstrap orchestrator.

Exit code values:
    0: Success
    1: Server (network layer) startup error, including malformed
       configuration and unclassified failures
    2: Dependency (database layer) startup error
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Result of ``BootstrapOrchestrator.start()``."""

    OK = 0
    SERVER_STARTUP_ERROR = 1
    DEPENDENCY_STARTUP_ERROR = 2


class StopCode(IntEnum):
    """Result of ``BootstrapOrchestrator.stop()``.

    Advisory only; it becomes the process exit code only when the caller
    passes it to ``sys.exit``.
    """

    OK = 0
    FAILED = 1
