"""Runtime environment diagnostics."""

from server_bootstrap.runtime.checker import (
    MINIMUM_PYTHON_VERSION,
    SUPPORTED_IMPLEMENTATIONS,
    RuntimeChecker,
    RuntimeMetadata,
    RuntimeMetadataRepository,
)

__all__ = [
    "MINIMUM_PYTHON_VERSION",
    "SUPPORTED_IMPLEMENTATIONS",
    "RuntimeChecker",
    "RuntimeMetadata",
    "RuntimeMetadataRepository",
]
