"""Process-lifecycle orchestrator for a long-running server daemon."""

__version__ = "0.1.0"
