"""Environment variable reader with dependency injection support.

This module provides the EnvReader class for reading and parsing environment
variables with type conversion. It accepts an optional env mapping for tests
and an optional log so that warnings raised before logging is configured can
be buffered.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from server_bootstrap.logging.buffer import BufferedLog

logger = logging.getLogger(__name__)


class EnvReader:
    """Environment variable reader with type conversion.

    Example:
        # Production usage (reads from os.environ)
        reader = EnvReader()
        port = reader.get_int("SERVER_BOOTSTRAP_PORT", 7474)

        # Testing usage (inject custom env)
        reader = EnvReader(env={"SERVER_BOOTSTRAP_PORT": "9000"})
        port = reader.get_int("SERVER_BOOTSTRAP_PORT", 7474)  # Returns 9000
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        log: logging.Logger | BufferedLog | None = None,
    ) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
            log: Where to report unparsable values. Defaults to module logger.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ
        self._log = log if log is not None else logger

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string, or default if not set."""
        value = self._env.get(var)
        if value is None:
            return default
        return value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer from environment variable.

        Args:
            var: Environment variable name.
            default: Default value if not set or invalid.

        Returns:
            Parsed integer value, or default if not set or invalid.
            Logs a warning if the value is set but cannot be parsed.
        """
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            self._log.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean from environment variable.

        Recognizes "true", "1", "yes", "on" (case-insensitive) as true. All
        other values are false.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a path (tilde expanded), or default if not set or empty."""
        value = self._env.get(var)
        if not value:
            return default
        return Path(value).expanduser()
