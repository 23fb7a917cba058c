"""Logging sink built from configuration.

``LoggingService`` is what the bootstrap replays its buffered startup log
into. It installs handlers when constructed and is registered in the
lifecycle container so that ``stop()`` removes and closes them at shutdown.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from server_bootstrap.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from server_bootstrap.config.models import LoggingConfig

# Parent of every console-oriented logger.
CONSOLE_LOGGER_NAME = "server_bootstrap.console"

# Map of lowercase level names to logging module constants.
# CRITICAL is intentionally excluded - not exposed via configuration.
_LEVEL_MAP: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def _category_name(category: str | type) -> str:
    if isinstance(category, type):
        return f"{category.__module__}.{category.__qualname__}"
    return category


class LoggingService:
    """Structured and console logging for the running daemon.

    Structured records go to the root logger's handlers: a rotating file
    (text or JSON) and, when configured or as a fallback, stderr. Console
    loggers additionally write a short human-readable line to stdout.

    Only the handlers installed by this service are removed on stop, so
    handlers owned by someone else (test harnesses, embedding apps) survive.
    """

    def __init__(
        self,
        config: LoggingConfig,
        *,
        stderr: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        """Build formatters and handlers and attach them.

        Args:
            config: Logging configuration.
            stderr: Stream for the structured stderr handler (default sys.stderr).
            stdout: Stream for the console handler (default sys.stdout).
        """
        self._config = config
        self._level = _LEVEL_MAP.get(config.level.casefold(), logging.INFO)
        self._stderr = stderr if stderr is not None else sys.stderr
        self._stdout = stdout if stdout is not None else sys.stdout
        self._root = logging.getLogger()
        self._console = logging.getLogger(CONSOLE_LOGGER_NAME)
        self._previous_level = self._root.level
        self._installed: list[tuple[logging.Logger, logging.Handler]] = []
        self._started = False
        self._closed = False
        self._install()

    @classmethod
    def from_config(cls, config: LoggingConfig) -> LoggingService:
        return cls(config)

    @property
    def handlers(self) -> list[logging.Handler]:
        """Handlers currently installed by this service."""
        return [handler for _, handler in self._installed]

    @property
    def closed(self) -> bool:
        return self._closed

    def _attach(self, target: logging.Logger, handler: logging.Handler) -> None:
        handler.setLevel(self._level)
        target.addHandler(handler)
        self._installed.append((target, handler))

    def _install(self) -> None:
        config = self._config
        self._root.setLevel(self._level)

        if config.format.casefold() == "json":
            formatter: logging.Formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT)

        file_handler_added = False
        if config.file:
            try:
                file_path = Path(config.file).expanduser()
                file_path.parent.mkdir(parents=True, exist_ok=True)

                file_handler = RotatingFileHandler(
                    file_path,
                    maxBytes=config.max_bytes,
                    backupCount=config.backup_count,
                    encoding="utf-8",
                )
                file_handler.setFormatter(formatter)
                self._attach(self._root, file_handler)
                file_handler_added = True
            except OSError as e:
                # Log file unavailable - fall back to stderr
                self._stderr.write(
                    f"Warning: Could not open log file {config.file}: {e}\n"
                )

        if config.include_stderr or not file_handler_added:
            stderr_handler = logging.StreamHandler(self._stderr)
            stderr_handler.setFormatter(formatter)
            self._attach(self._root, stderr_handler)

        console_handler = logging.StreamHandler(self._stdout)
        console_handler.setFormatter(
            logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
        )
        self._attach(self._console, console_handler)

    def get_messages_log(self, category: str | type) -> logging.Logger:
        """Structured logger for a component category."""
        return logging.getLogger(_category_name(category))

    def get_console_log(self, category: str | type) -> logging.Logger:
        """Console-oriented logger for a component category."""
        return logging.getLogger(f"{CONSOLE_LOGGER_NAME}.{_category_name(category)}")

    def start(self) -> None:
        if self._closed:
            raise ValueError("Logging service has already been stopped")
        self._started = True
        self._root.debug(
            "Logging started (level=%s, format=%s, file=%s)",
            self._config.level,
            self._config.format,
            self._config.file,
        )

    def stop(self) -> None:
        """Detach and close the handlers installed by this service."""
        if self._closed:
            return
        self._closed = True
        for target, handler in reversed(self._installed):
            target.removeHandler(handler)
            handler.close()
        self._installed.clear()
        self._root.setLevel(self._previous_level)
