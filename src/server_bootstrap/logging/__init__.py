"""Logging for server bootstrap.

Provides the pre-configuration buffered log, the configured logging sink,
and the JSON formatter used for structured output.
"""

from server_bootstrap.logging.buffer import BufferedLog, BufferedRecord
from server_bootstrap.logging.handlers import JSONFormatter
from server_bootstrap.logging.service import CONSOLE_LOGGER_NAME, LoggingService

__all__ = [
    "CONSOLE_LOGGER_NAME",
    "BufferedLog",
    "BufferedRecord",
    "JSONFormatter",
    "LoggingService",
]
