"""Configuration data models.

This module defines dataclasses for server bootstrap configuration options.
Validation runs in ``__post_init__`` and raises ``ValueError`` for malformed
values.
"""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATA_DIR = Path.home() / ".server-bootstrap"


@dataclass
class ServerConfig:
    """Configuration for the network-facing server."""

    bind: str = "127.0.0.1"
    """Network address to bind to. Default localhost for security."""

    port: int = 7474
    """Port number for the HTTP server. 0 binds any free port."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not isinstance(self.port, int) or isinstance(self.port, bool):
            raise ValueError(f"port must be an integer, got {self.port!r}")
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be 0-65535, got {self.port}")
        if not self.bind:
            raise ValueError("bind address must not be empty")


@dataclass
class DatabaseConfig:
    """Configuration for the backing store."""

    location: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "data.db")
    """Path of the database file. A sibling ``.lock`` file guards it."""


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.max_bytes < 0:
            raise ValueError(f"max_bytes must be non-negative, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ValueError(
                f"backup_count must be non-negative, got {self.backup_count}"
            )


@dataclass
class BootstrapConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    data_dir: Path = DEFAULT_DATA_DIR
    """Base directory for the config file, database and logs."""

    source: Path | None = None
    """Config file the values were read from, None when defaults only."""
