"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. Environment variables (SERVER_BOOTSTRAP_*)
2. Config file (TOML)
3. Default values

The config file itself is located by, in order: the path passed to the
loader, SERVER_BOOTSTRAP_CONFIG, then ``<data dir>/config.toml``.

Environment variables:
- SERVER_BOOTSTRAP_CONFIG: Path to config file
- SERVER_BOOTSTRAP_DATA_DIR: Base data directory (default ~/.server-bootstrap)
- SERVER_BOOTSTRAP_BIND: Server bind address
- SERVER_BOOTSTRAP_PORT: Server port
- SERVER_BOOTSTRAP_DATABASE: Database location
- SERVER_BOOTSTRAP_LOG_LEVEL: Log level (debug, info, warning, error)
- SERVER_BOOTSTRAP_LOG_FORMAT: Log format (text, json)

The loader runs before logging exists, so it reports through the
``BufferedLog`` it is given rather than a module logger.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from server_bootstrap.config.env import EnvReader
from server_bootstrap.config.models import (
    DEFAULT_DATA_DIR,
    BootstrapConfig,
    DatabaseConfig,
    LoggingConfig,
    ServerConfig,
)
from server_bootstrap.errors import ConfigurationError
from server_bootstrap.logging.buffer import BufferedLog

ENV_PREFIX = "SERVER_BOOTSTRAP_"
CONFIG_FILE_NAME = "config.toml"

_KNOWN_KEYS: dict[str, frozenset[str]] = {
    "server": frozenset({"bind", "port"}),
    "database": frozenset({"location"}),
    "logging": frozenset(
        {"level", "file", "format", "include_stderr", "max_bytes", "backup_count"}
    ),
}


class ConfigurationLoader:
    """Produces the configuration snapshot used during startup.

    The snapshot is built on first access and cached.
    """

    def __init__(
        self,
        log: BufferedLog,
        config_path: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            log: Buffered log that receives loading diagnostics.
            config_path: Explicit config file. Must exist if given.
            env: Environment mapping (defaults to os.environ).
        """
        self._log = log
        self._explicit_path = config_path
        self._env = EnvReader(env=env, log=log)
        self._config: BootstrapConfig | None = None

    def get_data_dir(self) -> Path:
        return self._env.get_path(f"{ENV_PREFIX}DATA_DIR", DEFAULT_DATA_DIR)

    def get_config_path(self) -> tuple[Path, bool]:
        """Return the config file path and whether it was asked for explicitly."""
        if self._explicit_path is not None:
            return Path(self._explicit_path).expanduser(), True
        env_path = self._env.get_path(f"{ENV_PREFIX}CONFIG")
        if env_path is not None:
            return env_path, True
        return self.get_data_dir() / CONFIG_FILE_NAME, False

    def configuration(self) -> BootstrapConfig:
        """Full configuration snapshot.

        Raises:
            ConfigurationError: If the config file is missing or unreadable.
            ValueError: If a configured value is malformed.
        """
        if self._config is None:
            self._config = self._load()
        return self._config

    def logging_config(self) -> LoggingConfig:
        """The subset of configuration needed to build the logging sink."""
        return self.configuration().logging

    def _read_file(self, path: Path, explicit: bool) -> dict[str, Any]:
        if not path.exists():
            if explicit:
                raise ConfigurationError(f"Configuration file not found: {path}")
            self._log.info("Configuration file %s not found, using defaults", path)
            return {}

        try:
            content = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration {path}: {e}") from e

        for section, values in content.items():
            if section not in _KNOWN_KEYS:
                self._log.warning("Unknown configuration section [%s] ignored", section)
                continue
            if not isinstance(values, dict):
                raise ConfigurationError(
                    f"Configuration section [{section}] must be a table"
                )
            for key in values:
                if key not in _KNOWN_KEYS[section]:
                    self._log.warning(
                        "Unknown configuration key %s.%s ignored", section, key
                    )
        self._log.info("Loaded configuration from %s", path)
        return content

    def _resolve(self, data_dir: Path, value: str | Path) -> Path:
        path = Path(value).expanduser()
        return path if path.is_absolute() else data_dir / path

    def _load(self) -> BootstrapConfig:
        data_dir = self.get_data_dir()
        path, explicit = self.get_config_path()
        file_config = self._read_file(path, explicit)
        env = self._env

        server_file = file_config.get("server", {})
        server = ServerConfig(
            bind=env.get_str(f"{ENV_PREFIX}BIND") or server_file.get("bind", "127.0.0.1"),
            port=env.get_int(f"{ENV_PREFIX}PORT", server_file.get("port", 7474)),
        )

        database_file = file_config.get("database", {})
        location = env.get_path(f"{ENV_PREFIX}DATABASE") or database_file.get(
            "location", "data.db"
        )
        database = DatabaseConfig(location=self._resolve(data_dir, location))

        logging_file = file_config.get("logging", {})
        log_file = logging_file.get("file", "logs/messages.log")
        logging_config = LoggingConfig(
            level=env.get_str(f"{ENV_PREFIX}LOG_LEVEL")
            or logging_file.get("level", "info"),
            file=self._resolve(data_dir, log_file) if log_file else None,
            format=env.get_str(f"{ENV_PREFIX}LOG_FORMAT")
            or logging_file.get("format", "text"),
            include_stderr=logging_file.get("include_stderr", False),
            max_bytes=logging_file.get("max_bytes", 10_485_760),
            backup_count=logging_file.get("backup_count", 5),
        )

        config = BootstrapConfig(
            server=server,
            database=database,
            logging=logging_config,
            data_dir=data_dir,
            source=path if path.exists() else None,
        )
        self._log.debug(
            "Configuration: bind=%s port=%d database=%s log_file=%s",
            server.bind,
            server.port,
            database.location,
            logging_config.file,
        )
        return config
