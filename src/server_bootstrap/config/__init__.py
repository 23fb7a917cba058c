"""Configuration management for server bootstrap.

Configuration is read from a TOML file and SERVER_BOOTSTRAP_* environment
variables into validated dataclasses. Loading happens before logging is
configured, so diagnostics go to a BufferedLog.
"""

from server_bootstrap.config.env import EnvReader
from server_bootstrap.config.loader import ENV_PREFIX, ConfigurationLoader
from server_bootstrap.config.models import (
    BootstrapConfig,
    DatabaseConfig,
    LoggingConfig,
    ServerConfig,
)

__all__ = [
    "ENV_PREFIX",
    "BootstrapConfig",
    "ConfigurationLoader",
    "DatabaseConfig",
    "EnvReader",
    "LoggingConfig",
    "ServerConfig",
]
