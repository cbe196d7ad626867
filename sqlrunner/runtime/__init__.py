"""Runtime components for SQLRunner execution."""

from .config import (
    ConfigurationError,
    ConnectionConfig,
    SQLRunnerConfig,
    create_default_config,
    ensure_config_dir,
    load_config,
)
from .connection import ConnectionParams, create_connection
from .log import configure_logging
from .session import ScriptStatus, Session

__all__ = [
    "ConfigurationError",
    "ConnectionConfig",
    "SQLRunnerConfig",
    "create_default_config",
    "ensure_config_dir",
    "load_config",
    "ConnectionParams",
    "create_connection",
    "configure_logging",
    "ScriptStatus",
    "Session",
]
