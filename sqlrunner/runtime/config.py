"""Configuration management for SQLRunner.

Handles loading and merging configuration from:
1. Global config file (~/.sqlrunner/config.toml)
2. Local project config file (./sqlrunner.toml)
3. Environment variables

An explicit config file replaces both files.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from pydantic import BaseModel, Field

from .connection import ConfigurationError, ConnectionParams


class ConnectionConfig(BaseModel):
    """One named database connection."""
    driver: str
    url: str
    user: Optional[str] = None
    password: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)

    def has_password(self) -> bool:
        return self.password is not None

    def to_params(self, password: Optional[str] = None) -> ConnectionParams:
        return ConnectionParams(
            driver=self.driver,
            url=self.url,
            user=self.user,
            password=password if password is not None else self.password,
            options=dict(self.options),
        )


class TracingConfig(BaseModel):
    """Execution tracing configuration."""
    enabled: bool = False
    trace_dir: str = "~/.sqlrunner/runs"


class SQLRunnerConfig(BaseModel):
    """Main SQLRunner configuration."""
    default_connection: str = "default"
    connections: Dict[str, ConnectionConfig] = Field(default_factory=dict)
    tracing: TracingConfig = Field(default_factory=TracingConfig)

    # Session defaults
    output_mode: str = "t"
    debug: bool = False
    autocommit: bool = True
    log_level: str = "WARNING"

    def get_connection(self, name: Optional[str]) -> ConnectionConfig:
        """Look up a named connection."""
        if name is None:
            raise ValueError("Configuration name may not be null")
        try:
            return self.connections[name]
        except KeyError:
            known = ", ".join(sorted(self.connections)) or "none"
            raise ConfigurationError(f"Configuration {name!r} not found (known: {known})") from None


def get_config_path(local: bool = False) -> Path:
    """Get the path to the configuration file."""
    if local:
        return Path("./sqlrunner.toml")
    else:
        return Path.home() / ".sqlrunner" / "config.toml"


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except toml.TomlDecodeError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e


def load_config(path: Optional[Path] = None) -> SQLRunnerConfig:
    """Load configuration from files and environment variables."""
    config_data: Dict[str, Any] = {}

    if path is not None:
        path = Path(path).expanduser()
        if not path.exists():
            raise ConfigurationError(f"Config file {path} not found")
        config_data.update(_read_toml(path))
    else:
        # Local config overrides global
        for candidate in (get_config_path(local=False), get_config_path(local=True)):
            if candidate.exists():
                data = _read_toml(candidate)
                connections = {**config_data.get("connections", {}), **data.pop("connections", {})}
                config_data.update(data)
                config_data["connections"] = connections

    if "SQLRUNNER_CONNECTION" in os.environ:
        config_data["default_connection"] = os.environ["SQLRUNNER_CONNECTION"]

    if "SQLRUNNER_MODE" in os.environ:
        config_data["output_mode"] = os.environ["SQLRUNNER_MODE"]

    if "SQLRUNNER_TRACE_DIR" in os.environ:
        if "tracing" not in config_data:
            config_data["tracing"] = {}
        config_data["tracing"]["trace_dir"] = os.environ["SQLRUNNER_TRACE_DIR"]

    return SQLRunnerConfig(**config_data)


def ensure_config_dir() -> Path:
    """Ensure the SQLRunner configuration directory exists."""
    config_dir = Path.home() / ".sqlrunner"
    config_dir.mkdir(exist_ok=True)
    return config_dir


def create_default_config() -> Path:
    """Create a default configuration file unless one exists."""
    config_path = get_config_path(local=False)
    config_dir = ensure_config_dir()

    if not config_path.exists():
        default_config = {
            "default_connection": "default",
            "output_mode": "t",
            "debug": False,
            "autocommit": True,
            "log_level": "WARNING",
            "connections": {
                "default": {
                    "driver": "sqlite3",
                    "url": str(config_dir / "sqlrunner.db"),
                },
            },
            "tracing": {
                "enabled": False,
                "trace_dir": "~/.sqlrunner/runs",
            },
        }

        with open(config_path, "w", encoding="utf-8") as f:
            toml.dump(default_config, f)

    return config_path
