"""Connection parameters and the DB-API connection factory."""

import importlib
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


class ConfigurationError(ValueError):
    """Raised when configuration is missing or unusable."""


@dataclass(frozen=True)
class ConnectionParams:
    """Everything needed to open one connection.

    ``driver`` is the import name of a DB-API 2.0 module (``sqlite3``,
    ``psycopg2``, ``pymysql``...); ``url`` is what its ``connect`` takes as
    first argument.
    """

    driver: str
    url: str
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    options: Dict[str, Any] = field(default_factory=dict)


def load_driver(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot load driver {name!r}: {e}") from e


def create_connection(params: ConnectionParams) -> Any:
    """Open a DB-API connection described by ``params``."""
    if not params.driver or not params.url:
        raise ConfigurationError(f"Driver or URL missing: {params!r}")

    logger.info("connection.driver.loading", driver=params.driver)
    module = load_driver(params.driver)
    if not hasattr(module, "connect"):
        raise ConfigurationError(f"Driver {params.driver!r} has no connect()")

    kwargs: Dict[str, Any] = dict(params.options)
    if params.user is not None:
        kwargs["user"] = params.user
    if params.password is not None:
        kwargs["password"] = params.password

    logger.info("connection.connecting", driver=params.driver, url=params.url)
    return module.connect(params.url, **kwargs)


def driver_error_type(connection: Any) -> type:
    """The exception class a connection's driver raises for SQL failures."""
    error = getattr(connection, "Error", None)
    if isinstance(error, type) and issubclass(error, Exception):
        return error
    module = importlib.import_module(type(connection).__module__.split(".")[0])
    error = getattr(module, "Error", None)
    if isinstance(error, type) and issubclass(error, Exception):
        return error
    return Exception
