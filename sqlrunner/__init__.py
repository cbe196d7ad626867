"""SQLRunner - run SQL scripts against any DB-API database.

Scripts mix SQL statements with backslash escapes that switch the output
between text, HTML and SQL INSERT statements or redirect it to a file.
"""

__version__ = "0.1.0"

from . import engine, runtime
from .cli import main
from .runtime import ScriptStatus, Session

__all__ = ["engine", "runtime", "main", "ScriptStatus", "Session"]
