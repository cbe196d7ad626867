import io
import sqlite3

import pytest
import structlog
from rich.console import Console

from sqlrunner.runtime import Session


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE t (id INTEGER, name TEXT)")
    conn.executemany("INSERT INTO t VALUES (?, ?)", [(1, "alpha"), (2, "beta")])
    conn.commit()
    yield conn
    conn.close()


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def status():
    return Console(file=io.StringIO(), highlight=False, width=200)


@pytest.fixture
def session(connection, out, status):
    s = Session(connection, "t", stdout=out, console=status)
    yield s
    s.close()


@pytest.fixture
def db_file(tmp_path):
    path = tmp_path / "test.db"
    conn = sqlite3.connect(str(path))
    conn.execute("CREATE TABLE t (id INTEGER, name TEXT)")
    conn.executemany("INSERT INTO t VALUES (?, ?)", [(1, "alpha"), (2, "beta")])
    conn.commit()
    conn.close()
    return path
