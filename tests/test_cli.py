import sqlite3

import pytest
import toml
from typer.testing import CliRunner

from sqlrunner.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, db_file, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("SQLRUNNER_CONNECTION", "SQLRUNNER_MODE", "SQLRUNNER_TRACE_DIR"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "sqlrunner.toml"
    path.write_text(toml.dumps({
        "default_connection": "test",
        "connections": {"test": {"driver": "sqlite3", "url": str(db_file)}},
        "tracing": {"enabled": True, "trace_dir": str(tmp_path / "runs")},
    }), encoding="utf-8")
    return path


def test_run_script_file(tmp_path, config_file):
    script = tmp_path / "query.sql"
    script.write_text("select name from t order by id;\n", encoding="utf-8")

    result = runner.invoke(app, ["run", str(script), "-f", str(config_file)])

    assert result.exit_code == 0
    assert "Executing : <<select name from t order by id>>" in result.output
    assert "alpha" in result.output
    assert "(2 rows)" in result.output
    assert list((tmp_path / "runs").glob("*.jsonl"))


def test_run_reads_stdin(config_file):
    result = runner.invoke(app, ["run", "-f", str(config_file), "-m", "s"], input="select * from t where id = 2;\n")

    assert result.exit_code == 0
    assert "INSERT INTO t(id, name) VALUES(2, 'beta');" in result.output


def test_run_stops_after_quit(tmp_path, config_file, db_file):
    first = tmp_path / "first.sql"
    first.write_text("delete from t where id = 1;\n\\q;\n", encoding="utf-8")
    second = tmp_path / "second.sql"
    second.write_text("delete from t;\n", encoding="utf-8")

    result = runner.invoke(app, ["run", str(first), str(second), "-f", str(config_file)])

    assert result.exit_code == 0
    with sqlite3.connect(str(db_file)) as conn:
        assert conn.execute("select count(*) from t").fetchone() == (1,)


def test_run_sql_error_is_reported_and_continues(config_file):
    result = runner.invoke(app, ["run", "-f", str(config_file)], input="bogus;\nselect 1 as one;\n")

    assert result.exit_code == 0
    assert "ERROR:" in result.output
    assert "(1 row)" in result.output


def test_run_debug_aborts(config_file):
    result = runner.invoke(app, ["run", "-f", str(config_file), "--debug"], input="bogus;\nselect 1 as one;\n")

    assert result.exit_code == 1
    assert "(1 row)" not in result.output


def test_run_unknown_connection(config_file):
    result = runner.invoke(app, ["run", "-f", str(config_file), "-c", "nope"], input="")

    assert result.exit_code == 1
    assert "not found" in result.output


def test_run_invalid_mode(config_file):
    result = runner.invoke(app, ["run", "-f", str(config_file), "-m", "x"], input="")

    assert result.exit_code == 1
    assert "invalid mode" in result.output


def test_run_missing_script(tmp_path, config_file):
    result = runner.invoke(app, ["run", str(tmp_path / "missing.sql"), "-f", str(config_file)])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_connections_lists_config(tmp_path):
    path = tmp_path / "c.toml"
    path.write_text(toml.dumps({
        "default_connection": "test",
        "connections": {"test": {"driver": "sqlite3", "url": ":memory:"}, "other": {"driver": "sqlite3", "url": "o.db"}},
    }), encoding="utf-8")

    result = runner.invoke(app, ["connections", "-f", str(path)])

    assert result.exit_code == 0
    assert "test *" in result.output
    assert "sqlite3" in result.output


def test_init_creates_config(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0
    assert (tmp_path / ".sqlrunner" / "config.toml").exists()


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert result.output.startswith("SQLRunner v")
