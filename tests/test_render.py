import io
import sqlite3
from datetime import date, datetime
from decimal import Decimal

import pytest

from sqlrunner.engine.render import (
    HtmlRenderer,
    OutputMode,
    SqlRenderer,
    TextRenderer,
    get_renderer,
)
from sqlrunner.engine.rowset import RowSet, table_name_from_statement
from sqlrunner.engine.sink import OutputSink


@pytest.fixture
def people():
    conn = sqlite3.connect(":memory:")
    conn.execute('CREATE TABLE people (id INTEGER, name TEXT, "first name" TEXT)')
    conn.executemany(
        "INSERT INTO people VALUES (?, ?, ?)",
        [(1, "O'Brien", None), (2, "", "<b>Ann</b>")],
    )
    yield conn
    conn.close()


def rows_of(conn, sql):
    cursor = conn.execute(sql)
    return RowSet(cursor, sql)


def render(renderer, rows):
    buffer = io.StringIO()
    renderer.render_rows(rows, OutputSink(buffer))
    return buffer.getvalue().splitlines()


def test_output_mode_parse():
    assert OutputMode.parse("t") is OutputMode.TEXT
    assert OutputMode.parse("HTML") is OutputMode.HTML
    assert OutputMode.parse("sql") is OutputMode.SQL
    assert OutputMode.parse(OutputMode.SQL) is OutputMode.SQL
    for bad in ("", "x", "tx", " h", None):
        with pytest.raises(ValueError, match="must be t, h or s"):
            OutputMode.parse(bad)


def test_get_renderer():
    assert isinstance(get_renderer("t"), TextRenderer)
    assert isinstance(get_renderer(OutputMode.HTML), HtmlRenderer)
    assert isinstance(get_renderer("s"), SqlRenderer)


def test_table_name_from_statement():
    assert table_name_from_statement("select * from people where id = 1") == "people"
    assert table_name_from_statement("SELECT a FROM main.people") == "main.people"
    assert table_name_from_statement('select * from "odd name"') == '"odd name"'
    assert table_name_from_statement("select 1") == "table"


def test_text_rows(people):
    lines = render(TextRenderer(), rows_of(people, "select id, name, \"first name\" from people"))
    assert lines[0] == "id | name | first name"
    assert set(lines[1]) == {"-"}
    assert lines[2] == "1 | O'Brien | (null)"
    assert lines[3] == "2 |  | <b>Ann</b>"
    assert lines[4] == "(2 rows)"


def test_text_update():
    buffer = io.StringIO()
    TextRenderer().render_update(1, OutputSink(buffer))
    TextRenderer().render_update(3, OutputSink(buffer))
    assert buffer.getvalue().splitlines() == ["1 row affected", "3 rows affected"]


def test_html_rows_are_escaped(people):
    lines = render(HtmlRenderer(), rows_of(people, "select * from people"))
    assert lines[0] == '<table border="1">'
    assert lines[1] == "<tr><th>id</th><th>name</th><th>first name</th></tr>"
    assert lines[2] == "<tr><td>1</td><td>O&#x27;Brien</td><td><i>(null)</i></td></tr>"
    assert lines[3] == "<tr><td>2</td><td></td><td>&lt;b&gt;Ann&lt;/b&gt;</td></tr>"
    assert lines[-1] == "</table>"


def test_html_update_and_note():
    buffer = io.StringIO()
    HtmlRenderer().render_update(2, OutputSink(buffer))
    HtmlRenderer().render_note("Executing : <<select 1>>", OutputSink(buffer))
    assert buffer.getvalue().splitlines() == [
        "<p>2 rows affected</p>",
        "<p>Executing : &lt;&lt;select 1&gt;&gt;</p>",
    ]


def test_sql_rows(people):
    lines = render(SqlRenderer(), rows_of(people, "select * from people"))
    assert lines == [
        "INSERT INTO people(id, name, \"first name\") VALUES(1, 'O''Brien', NULL);",
        "INSERT INTO people(id, name, \"first name\") VALUES(2, '', '<b>Ann</b>');",
    ]


def test_sql_value_formatting():
    fmt = SqlRenderer().format_value
    assert fmt(None) == "NULL"
    assert fmt(True) == "1"
    assert fmt(42) == "42"
    assert fmt(1.5) == "1.5"
    assert fmt(Decimal("9.99")) == "9.99"
    assert fmt(b"\x00\xff") == "X'00FF'"
    assert fmt("it's") == "'it''s'"
    assert fmt(date(2024, 2, 29)) == "'2024-02-29'"
    assert fmt(datetime(2024, 2, 29, 13, 5)) == "'2024-02-29 13:05:00'"


def test_sql_non_finite_floats_replay(people):
    fmt = SqlRenderer().format_value
    assert fmt(float("nan")) == "NULL"
    assert fmt(Decimal("-Infinity")) == "-9e999"

    people.execute("create table f (x real)")
    for value in (float("inf"), float("-inf"), float("nan")):
        people.execute(f"insert into f(x) values({fmt(value)})")
    assert [row[0] for row in people.execute("select x from f order by rowid")] == [float("inf"), float("-inf"), None]


def test_sql_update_and_notes_are_comments():
    buffer = io.StringIO()
    SqlRenderer().render_update(0, OutputSink(buffer))
    SqlRenderer().render_note("ERROR: bad\nsecond line", OutputSink(buffer))
    assert buffer.getvalue().splitlines() == ["-- 0 rows affected", "-- ERROR: bad", "-- second line"]


@pytest.mark.parametrize("renderer", [TextRenderer(), HtmlRenderer(), SqlRenderer()])
def test_renderers_drain_the_row_set(people, renderer):
    rows = rows_of(people, "select * from people")
    render(renderer, rows)
    assert rows.exhausted
    assert rows.row_count == 2


def test_null_is_distinct_from_empty_string():
    text, html_r, sql = TextRenderer(), HtmlRenderer(), SqlRenderer()
    assert text.format_value(None) != text.format_value("")
    assert html_r.format_value(None) != html_r.format_value("")
    assert sql.format_value(None) != sql.format_value("")


def test_renderer_writes_to_the_sink_it_is_given(people):
    first, second = io.StringIO(), io.StringIO()
    renderer = TextRenderer()
    renderer.render_update(1, OutputSink(first))
    renderer.render_update(2, OutputSink(second))
    assert first.getvalue() == "1 row affected\n"
    assert second.getvalue() == "2 rows affected\n"
