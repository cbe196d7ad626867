import io

from sqlrunner.engine.sink import OutputSink


def test_writes_go_to_default_stream():
    default = io.StringIO()
    sink = OutputSink(default)
    sink.write("a")
    sink.write_line("b")
    sink.write_line()
    assert default.getvalue() == "ab\n\n"
    assert sink.path is None


def test_redirect_truncates_and_reset_closes(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("old content\n", encoding="utf-8")
    default = io.StringIO()
    sink = OutputSink(default)

    assert sink.redirect(target) == target.resolve()
    sink.write_line("new")
    handle = sink.stream
    sink.reset()

    assert handle.closed
    assert target.read_text(encoding="utf-8") == "new\n"
    assert sink.stream is default


def test_close_is_idempotent_and_keeps_default_open(tmp_path):
    default = io.StringIO()
    sink = OutputSink(default)
    sink.redirect(tmp_path / "x.txt")
    handle = sink.stream
    sink.close()
    sink.close()
    assert sink.closed
    assert handle.closed
    assert not default.closed
