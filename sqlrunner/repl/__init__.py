"""Interactive SQLRunner REPL.

prompt_toolkit is only imported once the REPL actually starts, so the
batch ``run`` command works without a terminal.
"""


def start_repl(config_file=None, connection_name=None, output_mode=None) -> None:
    from .app import start_repl as _start

    _start(config_file, connection_name, output_mode)


__all__ = ["start_repl"]
