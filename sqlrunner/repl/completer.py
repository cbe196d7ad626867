"""Tab completion for SQL keywords, script escapes and meta commands."""

from __future__ import annotations

import re
from typing import Dict, Iterator

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

_WORD = re.compile(r"[\w.:\\-]+")

KEYWORDS = (
    "SELECT FROM WHERE GROUP BY HAVING ORDER LIMIT INSERT INTO VALUES UPDATE SET "
    "DELETE CREATE DROP ALTER TABLE INDEX VIEW JOIN LEFT INNER ON AS AND OR NOT "
    "NULL IS IN LIKE DISTINCT COUNT COMMIT ROLLBACK"
).split()

ESCAPES: Dict[str, str] = {
    "\\mt;": "Text output",
    "\\mh;": "HTML output",
    "\\ms;": "SQL insert output",
    "\\o": "Redirect output: \\o<file>;",
    "\\q;": "Quit",
}

META_COMMANDS: Dict[str, str] = {
    ":help": "Show help",
    ":mode": "Set output mode",
    ":output": "Redirect output",
    ":run": "Run a script file",
    ":connect": "Reconnect",
    ":debug": "Toggle debug",
    ":status": "Show session",
    ":open": "Load a file",
    ":save": "Save the buffer",
    ":template": "Input templates",
    ":quit": "Exit",
}


class SqlCompleter(Completer):
    """Completes the word before the cursor, case-insensitively."""

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterator[Completion]:
        word = document.get_word_before_cursor(pattern=_WORD)
        if document.text_before_cursor.lstrip().startswith(":"):
            candidates = META_COMMANDS
        elif word.startswith("\\"):
            candidates = ESCAPES
        else:
            candidates = dict.fromkeys(KEYWORDS, "keyword")

        prefix = word.upper()
        for text, meta in candidates.items():
            if text.upper().startswith(prefix):
                yield Completion(text, start_position=-len(word), display_meta=meta)
