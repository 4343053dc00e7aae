"""Interactive console for Kestrel: one line in, one evaluation out."""

from __future__ import annotations

import sys
from typing import TextIO

from kestrel.errors import KestrelError
from kestrel.interpreter import evaluate, new_session_state
from kestrel.printer import to_string

PROMPT = ">> "


def start_repl(stdin: TextIO | None = None, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
    """Evaluate lines from stdin against one long-lived state until EOF or `exit`."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    state = new_session_state()

    while True:
        stdout.write(PROMPT)
        stdout.flush()
        raw = stdin.readline()
        if raw == "":
            stdout.write("\n")
            break
        line = raw.strip()
        if not line:
            continue
        if line == "exit":
            break

        try:
            result = evaluate(state, line, stdout)
        except (KestrelError, ZeroDivisionError, RecursionError) as e:
            # The line is abandoned; the session and its bindings live on
            print(f"Error: {e}", file=stderr)
            continue

        if result is not None:
            stdout.write(f"-> {to_string(result)}\n\n")
