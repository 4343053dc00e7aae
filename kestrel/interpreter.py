from __future__ import annotations

import sys
from typing import Literal, Mapping, TextIO

from kestrel import KestrelValue
from kestrel.config import apply_recursion_limit
from kestrel.reader.parser import parse
from kestrel.evaluation.evaluator import evaluate_program
from kestrel.types.state import State
from kestrel.builtin.natives import register


def evaluate(state: State, source: str, out: TextIO | None = None) -> KestrelValue | None:
    """Parse and run `source` against `state`.

    Returns the value of the last top-level statement, or None when it
    produced none (e.g. a trailing `let`). Text emitted by builtins is written
    to `out` (stdout by default). Syntax errors and division by zero raise.
    """
    program = parse(source)
    return evaluate_program(program, state, sys.stdout if out is None else out)


class _Bootstrap:
    """Feeds prelude modules into a bare state."""

    def __init__(self, state: State):
        self.state = state

    def eval_prelude(self, code: str) -> None:
        evaluate(self.state, code)


def new_session_state(
    prelude: bool = True, bindings: Mapping[str, KestrelValue] | None = None
) -> State:
    """A fresh State seeded with the native builtins and the standard library.

    `bindings` are defined last, on top of everything else.
    """
    apply_recursion_limit()
    state = State()
    register(state)
    if prelude:
        # Lazy import to avoid circular imports
        from kestrel.modules.package_loader import load_prelude
        load_prelude(_Bootstrap(state))
    if bindings:
        state.update(bindings)
    return state


class Interpreter:
    """
    Keeps one session state alive across calls, so definitions made by one
    `eval` are visible to the next.
    """

    def __init__(
        self,
        prelude: str | None | Literal["auto"] = "auto",
        out: TextIO | None = None,
    ):
        self.out: TextIO | None = out
        self.state: State = new_session_state(prelude=prelude == "auto")
        if prelude and prelude != "auto":
            self.eval_prelude(prelude)

    def eval_prelude(self, code: str) -> None:
        evaluate(self.state, code, self.out)

    def eval(self, code: str) -> KestrelValue | None:
        return evaluate(self.state, code, self.out)
