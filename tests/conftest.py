import io
import sys

import pytest

from kestrel.interpreter import evaluate, new_session_state

# Shared fixtures. `run` evaluates a program in a fresh session and returns
# (value, emitted output); `session` keeps one state for several evaluations.


@pytest.fixture
def session():
    return new_session_state()


@pytest.fixture
def run():
    def _run(source: str, state=None):
        out = io.StringIO()
        value = evaluate(state if state is not None else new_session_state(), source, out)
        return value, out.getvalue()
    return _run


@pytest.fixture
def value_of(run):
    """Evaluate a program and return only its value."""
    return lambda source, state=None: run(source, state)[0]


@pytest.fixture
def shallow_recursion(monkeypatch):
    """Run with a small recursion limit so that runaway programs fail fast."""
    monkeypatch.setenv("KESTREL_RECURSION_LIMIT", "0")
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(1500)
    yield
    sys.setrecursionlimit(limit)
