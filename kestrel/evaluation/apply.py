"""Application engine for Kestrel.

Call semantics:
- A Function runs in a copy of the *caller's* state (not a captured
  environment), with its parameters overlaid in order. Extra actuals are
  ignored and never evaluated; missing ones leave the name as the caller had
  it. The body's pending return, if any, is stripped here.
- A Builtin receives the actuals evaluated in the caller's state. Whatever
  text it emits goes to the output sink.
- Calling anything else yields Null without evaluating the arguments.
"""

from __future__ import annotations

from typing import Sequence, TextIO

from kestrel import KestrelValue
from kestrel import ast
from kestrel.evaluation import evaluator
from kestrel.types import Builtin, Function, Null, State, unwrap


def apply_function(
    fn: Function, arguments: Sequence[ast.Expression], state: State, out: TextIO
) -> KestrelValue:
    frame = state.copy()
    for name, arg in zip(fn.parameters, arguments):
        frame.define(name, unwrap(evaluator.evaluate_expression(arg, state, out)))
    result = evaluator.evaluate_statement(fn.body, frame, out)
    return Null if result is None else unwrap(result)


def apply_builtin(
    fn: Builtin, arguments: Sequence[ast.Expression], state: State, out: TextIO
) -> KestrelValue:
    args = [unwrap(evaluator.evaluate_expression(arg, state, out)) for arg in arguments]
    result, emitted = fn(args)
    if emitted:
        out.write(emitted)
    return result


def apply(
    head: KestrelValue, arguments: Sequence[ast.Expression], state: State, out: TextIO
) -> KestrelValue:
    """Apply either a Function or a Builtin; anything else is Null."""
    if isinstance(head, Function):
        return apply_function(head, arguments, state, out)
    elif isinstance(head, Builtin):
        return apply_builtin(head, arguments, state, out)
    return Null
