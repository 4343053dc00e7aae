"""Function values: user-defined functions and native builtins."""

from __future__ import annotations

from io import StringIO

from kestrel import KestrelValue, NativeFn
from kestrel.ast import Statement


class Function:
    """A user function: formal parameters and a body, nothing captured.

    Calls evaluate the body in a copy of the *caller's* state, so there is no
    definition-time environment to keep here.
    """

    __slots__ = ("parameters", "body")

    def __init__(self, parameters: tuple[str, ...], body: Statement):
        self.parameters: tuple[str, ...] = tuple(parameters)
        self.body: Statement = body

    def __eq__(self, other):
        return (
            isinstance(other, Function)
            and self.parameters == other.parameters
            and self.body == other.body
        )

    def __hash__(self):
        return hash((self.parameters, self.body))

    def __str__(self) -> str:
        with StringIO() as buffer:
            buffer.write("fn(")
            buffer.write(", ".join(self.parameters))
            buffer.write(")")
            return buffer.getvalue()

    def __repr__(self) -> str:
        return f"<Function {self} {self.body}>"


class Builtin:
    """A native routine exposed under `name`."""

    __slots__ = ("name", "fn")

    def __init__(self, name: str, fn: NativeFn):
        self.name = name
        self.fn = fn

    def __call__(self, args: list[KestrelValue]) -> tuple[KestrelValue, str | None]:
        return self.fn(args)

    def __str__(self) -> str:
        return f"builtin({self.name})"

    def __repr__(self) -> str:
        return f"<Builtin {self.name}>"
