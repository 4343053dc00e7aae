"""Runtime state for Kestrel.

A State is a single flat mapping from identifier names to evaluated values.
There is no chain of scopes: a function call copies the caller's whole State
and overlays the parameters on the copy.
"""

from __future__ import annotations

from io import StringIO
from typing import Iterator, Mapping

from kestrel import KestrelValue
from kestrel.types.null import Null


class State:
    """Flat mapping from names to Kestrel values."""

    __slots__ = ("vars",)

    def __init__(self, bindings: Mapping[str, KestrelValue] | None = None):
        self.vars: dict[str, KestrelValue] = dict(bindings) if bindings else {}

    def define(self, name: str, value: KestrelValue) -> None:
        """Bind `name` to `value`, replacing any previous binding."""
        self.vars[name] = value

    def lookup(self, name: str) -> KestrelValue:
        """Return the value bound to `name`, or Null when unbound."""
        return self.vars.get(name, Null)

    def update(self, mapping: Mapping[str, KestrelValue]) -> None:
        """Bulk-define a mapping of name -> value (used for pre-seeding)."""
        for k, v in mapping.items():
            if not isinstance(k, str):
                raise TypeError(f"Cannot bind {k!r}: names must be strings")
            self.vars[k] = v

    def copy(self) -> State:
        """A new invocation frame holding every binding of this one."""
        frame = State.__new__(State)
        frame.vars = self.vars.copy()
        return frame

    def __contains__(self, name: object) -> bool:
        return name in self.vars

    def __iter__(self) -> Iterator[str]:
        return iter(self.vars)

    def __len__(self) -> int:
        return len(self.vars)

    def _write_vars(self, buffer: StringIO) -> None:
        """Write the bindings into the buffer in a compact form."""
        from kestrel.printer import to_string

        buffer.write("{")
        first = True
        for k, v in self.vars.items():
            if not first:
                buffer.write(", ")
            buffer.write(f"{k}: {to_string(v)}")
            first = False
        buffer.write("}")

    def __str__(self) -> str:
        with StringIO() as buffer:
            self._write_vars(buffer)
            return buffer.getvalue()

    def __repr__(self) -> str:
        with StringIO() as buffer:
            buffer.write("<State ")
            self._write_vars(buffer)
            buffer.write(">")
            return buffer.getvalue()
