"""Printed form of Kestrel values.

The printed form is what `print`/`println` emit, what string `+` appends, and
what a hash stores as the key of an entry.
"""

from __future__ import annotations

from kestrel import KestrelValue
from kestrel.types import Builtin, Function, NullType, ReturnValue


def to_string(value: KestrelValue) -> str:
    """Convert a Kestrel value to its printed form."""
    match value:
        case bool():
            return "true" if value else "false"
        case int():
            return str(value)
        case str():
            return value
        case list():
            return "[" + ", ".join(to_string(v) for v in value) + "]"
        case dict():
            return "{" + ", ".join(f"{k}: {to_string(v)}" for k, v in value.items()) + "}"
        case Function() | Builtin():
            return str(value)
        case ReturnValue():
            return to_string(value.value)
        case NullType():
            return "null"
    raise TypeError(f"Not a Kestrel value: {value!r}")
