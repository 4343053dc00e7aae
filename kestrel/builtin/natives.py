"""Native builtins for the Kestrel runtime.

Every native takes the list of evaluated arguments and returns a pair
(result, emitted text or None). Natives never raise for bad input: the wrong
number or type of arguments yields Null, like the rest of the language.
"""
from __future__ import annotations

from kestrel import KestrelValue
from kestrel.printer import to_string
from kestrel.types import Builtin, Null, State


def _is_int(value: KestrelValue) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def len_builtin(args: list[KestrelValue]) -> tuple[KestrelValue, None]:
    """len(x) -> length of a string or array, else null."""
    if len(args) != 1:
        return Null, None
    x = args[0]
    if isinstance(x, (str, list)):
        return len(x), None
    return Null, None


def print_builtin(args: list[KestrelValue]) -> tuple[KestrelValue, str]:
    """Emit the printed forms of args back to back; returns null."""
    return Null, "".join(to_string(a) for a in args)


def println_builtin(args: list[KestrelValue]) -> tuple[KestrelValue, str]:
    """Emit each printed form followed by a newline; returns null."""
    return Null, "".join(to_string(a) + "\n" for a in args)


def insert_builtin(args: list[KestrelValue]) -> tuple[KestrelValue, None]:
    """Functional update; the original collection is left untouched.

    - insert(hash, key, value) -> copy of hash with printed(key) set to value
    - insert(array, i, value) -> copy of array with element i replaced, or
      value appended when i == len(array)
    """
    if len(args) != 3:
        return Null, None
    target, key, value = args
    if isinstance(target, dict):
        updated = dict(target)
        updated[to_string(key)] = value
        return updated, None
    if isinstance(target, list) and _is_int(key) and 0 <= key <= len(target):
        updated_list = list(target)
        if key == len(target):
            updated_list.append(value)
        else:
            updated_list[key] = value
        return updated_list, None
    return Null, None


NATIVES = {
    "len": len_builtin,
    "print": print_builtin,
    "println": println_builtin,
    "insert": insert_builtin,
}


def register(state: State) -> None:
    """Register all native builtins into the given state."""
    state.update({name: Builtin(name, fn) for name, fn in NATIVES.items()})
