from kestrel import KestrelValue


class ReturnValue:
    """Sentinel wrapping a value whose `return` is still in flight.

    Blocks stop when they see one; call boundaries strip it.
    """

    __slots__ = ("value",)

    def __init__(self, value: KestrelValue):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, ReturnValue) and self.value == other.value

    def __repr__(self):
        return f"ReturnValue({self.value!r})"


def unwrap(value: KestrelValue) -> KestrelValue:
    """Strip a pending return, if any."""
    return value.value if isinstance(value, ReturnValue) else value
