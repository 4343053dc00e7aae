# Core type aliases for Kestrel's data model.
# Runtime values are plain Python objects (int, bool, str, list, dict) plus a
# handful of runtime types (Function, Builtin, ReturnValue, Null) defined in
# kestrel.types. The alias below documents intent in annotations only.

from typing import Any, Callable, Optional

__version__ = "0.3.0"

# Runtime value alias
KestrelValue = Any

# Native routine: evaluated arguments -> (result value, emitted text or None)
NativeFn = Callable[[list[KestrelValue]], tuple[KestrelValue, Optional[str]]]
