from kestrel.types.null import Null, NullType
from kestrel.types.return_value import ReturnValue, unwrap
from kestrel.types.function import Function, Builtin
from kestrel.types.state import State

__all__ = ["Null", "NullType", "ReturnValue", "unwrap", "Function", "Builtin", "State"]
