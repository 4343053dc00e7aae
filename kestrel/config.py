from __future__ import annotations
import os
import sys
from pathlib import Path
from typing import Iterable, List


def _sep() -> str:
    return ';' if os.name == 'nt' else ':'


# Resolve installation dir (kestrel package directory)
_KESTREL_DIR = Path(__file__).resolve().parent

# Defaults
_DEFAULT_PRELUDE_DIR = _KESTREL_DIR / 'prelude'
_DEFAULT_INDEX = 'index.ksp'
_DEFAULT_TEMPLATE_EXT = '.ksp'
_DEFAULT_WORKERS = 4
_DEFAULT_STACK_SIZE = 64 * 1024 * 1024
_DEFAULT_RECURSION_LIMIT = 20000

# Standard library modules, evaluated in this order into every session
PRELUDE_MODULES = ('std.core', 'std.iter')


def paths_from_env(var: str, defaults: Iterable[Path]) -> List[Path]:
    raw = os.environ.get(var)
    if not raw:
        return [Path(p) for p in defaults]
    sep = _sep()
    return [Path(p.strip()) for p in raw.split(sep) if p.strip()]


def int_from_env(var: str, default: int) -> int:
    raw = os.environ.get(var, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{var} must be an integer, got {raw!r}") from None


def get_prelude_root() -> Path:
    roots = paths_from_env('KESTREL_PRELUDE_PATH', [_DEFAULT_PRELUDE_DIR])
    # treat as single directory; if a file path is set, return its parent
    p = roots[0]
    return p if p.is_dir() else p.parent


def get_public_root() -> Path:
    return paths_from_env('KESTREL_PUBLIC_ROOT', [Path.cwd() / 'public'])[0]


def get_index_file() -> str:
    return os.environ.get('KESTREL_INDEX') or _DEFAULT_INDEX


def get_template_extension() -> str:
    ext = os.environ.get('KESTREL_TEMPLATE_EXT') or _DEFAULT_TEMPLATE_EXT
    return ext if ext.startswith('.') else '.' + ext


def get_worker_count() -> int:
    return max(1, int_from_env('KESTREL_WORKERS', _DEFAULT_WORKERS))


def get_stack_size() -> int:
    return int_from_env('KESTREL_STACK_SIZE', _DEFAULT_STACK_SIZE)


def get_recursion_limit() -> int:
    return int_from_env('KESTREL_RECURSION_LIMIT', _DEFAULT_RECURSION_LIMIT)


def apply_recursion_limit() -> None:
    """Raise the interpreter recursion limit to the configured value (never lower it)."""
    limit = get_recursion_limit()
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)
