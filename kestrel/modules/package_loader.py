from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Protocol

from kestrel.config import PRELUDE_MODULES, get_prelude_root

logger = logging.getLogger(__name__)


class _HasEvalPrelude(Protocol):
    def eval_prelude(self, code: str) -> None: ...


# Map a dotted namespace to a .ks file underneath the prelude root

def _ns_to_relpath(namespace: str) -> Path:
    return Path(*namespace.split('.')).with_suffix('.ks')


def resolve_namespace(namespace: str) -> Optional[Path]:
    candidate = get_prelude_root() / _ns_to_relpath(namespace)
    return candidate if candidate.is_file() else None


def load_namespace(itp: _HasEvalPrelude, namespace: str) -> None:
    p = resolve_namespace(namespace)
    if p is None:
        raise FileNotFoundError(f"Cannot find prelude module '{namespace}' under {get_prelude_root()}")
    logger.debug("Loading prelude module %s from %s", namespace, p)
    itp.eval_prelude(p.read_text(encoding='utf-8'))


def load_prelude(itp: _HasEvalPrelude) -> None:
    """Evaluate every standard library module, in order, into the session."""
    for namespace in PRELUDE_MODULES:
        load_namespace(itp, namespace)
