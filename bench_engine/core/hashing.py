from __future__ import annotations

import hashlib
from typing import Any, Iterable


def stable_hash(parts: Iterable[Any]) -> str:
    """SHA-256 over the ``repr`` of each part; stable across runs and processes."""
    h = hashlib.sha256()
    for p in parts:
        h.update(repr(p).encode("utf-8"))
        h.update(b"\x1f")
    return h.hexdigest()[:16]
