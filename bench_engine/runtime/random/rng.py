from __future__ import annotations

import hashlib
from typing import Optional

import numpy as np
from numpy.random import Generator


def resolve_seed(seed: Optional[int], *, fallback: int = 0) -> int:
    """Return a deterministic seed.

    Specs have an optional seed; when absent we still want repeatable
    partitions, hence a stable fallback.
    """
    return int(seed) if seed is not None else int(fallback)


class RngManager:
    """
    Single source of truth for randomness.
    Creates named, order-independent child seeds/streams by hashing:
      child_seed(name)       -> stable int seed
      child_generator(name)  -> np.random.Generator seeded from that int
    """
    def __init__(self, seed: int | None):
        self._root = 0 if seed is None else int(seed) & 0xFFFFFFFF

    def _mix(self, name: str) -> int:
        # Stable across runs, processes and Python versions
        h = hashlib.sha256(f"{self._root}:{name}".encode("utf-8")).digest()
        return int.from_bytes(h[:4], "little", signed=False)

    @property
    def root(self) -> int:
        return self._root

    def child_seed(self, name: str) -> int:
        return self._mix(name)

    def child_generator(self, name: str) -> Generator:
        return np.random.default_rng(self._mix(name))
