from __future__ import annotations

"""Partitioning contract.

A partitioning is the *instantiated* form of a partition spec: an ordered
sequence of (train, test) row-id arrays bound to one task's row-id set. The
uninstantiated form is simply the spec itself.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from bench_engine.contracts.partition_configs import AnySpec


@dataclass(frozen=True, eq=False)
class Partitioning:
    spec: AnySpec
    train_sets: Tuple[np.ndarray, ...]
    test_sets: Tuple[np.ndarray, ...]
    # Hash of the row-id set this partitioning was generated from; None for custom.
    row_ids_hash: Optional[str] = None
    task_id: Optional[str] = None

    def __post_init__(self) -> None:
        for arr in (*self.train_sets, *self.test_sets):
            arr.setflags(write=False)

    @property
    def id(self) -> str:
        return self.spec.id

    @property
    def instantiated(self) -> bool:
        return True

    @property
    def iters(self) -> int:
        return len(self.train_sets)

    def _check_index(self, i: int) -> int:
        if not 1 <= int(i) <= self.iters:
            raise IndexError(f"iteration {i} out of range 1..{self.iters}")
        return int(i) - 1

    def train_set(self, i: int) -> np.ndarray:
        """Train row ids of iteration ``i`` (1-based)."""
        return self.train_sets[self._check_index(i)]

    def test_set(self, i: int) -> np.ndarray:
        """Test row ids of iteration ``i`` (1-based)."""
        return self.test_sets[self._check_index(i)]

    def pairs(self) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
        for i, (tr, te) in enumerate(zip(self.train_sets, self.test_sets), start=1):
            yield i, tr, te

    def same_splits(self, other: "Partitioning") -> bool:
        if self.iters != other.iters:
            return False
        return all(
            np.array_equal(a, b)
            for a, b in zip(self.train_sets + self.test_sets, other.train_sets + other.test_sets)
        )

    def __repr__(self) -> str:
        return f"<Partitioning {self.id} iters={self.iters} task={self.task_id!r}>"
