from __future__ import annotations

"""Partition strategies on row *positions*.

Every function takes ``n`` (number of rows), the spec, a seeded generator and
optional strata (aligned with positions) and returns a list of
``(train_positions, test_positions)``. Mapping positions to row ids is done by
:func:`bench_engine.components.partitions.generate.generate`.
"""

from typing import Callable, List, Optional, Tuple

import numpy as np

from bench_engine.contracts.partition_configs import (
    BootstrapSpec,
    CVSpec,
    HoldoutSpec,
    LOOSpec,
    SubsamplingSpec,
    train_size,
)
from bench_engine.runtime.random.rng import RngManager

Pairs = List[Tuple[np.ndarray, np.ndarray]]
StrategyFn = Callable[..., Pairs]


def _strata_groups(n: int, strata: Optional[np.ndarray]) -> List[np.ndarray]:
    if strata is None:
        return [np.arange(n)]
    strata = np.asarray(strata)
    _, inverse = np.unique(strata.astype(str), return_inverse=True)
    return [np.flatnonzero(inverse == k) for k in range(int(inverse.max()) + 1)]


def _split_ratio(
    n: int,
    ratio: float,
    rng: np.random.Generator,
    strata: Optional[np.ndarray],
) -> Tuple[np.ndarray, np.ndarray]:
    train_parts = []
    test_parts = []
    for group in _strata_groups(n, strata):
        perm = rng.permutation(group)
        k = train_size(ratio, group.shape[0])
        train_parts.append(perm[:k])
        test_parts.append(perm[k:])
    return np.sort(np.concatenate(train_parts)), np.sort(np.concatenate(test_parts))


def holdout(n: int, spec: HoldoutSpec, rngm: RngManager, strata: Optional[np.ndarray] = None) -> Pairs:
    rng = rngm.child_generator("holdout")
    return [_split_ratio(n, spec.ratio, rng, strata)]


def subsampling(n: int, spec: SubsamplingSpec, rngm: RngManager, strata: Optional[np.ndarray] = None) -> Pairs:
    return [
        _split_ratio(n, spec.ratio, rngm.child_generator(f"subsampling/repeat{r}"), strata)
        for r in range(spec.repeats)
    ]


def _fold_ids(n: int, folds: int, rng: np.random.Generator, strata: Optional[np.ndarray]) -> np.ndarray:
    """Fold id per position.

    Positions are shuffled within each stratum, the strata are concatenated and
    fold ids are dealt round-robin, so fold sizes differ by at most one.
    """
    order = np.concatenate([rng.permutation(g) for g in _strata_groups(n, strata)])
    fold = np.empty(n, dtype=int)
    fold[order] = np.arange(n) % folds
    return fold


def cv(n: int, spec: CVSpec, rngm: RngManager, strata: Optional[np.ndarray] = None) -> Pairs:
    out: Pairs = []
    positions = np.arange(n)
    for r in range(spec.repeats):
        fold = _fold_ids(n, spec.folds, rngm.child_generator(f"cv/repeat{r}"), strata)
        for f in range(spec.folds):
            test = positions[fold == f]
            train = positions[fold != f]
            out.append((train, test))
    return out


def loo(n: int, spec: LOOSpec, rngm: RngManager, strata: Optional[np.ndarray] = None) -> Pairs:
    positions = np.arange(n)
    return [(np.delete(positions, i), positions[i : i + 1]) for i in range(n)]


def bootstrap(n: int, spec: BootstrapSpec, rngm: RngManager, strata: Optional[np.ndarray] = None) -> Pairs:
    """Train = ``ratio * n`` draws with replacement (duplicates kept, draw order), test = rows never drawn."""
    m = train_size(spec.ratio, n)
    out: Pairs = []
    for r in range(spec.repeats):
        rng = rngm.child_generator(f"bootstrap/repeat{r}")
        draw = rng.integers(0, n, size=m)
        test = np.setdiff1d(np.arange(n), draw, assume_unique=False)
        out.append((draw, test))
    return out
