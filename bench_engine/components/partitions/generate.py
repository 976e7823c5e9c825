from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from bench_engine.contracts.partition_configs import AnySpec, CustomSpec
from bench_engine.core.hashing import stable_hash
from bench_engine.errors import ConfigurationError
from bench_engine.registries.partitions import get_strategy
from bench_engine.runtime.random.rng import RngManager, resolve_seed

from .types import Partitioning

logger = logging.getLogger(__name__)


def row_ids_hash(row_ids: Sequence) -> str:
    return stable_hash(["rows", tuple(np.asarray(row_ids).tolist())])


def _custom(spec: CustomSpec) -> Partitioning:
    spec.check_params()
    train = tuple(np.asarray(s) for s in spec.train_sets)
    test = tuple(np.asarray(s) for s in spec.test_sets)
    return Partitioning(spec=spec, train_sets=train, test_sets=test, row_ids_hash=None)


def generate(
    row_ids: Sequence,
    spec: AnySpec,
    *,
    strata: Optional[Sequence] = None,
    task_id: Optional[str] = None,
) -> Partitioning:
    """Generate the train/test pairs of ``spec`` over ``row_ids``.

    Pure and deterministic: the same (row_ids, spec) always yields identical
    arrays. ``strata`` (aligned with ``row_ids``) is required when the spec asks
    for stratification and ignored otherwise.
    """
    if isinstance(spec, CustomSpec):
        return _custom(spec)

    spec.check_params()
    ids = np.asarray(row_ids)
    if ids.ndim != 1:
        raise ConfigurationError(f"row_ids must be 1D; got shape {ids.shape}")
    if not pd.Index(ids).is_unique:
        raise ConfigurationError("row_ids must be unique")
    n = int(ids.shape[0])
    spec.check_rows(n)

    strata_arr = None
    if getattr(spec, "stratify", False):
        if strata is None:
            raise ConfigurationError(f"{spec.id}: stratify=True needs strata (a classification task)")
        strata_arr = np.asarray(strata)
        if strata_arr.shape[0] != n:
            raise ConfigurationError(f"strata length {strata_arr.shape[0]} != {n} rows")

    rngm = RngManager(resolve_seed(spec.seed))
    pairs = get_strategy(spec.strategy)(n, spec, rngm, strata_arr)

    train_sets = tuple(ids[tr] for tr, _ in pairs)
    test_sets = tuple(ids[te] for _, te in pairs)
    logger.debug("generated %s: %d iterations over %d rows", spec.id, len(pairs), n)
    return Partitioning(
        spec=spec,
        train_sets=train_sets,
        test_sets=test_sets,
        row_ids_hash=row_ids_hash(ids),
        task_id=task_id,
    )


def instantiate(task, spec: AnySpec) -> Partitioning:
    """Instantiate ``spec`` on the ``use`` rows of ``task``."""
    strata = task.strata() if getattr(spec, "stratify", False) else None
    part = generate(task.row_ids, spec, strata=strata, task_id=task.id)
    if isinstance(spec, CustomSpec):
        check_partitioning(task, part)
        return Partitioning(
            spec=part.spec,
            train_sets=part.train_sets,
            test_sets=part.test_sets,
            row_ids_hash=None,
            task_id=task.id,
        )
    return part


def check_partitioning(task, part: Partitioning) -> None:
    """Raise ConfigurationError if ``part`` was not generated for ``task``'s rows."""
    if part.row_ids_hash is None:
        ids = np.concatenate([*part.train_sets, *part.test_sets]) if part.iters else np.array([])
        if ids.size and not task.backend.has_rows(ids):
            raise ConfigurationError(
                f"custom partitioning references row ids unknown to task {task.id!r}"
            )
        return
    if part.row_ids_hash != row_ids_hash(task.row_ids):
        raise ConfigurationError(
            f"partitioning {part.id!r} was instantiated on different rows than task {task.id!r}"
        )


def resolve_partitioning(task, partitioning) -> Partitioning:
    """Accept a spec (instantiated here) or an instantiated partitioning (checked)."""
    if isinstance(partitioning, Partitioning):
        check_partitioning(task, partitioning)
        return partitioning
    return instantiate(task, partitioning)
