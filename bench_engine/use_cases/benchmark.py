from __future__ import annotations

"""Benchmark orchestration (Engine use-case).

A benchmark is a list of design rows (task, learner, partitioning, measures).
All rows are validated before anything runs; then every train/test pair of
every row becomes one dispatch unit, so a worker pool is kept busy across row
boundaries. Results are regrouped per row in design order.
"""

import logging
from dataclasses import replace
from typing import Any, List, Optional, Sequence, Union

from pydantic import BaseModel

from bench_engine.components.execution.design import DesignRow, PartitionArg, check_setup
from bench_engine.components.execution.iteration import IterationResult
from bench_engine.components.execution.parallel import run_units
from bench_engine.components.learners.base import Learner
from bench_engine.components.measures.measure import Measure
from bench_engine.components.partitions import instantiate, resolve_partitioning
from bench_engine.components.partitions.types import Partitioning
from bench_engine.contracts.execution_configs import ExecutionOptions
from bench_engine.core.cancellation import CancellationToken, resolve_token
from bench_engine.core.progress import ProgressCallback, wrap_progress
from bench_engine.data.task import Task
from bench_engine.errors import ConfigurationError
from bench_engine.results.benchmark_result import BenchmarkResult
from bench_engine.results.resample_result import ResampleResult
from bench_engine.use_cases.resampling import _cancel_unit, _run_unit

logger = logging.getLogger(__name__)


def _as_list(x: Any, kind: Any) -> List[Any]:
    if isinstance(x, kind):
        return [x]
    return list(x)


def expand_grid(
    tasks: Union[Task, Sequence[Task]],
    learners: Union[Learner, Sequence[Learner]],
    resamplings: Union[PartitionArg, Sequence[PartitionArg]],
    measures: Union[Measure, Sequence[Measure]] = (),
) -> List[DesignRow]:
    """Full cross product, task-major, then resampling, then learner.

    Each spec is instantiated once per task and the resulting partitioning is
    shared by every learner paired with it, so all learners see identical
    splits. Already instantiated partitionings are used as given.
    """
    task_list = _as_list(tasks, Task)
    learner_list = _as_list(learners, Learner)
    rsmp_list = _as_list(resamplings, (Partitioning, BaseModel))
    ms = tuple(_as_list(measures, Measure))
    if not task_list or not learner_list or not rsmp_list:
        raise ConfigurationError("expand_grid needs at least one task, learner and resampling")

    design: List[DesignRow] = []
    for task in task_list:
        for r in rsmp_list:
            part = r if isinstance(r, Partitioning) else instantiate(task, r)
            for learner in learner_list:
                design.append(DesignRow(task=task, learner=learner, partitioning=part, measures=ms))
    return design


def _validate(design: Sequence[DesignRow]) -> List[Partitioning]:
    parts: List[Partitioning] = []
    for nr, row in enumerate(design, start=1):
        if not isinstance(row, DesignRow):
            raise ConfigurationError(f"design row {nr}: expected a DesignRow, got {type(row).__name__}")
        try:
            check_setup(row.task, row.learner, row.measures)
            parts.append(resolve_partitioning(row.task, row.partitioning))
        except ConfigurationError as e:
            raise ConfigurationError(f"design row {nr}: {e}") from e
    return parts


def benchmark(
    design: Sequence[DesignRow],
    options: Optional[ExecutionOptions] = None,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
) -> BenchmarkResult:
    """Execute every design row; repeated rows are executed again."""
    opts = options or ExecutionOptions()
    design = list(design)
    if not design:
        raise ConfigurationError("empty benchmark design")

    # --- Checks (fail fast, before any unit runs) --------------------------
    parts = _validate(design)

    # --- Flatten rows into units -------------------------------------------
    units = []
    for row, part in zip(design, parts):
        for i, tr, te in part.pairs():
            units.append((row.learner, row.task, tr, te, i, row.measures, opts.retain_models))
    logger.info(
        "benchmark: %d design rows, %d iterations, n_jobs=%d",
        len(design),
        len(units),
        opts.resolved_n_jobs(),
    )

    iterations: List[IterationResult] = run_units(
        _run_unit,
        units,
        n_jobs=opts.resolved_n_jobs(),
        backend=opts.resolved_backend(),
        cancel=resolve_token(cancel, opts.timeout),
        on_cancel=_cancel_unit,
        progress=wrap_progress(progress),
        label="benchmark",
    )

    # --- Regroup by row ----------------------------------------------------
    entries = []
    pos = 0
    for row, part in zip(design, parts):
        its = tuple(iterations[pos : pos + part.iters])
        pos += part.iters
        rr = ResampleResult(
            task=row.task,
            learner=row.learner,
            partitioning=part,
            iterations=its,
            measures=tuple(row.measures),
        )
        entries.append((replace(row, partitioning=part), rr))

    result = BenchmarkResult(entries=tuple(entries))
    logger.info("benchmark done: %d failed iterations", result.n_errors)
    return result


__all__ = ["expand_grid", "benchmark"]
