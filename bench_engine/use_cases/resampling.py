from __future__ import annotations

"""Resampling orchestration (Engine use-case).

Runs one learner over every train/test pair of a partitioning. Iterations
are independent: a failing fit or predict is recorded on its iteration and
the others continue. Configuration problems are raised before any unit is
dispatched.
"""

import logging
from typing import Any, Optional, Sequence, Tuple

from bench_engine.components.execution.design import PartitionArg, check_setup
from bench_engine.components.execution.iteration import IterationResult, cancelled_iteration, run_iteration
from bench_engine.components.execution.parallel import run_units
from bench_engine.components.learners.base import Learner
from bench_engine.components.measures.measure import Measure
from bench_engine.components.partitions import resolve_partitioning
from bench_engine.contracts.execution_configs import ExecutionOptions
from bench_engine.core.cancellation import CancellationToken, resolve_token
from bench_engine.core.progress import ProgressCallback, wrap_progress
from bench_engine.data.task import Task
from bench_engine.results.resample_result import ResampleResult

logger = logging.getLogger(__name__)


def _run_unit(learner, task, train_ids, test_ids, iteration, measures, retain_model) -> IterationResult:
    return run_iteration(
        learner,
        task,
        train_ids,
        test_ids,
        iteration=iteration,
        measures=measures,
        retain_model=retain_model,
    )


def _cancel_unit(unit: Sequence[Any], reason: str) -> IterationResult:
    learner, task, train_ids, test_ids, iteration, measures, _ = unit
    return cancelled_iteration(
        iteration,
        len(train_ids),
        len(test_ids),
        reason=reason,
        task_id=task.id,
        learner_id=learner.id,
        measures=measures,
    )


def resample(
    task: Task,
    learner: Learner,
    partitioning: PartitionArg,
    options: Optional[ExecutionOptions] = None,
    *,
    measures: Sequence[Measure] = (),
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
) -> ResampleResult:
    """Fit and predict ``learner`` on every pair of ``partitioning``.

    ``partitioning`` may be a spec (instantiated on ``task`` here) or an
    instantiated :class:`Partitioning`, which must belong to ``task``'s rows.
    """
    opts = options or ExecutionOptions()
    ms: Tuple[Measure, ...] = tuple(measures)

    # --- Checks ------------------------------------------------------------
    check_setup(task, learner, ms)
    part = resolve_partitioning(task, partitioning)

    # --- Dispatch ----------------------------------------------------------
    units = [(learner, task, tr, te, i, ms, opts.retain_models) for i, tr, te in part.pairs()]
    logger.info(
        "resample %s on %s (%d rows) with %s: %d iterations",
        learner.id,
        task.id,
        task.nrow,
        part.id,
        part.iters,
    )
    iterations = run_units(
        _run_unit,
        units,
        n_jobs=opts.resolved_n_jobs(),
        backend=opts.resolved_backend(),
        cancel=resolve_token(cancel, opts.timeout),
        on_cancel=_cancel_unit,
        progress=wrap_progress(progress),
        label=f"resample {learner.id}",
    )

    result = ResampleResult(
        task=task,
        learner=learner,
        partitioning=part,
        iterations=tuple(iterations),
        measures=ms,
    )
    logger.info("resample %s on %s done: %d errors", learner.id, task.id, result.n_errors)
    return result


__all__ = ["resample"]
