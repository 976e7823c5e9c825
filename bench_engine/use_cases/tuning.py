"""Tuning use-case (hyperparameter search over a resampling).

Every batch of proposed configurations is run as one benchmark design over a
single inner partitioning, instantiated once and shared by all candidates so
their scores are comparable. The terminator is consulted between batches.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bench_engine.components.execution.design import DesignRow, PartitionArg, check_setup
from bench_engine.components.learners.base import Learner
from bench_engine.components.learners.params import ParamSet
from bench_engine.components.measures.measure import Measure
from bench_engine.components.partitions import resolve_partitioning
from bench_engine.components.partitions.types import Partitioning
from bench_engine.components.tuning.archive import ArchiveEntry, TuningArchive
from bench_engine.components.tuning.terminators import make_terminator
from bench_engine.components.tuning.tuners import make_tuner, tuner_is_finite
from bench_engine.contracts.execution_configs import ExecutionOptions
from bench_engine.contracts.tuning_configs import TerminatorConfig, TunerConfig
from bench_engine.core.cancellation import CancellationToken, resolve_token
from bench_engine.core.progress import ProgressCallback
from bench_engine.data.task import Task
from bench_engine.errors import ConfigurationError
from bench_engine.use_cases.benchmark import benchmark

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TuningResult:
    learner: Learner
    measure: Measure
    search_space: ParamSet
    partitioning: Partitioning
    archive: TuningArchive = field(repr=False)
    best: Optional[ArchiveEntry]
    stop_reason: str

    @property
    def config(self) -> Optional[Dict[str, Any]]:
        return None if self.best is None else dict(self.best.config)

    @property
    def score(self) -> float:
        return float("nan") if self.best is None else self.best.score

    def tuned_learner(self) -> Learner:
        """The base learner configured with the best configuration."""
        if self.best is None:
            raise ConfigurationError("tuning produced no configuration with a valid score")
        return self.learner.with_params(**self.best.config)


def check_tuning_setup(
    learner: Learner,
    search_space: ParamSet,
    tuner: TunerConfig,
    terminator: TerminatorConfig,
) -> None:
    """Configuration checks shared by :func:`tune` and the AutoTuner."""
    unknown = [k for k in search_space.ids if k not in learner.param_set]
    if unknown:
        raise ConfigurationError(f"search space parameters {unknown} are not parameters of learner {learner.id!r}")
    if not tuner_is_finite(tuner) and not make_terminator(terminator).guarantees_termination:
        raise ConfigurationError(
            f"tuner {tuner.kind!r} never runs out of candidates; "
            f"terminator {terminator.kind!r} does not guarantee termination"
        )


def tune(
    task: Task,
    learner: Learner,
    resampling: PartitionArg,
    measure: Measure,
    search_space: ParamSet,
    tuner: TunerConfig,
    terminator: TerminatorConfig,
    options: Optional[ExecutionOptions] = None,
    *,
    store_benchmark_result: bool = False,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
) -> TuningResult:
    """Search ``search_space`` for the configuration of ``learner`` that scores best on ``measure``."""
    opts = options or ExecutionOptions()

    # --- Checks ------------------------------------------------------------
    check_setup(task, learner, (measure,))
    check_tuning_setup(learner, search_space, tuner, terminator)
    part = resolve_partitioning(task, resampling)
    strategy = make_tuner(tuner, search_space)
    term = make_terminator(terminator)
    token = resolve_token(cancel, opts.timeout)

    archive = TuningArchive(measure)
    term.start()
    batch_nr = 0
    stop_reason = "tuner exhausted"

    # --- Batches -----------------------------------------------------------
    while True:
        if term.is_terminated(archive):
            stop_reason = term.reason
            break
        if token is not None and token.cancelled:
            stop_reason = token.reason or "cancelled"
            logger.warning("tuning %s cancelled after %d evaluations", learner.id, archive.n_evals)
            break
        configs = strategy.propose(archive)
        if not configs:
            break
        batch_nr += 1

        design = [
            DesignRow(task=task, learner=learner.with_params(**c), partitioning=part, measures=(measure,))
            for c in configs
        ]
        t0 = time.perf_counter()
        bmr = benchmark(design, opts, progress=progress, cancel=token)
        runtime = time.perf_counter() - t0

        for c, rr in zip(configs, bmr.resample_results):
            score = rr.aggregate(measure)[measure.id]
            archive.add(
                ArchiveEntry(
                    config=c,
                    score=score,
                    batch_nr=batch_nr,
                    n_iters=rr.iters,
                    n_errors=rr.n_errors,
                    runtime=runtime / len(configs),
                    resample_result=rr if store_benchmark_result else None,
                )
            )
            logger.info("tuning %s batch %d: %s -> %s=%.6g", learner.id, batch_nr, c, measure.id, score)

    best = archive.best()
    if best is None:
        logger.warning("tuning %s: no configuration produced a valid %s score", learner.id, measure.id)
    else:
        logger.info(
            "tuning %s done (%s): %d evaluations, best %s=%.6g with %s",
            learner.id,
            stop_reason,
            archive.n_evals,
            measure.id,
            best.score,
            best.config,
        )

    return TuningResult(
        learner=learner,
        measure=measure,
        search_space=search_space,
        partitioning=part,
        archive=archive,
        best=best,
        stop_reason=stop_reason,
    )


__all__ = ["TuningResult", "tune", "check_tuning_setup"]
