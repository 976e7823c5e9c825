from __future__ import annotations

"""Result of resampling one learner on one task."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from bench_engine.components.execution.iteration import IterationResult
from bench_engine.components.learners.base import Learner, LearnerModel
from bench_engine.components.measures.measure import Measure
from bench_engine.components.partitions.types import Partitioning
from bench_engine.components.prediction.records import Prediction, combine_predictions
from bench_engine.contracts.partition_configs import CustomSpec
from bench_engine.contracts.results import ErrorRecord, ScoreRow
from bench_engine.data.task import Task
from bench_engine.errors import IncompatibleResultError

logger = logging.getLogger(__name__)

MeasureArg = Union[Measure, Sequence[Measure], None]


def _as_measures(measures: MeasureArg, default: Sequence[Measure]) -> Tuple[Measure, ...]:
    if measures is None:
        return tuple(default)
    if isinstance(measures, Measure):
        return (measures,)
    return tuple(measures)


def _renumber(it: IterationResult, offset: int) -> IterationResult:
    def shift(rec: Optional[ErrorRecord]) -> Optional[ErrorRecord]:
        return None if rec is None else rec.model_copy(update={"iteration": rec.iteration + offset})

    return replace(
        it,
        iteration=it.iteration + offset,
        error=shift(it.error),
        score_errors=tuple(shift(r) for r in it.score_errors),
    )


@dataclass(frozen=True, eq=False)
class ResampleResult:
    task: Task
    learner: Learner
    partitioning: Partitioning
    iterations: Tuple[IterationResult, ...]
    # measures that were scored during execution
    measures: Tuple[Measure, ...] = ()

    # --- iterations ----------------------------------------------------------

    @property
    def iters(self) -> int:
        return len(self.iterations)

    @property
    def valid_iterations(self) -> Tuple[IterationResult, ...]:
        return tuple(it for it in self.iterations if it.ok)

    @property
    def errors(self) -> List[ErrorRecord]:
        return [rec for it in self.iterations for rec in it.errors]

    @property
    def n_errors(self) -> int:
        return sum(1 for it in self.iterations if not it.ok)

    @property
    def warnings(self) -> List[Tuple[int, str]]:
        return [(it.iteration, w) for it in self.iterations for w in it.warnings]

    def predictions(self) -> List[Optional[Prediction]]:
        return [it.prediction for it in self.iterations]

    def prediction(self) -> Optional[Prediction]:
        """All valid predictions concatenated; None when no iteration succeeded."""
        preds = [p for p in self.predictions() if p is not None]
        return combine_predictions(preds) if preds else None

    def models(self) -> List[Optional[LearnerModel]]:
        return [it.model for it in self.iterations]

    # --- scores --------------------------------------------------------------

    def performance(self, measure: Measure) -> np.ndarray:
        """Per-iteration scores in partition order; NaN where the iteration failed."""
        cached = measure in self.measures
        out = np.full(self.iters, np.nan)
        for k, it in enumerate(self.iterations):
            if not it.ok:
                continue
            if cached and measure.id in it.scores:
                out[k] = it.scores[measure.id]
            else:
                out[k] = measure.score(it.prediction, it)
        return out

    def score(self, measures: MeasureArg = None, *, nr: Optional[int] = None) -> List[ScoreRow]:
        ms = _as_measures(measures, self.measures)
        perf = {m.id: self.performance(m) for m in ms}
        return [
            ScoreRow(
                nr=nr,
                task_id=self.task.id,
                learner_id=self.learner.id,
                resampling_id=self.partitioning.id,
                iteration=it.iteration,
                ok=it.ok,
                scores={mid: float(v[k]) for mid, v in perf.items()},
            )
            for k, it in enumerate(self.iterations)
        ]

    def aggregate(self, measures: MeasureArg = None) -> Dict[str, float]:
        """Aggregated score per measure id.

        Macro (default): the measure's aggregator over non-NaN iteration scores,
        NaN when no iteration is valid. Micro: the measure applied once to the
        combined prediction.
        """
        out: Dict[str, float] = {}
        for m in _as_measures(measures, self.measures):
            if m.average == "micro":
                combined = self.prediction()
                out[m.id] = float("nan") if combined is None else m.score(combined)
            else:
                out[m.id] = m.aggregate(self.performance(m))
        return out

    # --- derived results -----------------------------------------------------

    def filter(self, iters: Iterable[int]) -> "ResampleResult":
        """Keep only the given (1-based) iterations; numbering is unchanged."""
        keep = {int(i) for i in iters}
        unknown = keep - {it.iteration for it in self.iterations}
        if unknown:
            raise IndexError(f"unknown iterations {sorted(unknown)}")
        return replace(self, iterations=tuple(it for it in self.iterations if it.iteration in keep))

    def combine(self, other: "ResampleResult") -> "ResampleResult":
        """Concatenate with ``other`` (same task and learner configuration).

        The partitioning of the result is a custom partitioning of both sets of
        pairs; iterations of ``other`` are renumbered after this one's.
        """
        if self.task.hash != other.task.hash:
            raise IncompatibleResultError(
                f"cannot combine results of tasks {self.task.id!r} and {other.task.id!r}"
            )
        if self.learner.hash != other.learner.hash:
            raise IncompatibleResultError(
                f"cannot combine results of learners {self.learner.id!r} and {other.learner.id!r}"
            )
        offset = self.partitioning.iters
        train_sets = self.partitioning.train_sets + other.partitioning.train_sets
        test_sets = self.partitioning.test_sets + other.partitioning.test_sets
        spec = CustomSpec(
            train_sets=tuple(tuple(s.tolist()) for s in train_sets),
            test_sets=tuple(tuple(s.tolist()) for s in test_sets),
        )
        part = Partitioning(
            spec=spec,
            train_sets=train_sets,
            test_sets=test_sets,
            row_ids_hash=None,
            task_id=self.task.id,
        )
        measures = self.measures + tuple(m for m in other.measures if m not in self.measures)
        iterations = self.iterations + tuple(_renumber(it, offset) for it in other.iterations)
        return ResampleResult(
            task=self.task,
            learner=self.learner,
            partitioning=part,
            iterations=iterations,
            measures=measures,
        )

    def __repr__(self) -> str:
        return (
            f"<ResampleResult {self.learner.id} on {self.task.id} with {self.partitioning.id}: "
            f"{self.iters} iterations, {self.n_errors} errors>"
        )


__all__ = ["ResampleResult"]
