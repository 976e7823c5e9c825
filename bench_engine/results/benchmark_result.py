from __future__ import annotations

"""Result of a benchmark: one resample result per design row, in design order."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from bench_engine.components.execution.design import DesignRow
from bench_engine.components.measures.measure import Measure
from bench_engine.contracts.results import AggregateRow, ErrorRecord, ScoreRow
from bench_engine.errors import ConfigurationError
from bench_engine.results.resample_result import MeasureArg, ResampleResult, _as_measures

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class BenchmarkResult:
    entries: Tuple[Tuple[DesignRow, ResampleResult], ...] = ()

    @property
    def n_resample_results(self) -> int:
        return len(self.entries)

    @property
    def design(self) -> List[DesignRow]:
        return [row for row, _ in self.entries]

    @property
    def resample_results(self) -> List[ResampleResult]:
        return [rr for _, rr in self.entries]

    def resample_result(self, i: int) -> ResampleResult:
        """Resample result of design row ``i`` (1-based)."""
        if not 1 <= int(i) <= self.n_resample_results:
            raise IndexError(f"row {i} out of range 1..{self.n_resample_results}")
        return self.entries[int(i) - 1][1]

    @property
    def errors(self) -> List[ErrorRecord]:
        return [
            rec.model_copy(update={"nr": nr})
            for nr, (_, rr) in enumerate(self.entries, start=1)
            for rec in rr.errors
        ]

    @property
    def n_errors(self) -> int:
        return sum(rr.n_errors for rr in self.resample_results)

    def score(self, measures: MeasureArg = None) -> List[ScoreRow]:
        rows: List[ScoreRow] = []
        for nr, (_, rr) in enumerate(self.entries, start=1):
            rows.extend(rr.score(measures, nr=nr))
        return rows

    def aggregate(self, measures: MeasureArg = None) -> List[AggregateRow]:
        return [
            AggregateRow(
                nr=nr,
                task_id=rr.task.id,
                learner_id=rr.learner.id,
                resampling_id=rr.partitioning.id,
                iters=rr.iters,
                n_errors=rr.n_errors,
                scores=rr.aggregate(measures),
            )
            for nr, (_, rr) in enumerate(self.entries, start=1)
        ]

    def aggregate_table(self, measures: MeasureArg = None, *, by_resampling: bool = False) -> Dict[Tuple, float]:
        """Aggregated scores keyed by (task_id, learner_id, measure_id).

        With ``by_resampling`` the key is (task_id, learner_id, resampling_id,
        measure_id). On duplicate keys the first design row wins and the
        dropped rows are logged.
        """
        table: Dict[Tuple, float] = {}
        owner: Dict[Tuple, int] = {}
        for row in self.aggregate(measures):
            for mid, v in row.scores.items():
                if by_resampling:
                    key: Tuple = (row.task_id, row.learner_id, row.resampling_id, mid)
                else:
                    key = (row.task_id, row.learner_id, mid)
                if key in table:
                    logger.warning(
                        "aggregate_table: design row %d duplicates key %s of row %d and is dropped",
                        row.nr,
                        key,
                        owner[key],
                    )
                    continue
                table[key] = v
                owner[key] = row.nr
        return table

    def filter(
        self,
        task_ids: Optional[Iterable[str]] = None,
        learner_ids: Optional[Iterable[str]] = None,
    ) -> "BenchmarkResult":
        tasks = None if task_ids is None else set(task_ids)
        learners = None if learner_ids is None else set(learner_ids)
        kept = tuple(
            (row, rr)
            for row, rr in self.entries
            if (tasks is None or rr.task.id in tasks) and (learners is None or rr.learner.id in learners)
        )
        return BenchmarkResult(entries=kept)

    def combine(self, other: "BenchmarkResult") -> "BenchmarkResult":
        return BenchmarkResult(entries=self.entries + other.entries)

    def best(self, measure: Measure) -> AggregateRow:
        """Design row with the best aggregated score; ties go to the earliest row."""
        rows = self.aggregate(measure)
        if not rows:
            raise ConfigurationError("empty benchmark result")
        best_row = None
        best_val = float("nan")
        for row in rows:
            v = row.scores[measure.id]
            if best_row is None or measure.better(v, best_val):
                best_row, best_val = row, v
        if np.isnan(best_val):
            raise ConfigurationError(f"no design row has a valid {measure.id!r} score")
        return best_row

    def __repr__(self) -> str:
        return f"<BenchmarkResult {self.n_resample_results} resample results, {self.n_errors} failed iterations>"


__all__ = ["BenchmarkResult"]
