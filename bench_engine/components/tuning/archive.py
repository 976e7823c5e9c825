from __future__ import annotations

"""Evaluation history of a tuning run."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from bench_engine.components.measures.measure import Measure
from bench_engine.contracts.results import ArchiveRow


@dataclass(frozen=True, eq=False)
class ArchiveEntry:
    config: Dict[str, Any]
    score: float
    batch_nr: int
    n_iters: int
    n_errors: int
    runtime: float
    # only kept with store_benchmark_result=True
    resample_result: Optional[Any] = field(default=None, repr=False)


class TuningArchive:
    """Evaluated configurations in evaluation order."""

    def __init__(self, measure: Measure) -> None:
        self.measure = measure
        self._entries: List[ArchiveEntry] = []

    def add(self, entry: ArchiveEntry) -> None:
        self._entries.append(entry)

    @property
    def entries(self) -> List[ArchiveEntry]:
        return list(self._entries)

    @property
    def n_evals(self) -> int:
        return len(self._entries)

    @property
    def n_batches(self) -> int:
        return max((e.batch_nr for e in self._entries), default=0)

    @property
    def scores(self) -> np.ndarray:
        return np.asarray([e.score for e in self._entries], dtype=float)

    def best(self) -> Optional[ArchiveEntry]:
        """Best non-NaN score by the measure's direction; ties go to the earliest entry."""
        best: Optional[ArchiveEntry] = None
        for e in self._entries:
            if best is None:
                if not np.isnan(e.score):
                    best = e
            elif self.measure.better(e.score, best.score):
                best = e
        return best

    def to_rows(self) -> List[ArchiveRow]:
        return [
            ArchiveRow(
                batch_nr=e.batch_nr,
                config=dict(e.config),
                score=e.score,
                n_iters=e.n_iters,
                n_errors=e.n_errors,
                runtime=e.runtime,
            )
            for e in self._entries
        ]

    def __len__(self) -> int:
        return self.n_evals

    def __repr__(self) -> str:
        return f"<TuningArchive {self.measure.id}: {self.n_evals} evaluations>"


__all__ = ["ArchiveEntry", "TuningArchive"]
