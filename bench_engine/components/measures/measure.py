from __future__ import annotations

"""Measure adapter.

A measure scores one prediction; ``aggregate`` reduces per-iteration scores.
Errored iterations carry NaN and are left out of the aggregate, never
counted as zero.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, FrozenSet, Literal, Optional, Sequence, Tuple

import numpy as np

from bench_engine.components.prediction.records import Prediction
from bench_engine.errors import ConfigurationError

ScoreFn = Callable[[Prediction], float]


@dataclass(frozen=True)
class Measure:
    id: str
    fun: Optional[ScoreFn] = field(repr=False)
    minimize: bool
    task_type: Optional[str] = None
    predict_type: str = "response"
    average: Literal["macro", "micro"] = "macro"
    range: Tuple[float, float] = (-np.inf, np.inf)
    properties: FrozenSet[str] = frozenset()
    aggregator: Callable[[np.ndarray], float] = field(default=np.mean, repr=False)
    # timing measures read ``time_train`` / ``time_predict`` from the iteration
    timing: Optional[Tuple[str, ...]] = None

    @property
    def direction(self) -> str:
        return "minimize" if self.minimize else "maximize"

    @property
    def requires_iteration(self) -> bool:
        return self.timing is not None

    def with_average(self, average: Literal["macro", "micro"]) -> "Measure":
        if average not in ("macro", "micro"):
            raise ConfigurationError(f"average must be 'macro' or 'micro', got {average!r}")
        if average == "micro" and self.requires_iteration:
            raise ConfigurationError(f"measure {self.id!r} cannot be micro-averaged")
        return replace(self, average=average)

    def check_prediction_setup(self, task_type: str, predict_type: str) -> None:
        """Raise ConfigurationError when this measure cannot score such predictions."""
        if self.task_type is not None and self.task_type != task_type:
            raise ConfigurationError(f"measure {self.id!r} is for {self.task_type!r} tasks, not {task_type!r}")
        if self.predict_type != "response" and self.predict_type != predict_type:
            raise ConfigurationError(
                f"measure {self.id!r} needs predict_type={self.predict_type!r}, learner uses {predict_type!r}"
            )

    def score(self, prediction: Optional[Prediction], iteration: Any = None) -> float:
        if self.timing is not None:
            if iteration is None:
                raise ConfigurationError(f"measure {self.id!r} needs iteration timings")
            return float(sum(float(getattr(iteration, a)) for a in self.timing))
        if prediction is None:
            return float("nan")
        if self.task_type is not None and prediction.task_type != self.task_type:
            raise ConfigurationError(
                f"measure {self.id!r} cannot score a {prediction.task_type!r} prediction"
            )
        if prediction.n == 0:
            return float("nan")
        return float(self.fun(prediction))  # type: ignore[misc]

    def aggregate(self, scores: Sequence[float]) -> float:
        arr = np.asarray(scores, dtype=float)
        valid = arr[~np.isnan(arr)]
        if valid.size == 0:
            return float("nan")
        return float(self.aggregator(valid))

    def better(self, a: float, b: float) -> bool:
        """True when ``a`` is strictly better than ``b``; NaN is never better."""
        if np.isnan(a):
            return False
        if np.isnan(b):
            return True
        return a < b if self.minimize else a > b


__all__ = ["Measure", "ScoreFn"]
