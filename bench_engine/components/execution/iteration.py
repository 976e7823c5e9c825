from __future__ import annotations

"""One train/test iteration.

Fit and predict failures are caught here and turned into
:class:`ErrorRecord` data; configuration errors propagate.
"""

import logging
import time
import warnings
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from bench_engine.components.learners.base import Learner, LearnerModel
from bench_engine.components.measures.measure import Measure
from bench_engine.components.prediction.records import Prediction
from bench_engine.contracts.results import ErrorRecord
from bench_engine.data.task import Task
from bench_engine.errors import CancelledError, FitError, PredictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class IterationResult:
    iteration: int
    n_train: int
    n_test: int
    prediction: Optional[Prediction] = None
    model: Optional[LearnerModel] = field(default=None, repr=False)
    time_train: float = float("nan")
    time_predict: float = float("nan")
    warnings: Tuple[str, ...] = ()
    error: Optional[ErrorRecord] = None
    # scoring failures; the iteration itself stays valid
    score_errors: Tuple[ErrorRecord, ...] = ()
    scores: Mapping[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def errors(self) -> Tuple[ErrorRecord, ...]:
        return ((self.error,) if self.error is not None else ()) + self.score_errors

    @property
    def time_both(self) -> float:
        return self.time_train + self.time_predict


def _warning_messages(caught: Sequence[warnings.WarningMessage]) -> Tuple[str, ...]:
    return tuple(f"{w.category.__name__}: {w.message}" for w in caught)


def score_iteration(
    prediction: Optional[Prediction],
    measures: Sequence[Measure],
    *,
    iteration: int,
    time_train: float,
    time_predict: float,
    task_id: Optional[str] = None,
    learner_id: Optional[str] = None,
) -> Tuple[Dict[str, float], Tuple[ErrorRecord, ...]]:
    """Provisional per-iteration scores; a measure that raises scores NaN."""
    timings = SimpleNamespace(time_train=time_train, time_predict=time_predict)
    scores: Dict[str, float] = {}
    errors = []
    for m in measures:
        if prediction is None:
            scores[m.id] = float("nan")
            continue
        try:
            scores[m.id] = m.score(prediction, timings)
        except Exception as e:
            logger.warning("iteration %d: measure %s failed: %s", iteration, m.id, e)
            scores[m.id] = float("nan")
            errors.append(
                ErrorRecord.from_exception(
                    e, iteration=iteration, stage="score", task_id=task_id, learner_id=learner_id
                )
            )
    return scores, tuple(errors)


def run_iteration(
    learner: Learner,
    task: Task,
    train_ids: np.ndarray,
    test_ids: np.ndarray,
    *,
    iteration: int,
    measures: Sequence[Measure] = (),
    retain_model: bool = False,
) -> IterationResult:
    """Fit on ``train_ids``, predict ``test_ids`` and score."""
    learner = learner.clone()
    n_train, n_test = int(len(train_ids)), int(len(test_ids))
    base = dict(iteration=iteration, n_train=n_train, n_test=n_test)
    ids = dict(task_id=task.id, learner_id=learner.id)

    logger.debug("iteration %d: %s on %s (train=%d, test=%d)", iteration, learner.id, task.id, n_train, n_test)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")

        t0 = time.perf_counter()
        try:
            model = learner.fit(task, train_ids)
        except FitError as e:
            logger.warning("iteration %d: fit failed for %s on %s: %s", iteration, learner.id, task.id, e)
            return IterationResult(
                **base,
                time_train=time.perf_counter() - t0,
                warnings=_warning_messages(caught),
                error=ErrorRecord.from_exception(e, iteration=iteration, stage="fit", **ids),
                scores={m.id: float("nan") for m in measures},
            )
        time_train = time.perf_counter() - t0

        t0 = time.perf_counter()
        try:
            prediction = learner.predict(model, task, test_ids)
        except PredictError as e:
            logger.warning("iteration %d: predict failed for %s on %s: %s", iteration, learner.id, task.id, e)
            return IterationResult(
                **base,
                model=model if retain_model else None,
                time_train=time_train,
                time_predict=time.perf_counter() - t0,
                warnings=_warning_messages(caught),
                error=ErrorRecord.from_exception(e, iteration=iteration, stage="predict", **ids),
                scores={m.id: float("nan") for m in measures},
            )
        time_predict = time.perf_counter() - t0

    scores, score_errors = score_iteration(
        prediction,
        measures,
        iteration=iteration,
        time_train=time_train,
        time_predict=time_predict,
        **ids,
    )
    logger.debug("iteration %d done in %.4fs", iteration, time_train + time_predict)

    return IterationResult(
        **base,
        prediction=prediction,
        model=model if retain_model else None,
        time_train=time_train,
        time_predict=time_predict,
        warnings=_warning_messages(caught),
        score_errors=score_errors,
        scores=scores,
    )


def cancelled_iteration(
    iteration: int,
    n_train: int,
    n_test: int,
    *,
    reason: str,
    task_id: Optional[str] = None,
    learner_id: Optional[str] = None,
    measures: Sequence[Measure] = (),
) -> IterationResult:
    """Placeholder for a unit skipped after cancellation."""
    err = ErrorRecord.from_exception(
        CancelledError(reason), iteration=iteration, stage="cancelled", task_id=task_id, learner_id=learner_id
    )
    return IterationResult(
        iteration=iteration,
        n_train=n_train,
        n_test=n_test,
        error=err,
        scores={m.id: float("nan") for m in measures},
    )


__all__ = ["IterationResult", "run_iteration", "score_iteration", "cancelled_iteration"]
