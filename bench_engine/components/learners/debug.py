from __future__ import annotations

"""Debug learner for exercising the error and warning paths of the engine.

Failures are drawn from a generator seeded by ``seed`` and the training row
ids, so the same configuration fails on the same folds in every run.
"""

import warnings
from typing import Any, Mapping, Sequence

import numpy as np

from bench_engine.components.learners.base import ALL_FEATURE_TYPES, Learner, LearnerModel
from bench_engine.components.learners.params import ParamDbl, ParamInt, ParamSet
from bench_engine.core.hashing import stable_hash
from bench_engine.data.task import Task
from bench_engine.runtime.random import RngManager


class LearnerClassifDebug(Learner):
    task_type = "classif"
    feature_types = ALL_FEATURE_TYPES
    properties = frozenset({"twoclass", "multiclass", "missings"})
    predict_types = ("response", "prob")

    def __init__(self, id: str = "classif.debug", **kwargs: Any) -> None:
        ps = ParamSet(
            {
                "error_train": ParamDbl(lower=0.0, upper=1.0, default=0.0),
                "error_predict": ParamDbl(lower=0.0, upper=1.0, default=0.0),
                "warning_train": ParamDbl(lower=0.0, upper=1.0, default=0.0),
                "warning_predict": ParamDbl(lower=0.0, upper=1.0, default=0.0),
                # no effect on predictions; a bounded dimension for tuning tests
                "x": ParamDbl(lower=0.0, upper=1.0),
                "seed": ParamInt(lower=0, default=0),
            }
        )
        super().__init__(id, param_set=ps, **kwargs)

    def _draw(self, stage: str, row_ids: Sequence) -> float:
        key = stable_hash([stage, tuple(np.asarray(row_ids).tolist())])
        rng = RngManager(int(self._param_values.get("seed", 0))).child_generator(key)
        return float(rng.uniform())

    def _train(self, task: Task, row_ids: Sequence) -> Any:
        pv = self._param_values
        if self._draw("warning_train", row_ids) < pv.get("warning_train", 0.0):
            warnings.warn("debug learner: train warning", UserWarning)
        if self._draw("error_train", row_ids) < pv.get("error_train", 0.0):
            raise RuntimeError("debug learner: train error")
        truth = task.truth(row_ids)
        classes = task.class_names  # type: ignore[attr-defined]
        counts = np.array([np.sum(truth == c) for c in classes], dtype=float)
        return {"label": classes[int(np.argmax(counts))], "freq": counts / max(counts.sum(), 1.0)}

    def _predict(self, model: LearnerModel, task: Task, row_ids: Sequence) -> Mapping[str, Any]:
        pv = self._param_values
        if self._draw("warning_predict", row_ids) < pv.get("warning_predict", 0.0):
            warnings.warn("debug learner: predict warning", UserWarning)
        if self._draw("error_predict", row_ids) < pv.get("error_predict", 0.0):
            raise RuntimeError("debug learner: predict error")
        n = len(row_ids)
        return {
            "response": np.repeat(np.asarray([model.state["label"]]), n),
            "prob": np.tile(model.state["freq"], (n, 1)),
        }


__all__ = ["LearnerClassifDebug"]
