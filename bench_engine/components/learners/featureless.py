from __future__ import annotations

"""Featureless baselines: predictions ignore the features entirely."""

from typing import Any, Mapping, Sequence

import numpy as np

from bench_engine.components.learners.base import ALL_FEATURE_TYPES, Learner, LearnerModel
from bench_engine.components.learners.params import ParamFct, ParamInt, ParamLgl, ParamSet
from bench_engine.data.task import Task
from bench_engine.runtime.random import RngManager


class LearnerClassifFeatureless(Learner):
    """Predicts the training mode, or samples labels from the training distribution."""

    task_type = "classif"
    feature_types = ALL_FEATURE_TYPES
    properties = frozenset({"twoclass", "multiclass", "missings", "importance"})
    predict_types = ("response", "prob")

    def __init__(self, id: str = "classif.featureless", **kwargs: Any) -> None:
        ps = ParamSet(
            {
                "method": ParamFct(levels=("mode", "sample", "weighted.sample"), default="mode"),
                "seed": ParamInt(lower=0, default=0),
            }
        )
        super().__init__(id, param_set=ps, **kwargs)

    def _train(self, task: Task, row_ids: Sequence) -> Any:
        truth = task.truth(row_ids)
        classes = task.class_names  # type: ignore[attr-defined]
        counts = np.array([np.sum(truth == c) for c in classes], dtype=float)
        if counts.sum() == 0:
            raise ValueError("no training rows")
        return {"classes": classes, "freq": counts / counts.sum(), "dtype": truth.dtype}

    def _predict(self, model: LearnerModel, task: Task, row_ids: Sequence) -> Mapping[str, Any]:
        classes = np.asarray(model.state["classes"], dtype=object)
        freq = model.state["freq"]
        n = len(row_ids)
        method = model.param_values.get("method", "mode")
        if method == "mode":
            response = np.repeat(classes[int(np.argmax(freq))], n)
        else:
            rng = RngManager(int(model.param_values.get("seed", 0))).child_generator("featureless")
            p = freq if method == "weighted.sample" else None
            response = rng.choice(classes, size=n, p=p)
        prob = np.tile(freq, (n, 1))
        return {"response": response.astype(model.state["dtype"], copy=False), "prob": prob}


class LearnerRegrFeatureless(Learner):
    """Predicts the training mean (or median); ``se`` is the training standard deviation."""

    task_type = "regr"
    feature_types = ALL_FEATURE_TYPES
    properties = frozenset({"missings", "importance"})
    predict_types = ("response", "se")

    def __init__(self, id: str = "regr.featureless", **kwargs: Any) -> None:
        ps = ParamSet({"robust": ParamLgl(default=False)})
        super().__init__(id, param_set=ps, **kwargs)

    def _train(self, task: Task, row_ids: Sequence) -> Any:
        y = np.asarray(task.truth(row_ids), dtype=float)
        if y.size == 0:
            raise ValueError("no training rows")
        loc = float(np.median(y)) if self._param_values.get("robust") else float(np.mean(y))
        sd = float(np.std(y, ddof=1)) if y.size > 1 else 0.0
        return {"location": loc, "sd": sd}

    def _predict(self, model: LearnerModel, task: Task, row_ids: Sequence) -> Mapping[str, Any]:
        n = len(row_ids)
        return {
            "response": np.full(n, model.state["location"]),
            "se": np.full(n, model.state["sd"]),
        }


__all__ = ["LearnerClassifFeatureless", "LearnerRegrFeatureless"]
