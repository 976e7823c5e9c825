from __future__ import annotations

"""Learner adapter base.

A learner is a *configuration*: an id, declared capabilities and validated
hyperparameter values. ``fit`` returns a separate :class:`LearnerModel`; the
learner itself is never mutated by training, so one configuration can be
dispatched to many workers.
"""

import copy
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Optional, Sequence, Tuple

import numpy as np

from bench_engine.components.learners.params import ParamSet
from bench_engine.components.prediction.records import Prediction, PredictionClassif, PredictionRegr
from bench_engine.core.hashing import stable_hash
from bench_engine.data.task import Task
from bench_engine.errors import ConfigurationError, FitError, PredictError

logger = logging.getLogger(__name__)

ALL_FEATURE_TYPES = frozenset({"logical", "integer", "numeric", "factor", "character"})
NUMERIC_FEATURE_TYPES = frozenset({"logical", "integer", "numeric"})


@dataclass(frozen=True)
class LearnerModel:
    learner_id: str
    param_values: Mapping[str, Any]
    state: Any = field(repr=False)
    n_train: int
    feature_names: Tuple[str, ...]


class Learner:
    """Base class for learner adapters.

    Subclasses set ``task_type``, ``feature_types``, ``properties`` and
    ``predict_types`` and implement :meth:`_train` and :meth:`_predict`.
    ``_predict`` returns a dict with ``response`` and optionally ``prob``
    (classification, columns in ``task.class_names`` order) or ``se``.
    """

    task_type: ClassVar[str] = "task"
    feature_types: ClassVar[FrozenSet[str]] = NUMERIC_FEATURE_TYPES
    properties: ClassVar[FrozenSet[str]] = frozenset()
    predict_types: ClassVar[Tuple[str, ...]] = ("response",)

    def __init__(
        self,
        id: str,
        *,
        param_set: Optional[ParamSet] = None,
        predict_type: str = "response",
        **param_values: Any,
    ) -> None:
        self.id = id
        self._param_set = param_set if param_set is not None else ParamSet()
        if predict_type not in self.predict_types:
            raise ConfigurationError(
                f"learner {id!r} supports predict types {list(self.predict_types)}, got {predict_type!r}"
            )
        self.predict_type = predict_type
        values = dict(self._param_set.defaults)
        values.update(param_values)
        self._param_values: Dict[str, Any] = self._param_set.validate(values, context=f"learner {id!r}")

    # --- configuration -------------------------------------------------------

    @property
    def param_set(self) -> ParamSet:
        return self._param_set

    @property
    def param_values(self) -> Mapping[str, Any]:
        return MappingProxyType(self._param_values)

    def clone(self) -> "Learner":
        return copy.deepcopy(self)

    def with_params(self, **values: Any) -> "Learner":
        """Validated copy with ``values`` merged over the current ones."""
        merged = dict(self._param_values)
        merged.update(values)
        self._param_set.validate(merged, context=f"learner {self.id!r}")
        new = self.clone()
        new._param_values = merged
        return new

    def with_predict_type(self, predict_type: str) -> "Learner":
        if predict_type not in self.predict_types:
            raise ConfigurationError(
                f"learner {self.id!r} supports predict types {list(self.predict_types)}, got {predict_type!r}"
            )
        new = self.clone()
        new.predict_type = predict_type
        return new

    @property
    def hash(self) -> str:
        items = tuple(sorted((k, repr(v)) for k, v in self._param_values.items()))
        return stable_hash([type(self).__name__, self.id, self.predict_type, items])

    # --- compatibility -------------------------------------------------------

    def check_task(self, task: Task) -> None:
        """Raise ConfigurationError when this learner cannot train on ``task``."""
        if task.task_type != self.task_type:
            raise ConfigurationError(
                f"learner {self.id!r} is for {self.task_type!r} tasks, task {task.id!r} is {task.task_type!r}"
            )
        unsupported = sorted({t for t in task.feature_types.values()} - set(self.feature_types))
        if unsupported:
            raise ConfigurationError(
                f"learner {self.id!r} does not support feature types {unsupported} of task {task.id!r}"
            )
        if "missings" not in self.properties and task.has_missings():
            raise ConfigurationError(
                f"task {task.id!r} has missing values and learner {self.id!r} does not support them"
            )
        if task.weight_name is not None and "weights" not in self.properties:
            raise ConfigurationError(
                f"task {task.id!r} has weight column {task.weight_name!r} and learner {self.id!r} does not support weights"
            )
        task_props = getattr(task, "properties", frozenset())
        if self.task_type == "classif":
            needed = task_props & {"twoclass", "multiclass"}
            if not needed <= self.properties:
                raise ConfigurationError(
                    f"learner {self.id!r} does not support {sorted(needed)} task {task.id!r}"
                )

    # --- train / predict -----------------------------------------------------

    def fit(self, task: Task, row_ids: Sequence) -> LearnerModel:
        try:
            state = self._train(task, row_ids)
        except (ConfigurationError, FitError):
            raise
        except Exception as e:
            raise FitError(f"learner {self.id!r} failed to train: {type(e).__name__}: {e}") from e
        return LearnerModel(
            learner_id=self.id,
            param_values=dict(self._param_values),
            state=state,
            n_train=len(row_ids),
            feature_names=task.feature_names,
        )

    def predict(self, model: LearnerModel, task: Task, row_ids: Sequence) -> Prediction:
        try:
            out = self._predict(model, task, row_ids)
            return self._as_prediction(task, row_ids, out)
        except (ConfigurationError, PredictError):
            raise
        except Exception as e:
            raise PredictError(f"learner {self.id!r} failed to predict: {type(e).__name__}: {e}") from e

    def _as_prediction(self, task: Task, row_ids: Sequence, out: Mapping[str, Any]) -> Prediction:
        row_ids = np.asarray(row_ids)
        truth = task.truth(row_ids)
        if task.task_type == "classif":
            prob = out.get("prob") if self.predict_type == "prob" else None
            return PredictionClassif(
                row_ids=row_ids,
                truth=truth,
                response=np.asarray(out["response"]),
                prob=prob,
                class_names=task.class_names,  # type: ignore[attr-defined]
                positive=getattr(task, "positive", None),
            )
        se = out.get("se") if self.predict_type == "se" else None
        return PredictionRegr(row_ids=row_ids, truth=truth, response=np.asarray(out["response"], dtype=float), se=se)

    def _train(self, task: Task, row_ids: Sequence) -> Any:
        raise NotImplementedError

    def _predict(self, model: LearnerModel, task: Task, row_ids: Sequence) -> Mapping[str, Any]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id!r} {dict(self._param_values)}>"


__all__ = ["Learner", "LearnerModel", "ALL_FEATURE_TYPES", "NUMERIC_FEATURE_TYPES"]
