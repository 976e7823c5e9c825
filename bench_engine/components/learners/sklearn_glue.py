from __future__ import annotations

"""scikit-learn estimator adapter."""

from typing import Any, Mapping, Optional, Sequence

import numpy as np
from sklearn.base import clone
from sklearn.utils.validation import has_fit_parameter

from bench_engine.components.learners.base import Learner, LearnerModel, NUMERIC_FEATURE_TYPES
from bench_engine.components.learners.params import ParamSet, ParamUty
from bench_engine.data.task import Task
from bench_engine.errors import ConfigurationError


def fit_estimator(
    model: Any,
    X_train: np.ndarray,
    y_train: np.ndarray,
    *,
    sample_weight: Optional[np.ndarray] = None,
) -> Any:
    """
    Fit a scikit-learn style estimator on training data.

    Parameters
    ----------
    model : Any
        Estimator exposing `fit(X, y, **kwargs)`.
    X_train : array-like of shape (n_samples, n_features)
    y_train : array-like of shape (n_samples,)
    sample_weight : array-like of shape (n_samples,), optional
        Per-sample weights; only passed if not None.

    Returns
    -------
    model : Any
        The same estimator, after fitting.
    """
    if not hasattr(model, "fit"):
        raise AttributeError("`model` has no `.fit(...)` method.")

    X_train = np.asarray(X_train)
    y_train = np.asarray(y_train).ravel()

    if X_train.ndim != 2:
        raise ValueError(f"X_train must be 2D; got {X_train.shape}.")
    if X_train.shape[0] != y_train.shape[0]:
        raise ValueError(
            f"X_train and y_train length mismatch: {X_train.shape[0]} vs {y_train.shape[0]}."
        )
    if X_train.shape[0] == 0:
        raise ValueError("cannot fit on an empty training set.")

    if sample_weight is not None:
        sample_weight = np.asarray(sample_weight).ravel()
        if sample_weight.shape[0] != y_train.shape[0]:
            raise ValueError("sample_weight must match the number of training samples.")
        model.fit(X_train, y_train, sample_weight=sample_weight)
    else:
        model.fit(X_train, y_train)

    return model


def _default_param_set(estimator: Any) -> ParamSet:
    return ParamSet({k: ParamUty() for k in estimator.get_params(deep=False)})


class SklearnLearner(Learner):
    """Wrap an unfitted estimator.

    The estimator passed in is a prototype: every ``fit`` works on
    ``sklearn.base.clone(prototype)`` with the learner's parameter values set,
    so the prototype is never fitted.
    """

    feature_types = NUMERIC_FEATURE_TYPES

    def __init__(
        self,
        estimator: Any,
        *,
        id: str,
        task_type: str,
        param_set: Optional[ParamSet] = None,
        properties: Sequence[str] = (),
        predict_type: str = "response",
        **param_values: Any,
    ) -> None:
        if task_type not in ("classif", "regr"):
            raise ConfigurationError(f"unknown task type {task_type!r}")
        self.task_type = task_type  # type: ignore[misc]
        self.estimator = estimator

        props = set(properties)
        if task_type == "classif":
            props |= {"twoclass", "multiclass"}
        if has_fit_parameter(estimator, "sample_weight"):
            props.add("weights")
        self.properties = frozenset(props)  # type: ignore[misc]

        if task_type == "classif":
            self.predict_types = ("response", "prob") if hasattr(estimator, "predict_proba") else ("response",)  # type: ignore[misc]
        else:
            self.predict_types = ("response",)  # type: ignore[misc]

        super().__init__(
            id,
            param_set=param_set if param_set is not None else _default_param_set(estimator),
            predict_type=predict_type,
            **param_values,
        )

    def _make_estimator(self) -> Any:
        est = clone(self.estimator)
        est.set_params(**self._param_values)
        return est

    def _train(self, task: Task, row_ids: Sequence) -> Any:
        X = task.data(row_ids).to_numpy(dtype=float)
        y = task.truth(row_ids)
        return fit_estimator(self._make_estimator(), X, y, sample_weight=task.weights(row_ids))

    def _predict(self, model: LearnerModel, task: Task, row_ids: Sequence) -> Mapping[str, Any]:
        est = model.state
        X = task.data(row_ids, cols=model.feature_names).to_numpy(dtype=float)
        out = {"response": est.predict(X)}
        if self.predict_type == "prob":
            out["prob"] = self._aligned_proba(est, X, task.class_names)  # type: ignore[attr-defined]
        return out

    @staticmethod
    def _aligned_proba(est: Any, X: np.ndarray, class_names: Sequence[Any]) -> np.ndarray:
        # A training fold can miss a class; its column stays zero.
        raw = np.asarray(est.predict_proba(X), dtype=float)
        out = np.zeros((X.shape[0], len(class_names)), dtype=float)
        index = {c: j for j, c in enumerate(class_names)}
        for k, c in enumerate(est.classes_):
            out[:, index[c]] = raw[:, k]
        return out


__all__ = ["SklearnLearner", "fit_estimator"]
