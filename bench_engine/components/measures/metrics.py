from __future__ import annotations

"""Metric functions over predictions.

Each function takes a :class:`Prediction` and returns a float; formulas are
delegated to :mod:`sklearn.metrics`.
"""

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    f1_score,
    log_loss,
    mean_absolute_error,
    mean_absolute_percentage_error,
    mean_squared_error,
    precision_score,
    r2_score,
    recall_score,
    roc_auc_score,
)

from bench_engine.components.prediction.records import PredictionClassif, PredictionRegr
from bench_engine.errors import ConfigurationError


def _require_prob(p: PredictionClassif) -> np.ndarray:
    if p.prob is None:
        raise ConfigurationError("measure needs probability predictions (predict_type='prob')")
    return p.prob


def _require_binary(p: PredictionClassif) -> None:
    if len(p.class_names) != 2:
        raise ConfigurationError("measure is defined for two-class tasks only")


# --- classification ----------------------------------------------------------


def acc(p: PredictionClassif) -> float:
    return float(accuracy_score(p.truth, p.response))


def ce(p: PredictionClassif) -> float:
    return 1.0 - acc(p)


def bacc(p: PredictionClassif) -> float:
    return float(balanced_accuracy_score(p.truth, p.response))


def f1(p: PredictionClassif) -> float:
    _require_binary(p)
    return float(f1_score(p.truth, p.response, pos_label=p.positive, zero_division=0))


def precision(p: PredictionClassif) -> float:
    _require_binary(p)
    return float(precision_score(p.truth, p.response, pos_label=p.positive, zero_division=0))


def recall(p: PredictionClassif) -> float:
    _require_binary(p)
    return float(recall_score(p.truth, p.response, pos_label=p.positive, zero_division=0))


def auc(p: PredictionClassif) -> float:
    _require_binary(p)
    _require_prob(p)
    score = p.prob_of(p.positive)
    y = np.asarray(p.truth == p.positive, dtype=int)
    if y.min() == y.max():
        # only one class present in this test set
        return float("nan")
    return float(roc_auc_score(y, score))


def logloss(p: PredictionClassif) -> float:
    prob = _require_prob(p)
    return float(log_loss(p.truth, prob, labels=list(p.class_names)))


def mbrier(p: PredictionClassif) -> float:
    prob = _require_prob(p)
    onehot = np.asarray([[t == c for c in p.class_names] for t in p.truth], dtype=float)
    return float(np.mean(np.sum((prob - onehot) ** 2, axis=1)))


# --- regression --------------------------------------------------------------


def mse(p: PredictionRegr) -> float:
    return float(mean_squared_error(p.truth, p.response))


def rmse(p: PredictionRegr) -> float:
    return float(np.sqrt(mse(p)))


def mae(p: PredictionRegr) -> float:
    return float(mean_absolute_error(p.truth, p.response))


def mape(p: PredictionRegr) -> float:
    return float(mean_absolute_percentage_error(p.truth, p.response))


def rsq(p: PredictionRegr) -> float:
    if p.n < 2:
        return float("nan")
    return float(r2_score(p.truth, p.response))


__all__ = [
    "acc",
    "ce",
    "bacc",
    "f1",
    "precision",
    "recall",
    "auc",
    "logloss",
    "mbrier",
    "mse",
    "rmse",
    "mae",
    "mape",
    "rsq",
]
