from __future__ import annotations

"""Prediction records.

A prediction holds the test row ids, the ground truth and the learner's output
for those rows. Arrays are made read-only at construction; every
transformation (thresholding, combining) returns a new record.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from bench_engine.errors import ConfigurationError


def _freeze(arr: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if arr is None:
        return None
    out = np.array(arr, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class Prediction:
    row_ids: np.ndarray
    truth: np.ndarray
    response: np.ndarray

    task_type: ClassVar[str] = "task"

    def __post_init__(self) -> None:
        for name in ("row_ids", "truth", "response"):
            object.__setattr__(self, name, _freeze(np.asarray(getattr(self, name)).ravel()))
        n = self.row_ids.shape[0]
        if self.truth.shape[0] != n or self.response.shape[0] != n:
            raise ValueError(
                f"prediction arrays disagree in length: row_ids={n}, "
                f"truth={self.truth.shape[0]}, response={self.response.shape[0]}"
            )

    @property
    def n(self) -> int:
        return int(self.row_ids.shape[0])

    @property
    def predict_types(self) -> Tuple[str, ...]:
        return ("response",)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"row_id": self.row_ids, "truth": self.truth, "response": self.response})

    def __len__(self) -> int:
        return self.n


@dataclass(frozen=True, eq=False)
class PredictionClassif(Prediction):
    # (n, k) class probabilities, columns in ``class_names`` order
    prob: Optional[np.ndarray] = None
    class_names: Tuple[Any, ...] = ()
    positive: Optional[Any] = None

    task_type: ClassVar[str] = "classif"

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "class_names", tuple(self.class_names))
        if self.prob is not None:
            prob = _freeze(np.asarray(self.prob, dtype=float))
            if prob.ndim != 2 or prob.shape != (self.n, len(self.class_names)):
                raise ValueError(
                    f"prob must have shape ({self.n}, {len(self.class_names)}), got {prob.shape}"
                )
            object.__setattr__(self, "prob", prob)
        if self.positive is None and len(self.class_names) == 2:
            # scikit-learn convention: the last (greater) level is positive.
            object.__setattr__(self, "positive", self.class_names[-1])

    @property
    def predict_types(self) -> Tuple[str, ...]:
        return ("response", "prob") if self.prob is not None else ("response",)

    def prob_of(self, cls: Any) -> np.ndarray:
        if self.prob is None:
            raise ConfigurationError("prediction has no probabilities")
        return self.prob[:, self.class_names.index(cls)]

    def set_threshold(self, threshold: Union[float, Mapping[Any, float]]) -> "PredictionClassif":
        """Relabel from probabilities.

        Binary: a float ``p``; rows with P(positive) >= p become positive.
        Multiclass: a mapping class -> weight; the response is the argmax of
        ``prob / weight`` (first class wins ties).
        """
        if self.prob is None:
            raise ConfigurationError("set_threshold needs probability predictions (predict_type='prob')")

        if isinstance(threshold, Mapping):
            missing = [c for c in self.class_names if c not in threshold]
            if missing:
                raise ConfigurationError(f"thresholds missing for classes {missing}")
            w = np.asarray([float(threshold[c]) for c in self.class_names])
            if np.any(w <= 0):
                raise ConfigurationError("class thresholds must be positive")
            idx = np.argmax(self.prob / w[None, :], axis=1)
            response = np.asarray(self.class_names, dtype=object)[idx]
        else:
            if len(self.class_names) != 2:
                raise ConfigurationError("a scalar threshold needs a binary task; pass a per-class mapping")
            p = float(threshold)
            if not 0.0 <= p <= 1.0:
                raise ConfigurationError(f"threshold must be in [0, 1], got {p}")
            negative = next(c for c in self.class_names if c != self.positive)
            response = np.where(self.prob_of(self.positive) >= p, self.positive, negative)

        return PredictionClassif(
            row_ids=self.row_ids,
            truth=self.truth,
            response=np.asarray(response).astype(self.truth.dtype, copy=False),
            prob=self.prob,
            class_names=self.class_names,
            positive=self.positive,
        )

    def confusion(self) -> pd.DataFrame:
        """Counts with predicted classes as rows and true classes as columns."""
        cm = pd.crosstab(
            pd.Categorical(self.response, categories=list(self.class_names)),
            pd.Categorical(self.truth, categories=list(self.class_names)),
            dropna=False,
        )
        cm.index.name = "response"
        cm.columns.name = "truth"
        return cm

    def to_frame(self) -> pd.DataFrame:
        df = super().to_frame()
        if self.prob is not None:
            for j, c in enumerate(self.class_names):
                df[f"prob.{c}"] = self.prob[:, j]
        return df


@dataclass(frozen=True, eq=False)
class PredictionRegr(Prediction):
    se: Optional[np.ndarray] = None

    task_type: ClassVar[str] = "regr"

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.se is not None:
            se = _freeze(np.asarray(self.se, dtype=float).ravel())
            if se.shape[0] != self.n:
                raise ValueError(f"se has {se.shape[0]} rows, expected {self.n}")
            object.__setattr__(self, "se", se)

    @property
    def predict_types(self) -> Tuple[str, ...]:
        return ("response", "se") if self.se is not None else ("response",)

    def to_frame(self) -> pd.DataFrame:
        df = super().to_frame()
        if self.se is not None:
            df["se"] = self.se
        return df


def combine_predictions(preds: Sequence[Prediction]) -> Prediction:
    """Concatenate predictions of the same type (e.g. all folds of a resampling)."""
    preds = [p for p in preds if p is not None]
    if not preds:
        raise ValueError("no predictions to combine")
    kind = type(preds[0])
    if any(type(p) is not kind for p in preds):
        raise ValueError("cannot combine predictions of different types")

    row_ids = np.concatenate([p.row_ids for p in preds])
    truth = np.concatenate([p.truth for p in preds])
    response = np.concatenate([p.response for p in preds])

    if kind is PredictionClassif:
        first: PredictionClassif = preds[0]  # type: ignore[assignment]
        has_prob = all(p.prob is not None for p in preds)  # type: ignore[attr-defined]
        prob = np.concatenate([p.prob for p in preds], axis=0) if has_prob else None  # type: ignore[attr-defined]
        return PredictionClassif(
            row_ids=row_ids,
            truth=truth,
            response=response,
            prob=prob,
            class_names=first.class_names,
            positive=first.positive,
        )
    if kind is PredictionRegr:
        has_se = all(p.se is not None for p in preds)  # type: ignore[attr-defined]
        se = np.concatenate([p.se for p in preds]) if has_se else None  # type: ignore[attr-defined]
        return PredictionRegr(row_ids=row_ids, truth=truth, response=response, se=se)
    return kind(row_ids=row_ids, truth=truth, response=response)


__all__ = ["Prediction", "PredictionClassif", "PredictionRegr", "combine_predictions"]
