from __future__ import annotations

"""In-memory tabular backend.

Row identifiers are assigned once at construction (the frame index or a
primary-key column) and never change. Tasks share a backend read-only; role
changes on a task never copy the underlying frame.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from bench_engine.errors import ConfigurationError


class DataBackend:
    def __init__(self, data: pd.DataFrame, *, primary_key: Optional[str] = None) -> None:
        if not isinstance(data, pd.DataFrame):
            raise ConfigurationError(f"DataBackend expects a pandas DataFrame, got {type(data).__name__}")

        frame = data.copy()
        if primary_key is not None:
            if primary_key not in frame.columns:
                raise ConfigurationError(f"primary key column {primary_key!r} not found")
            frame = frame.set_index(primary_key, drop=True)

        if not frame.index.is_unique:
            raise ConfigurationError("row identifiers must be unique")
        for v in frame.index[:1]:
            if not isinstance(v, (int, np.integer, str)):
                raise ConfigurationError(
                    f"row identifiers must be integers or strings, got {type(v).__name__}"
                )

        self._frame = frame
        self._row_ids = frame.index.to_numpy(copy=True)
        self._row_ids.setflags(write=False)

    @classmethod
    def from_arrays(
        cls,
        X: np.ndarray,
        y: Optional[np.ndarray] = None,
        *,
        feature_names: Optional[Sequence[str]] = None,
        target: str = "y",
    ) -> "DataBackend":
        """Build a backend from an (n_samples, n_features) matrix plus optional target."""
        X = np.asarray(X)
        if X.ndim == 1:
            X = X[:, None]
        if X.ndim != 2:
            raise ConfigurationError(f"X must be 2D; got {X.shape}")
        names = list(feature_names) if feature_names is not None else [f"x{i + 1}" for i in range(X.shape[1])]
        if len(names) != X.shape[1]:
            raise ConfigurationError(f"{len(names)} feature names for {X.shape[1]} columns")
        frame = pd.DataFrame(X, columns=names)
        if y is not None:
            y = np.asarray(y).ravel()
            if y.shape[0] != X.shape[0]:
                raise ConfigurationError(f"X and y length mismatch: {X.shape[0]} vs {y.shape[0]}")
            frame[target] = y
        return cls(frame)

    @property
    def row_ids(self) -> np.ndarray:
        return self._row_ids

    def row_count(self) -> int:
        return int(self._row_ids.shape[0])

    @property
    def colnames(self) -> list[str]:
        return [str(c) for c in self._frame.columns]

    def has_rows(self, rows: Sequence) -> bool:
        return bool(pd.Index(rows).isin(self._frame.index).all())

    def project(self, rows: Sequence, cols: Sequence[str]) -> pd.DataFrame:
        """Return the ``rows`` x ``cols`` block as a new frame, in the order given."""
        missing_cols = [c for c in cols if c not in self._frame.columns]
        if missing_cols:
            raise KeyError(f"unknown columns: {missing_cols}")
        return self._frame.loc[list(rows), list(cols)]

    def column(self, col: str) -> pd.Series:
        return self._frame[col]

    def missings(self, cols: Sequence[str], rows: Optional[Sequence] = None) -> dict[str, int]:
        block = self._frame[list(cols)] if rows is None else self._frame.loc[list(rows), list(cols)]
        return {str(k): int(v) for k, v in block.isna().sum().items()}

    def __repr__(self) -> str:
        return f"<DataBackend {self.row_count()} rows x {len(self._frame.columns)} cols>"
