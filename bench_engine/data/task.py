from __future__ import annotations

"""Tasks: a backend bound to column and row roles.

Tasks are immutable snapshots. Every modifier returns a new task that shares
the same :class:`DataBackend`, so role reassignment never copies storage and a
task handed to a worker can never change under it.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import ClassVar, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from bench_engine.core.hashing import stable_hash
from bench_engine.data.backend import DataBackend
from bench_engine.errors import ConfigurationError

COL_ROLES = ("target", "feature", "label", "weight", "ignore")


def _feature_type(series: pd.Series) -> str:
    if pd.api.types.is_bool_dtype(series):
        return "logical"
    if pd.api.types.is_integer_dtype(series):
        return "integer"
    if pd.api.types.is_float_dtype(series):
        return "numeric"
    if isinstance(series.dtype, pd.CategoricalDtype):
        return "factor"
    return "character"


def _frozen_ids(rows: Iterable) -> np.ndarray:
    arr = pd.Index(list(rows)).unique().to_numpy(copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Task:
    id: str
    backend: DataBackend = field(repr=False)
    target: str
    col_roles: Mapping[str, str] = field(default_factory=dict, repr=False)
    use_rows: Optional[np.ndarray] = field(default=None, repr=False)
    validation_rows: Tuple = field(default=(), repr=False)

    task_type: ClassVar[str] = "task"

    def __post_init__(self) -> None:
        cols = set(self.backend.colnames)
        if self.target not in cols:
            raise ConfigurationError(f"task {self.id!r}: target column {self.target!r} not found")

        roles: Dict[str, str] = {}
        for c in self.backend.colnames:
            roles[c] = "feature"
        for c, r in dict(self.col_roles).items():
            if c not in cols:
                raise ConfigurationError(f"task {self.id!r}: unknown column {c!r}")
            if r not in COL_ROLES:
                raise ConfigurationError(f"task {self.id!r}: unknown column role {r!r}")
            roles[c] = r
        for c, r in roles.items():
            if r == "target" and c != self.target:
                raise ConfigurationError(
                    f"task {self.id!r}: column {c!r} has role 'target' but the target is {self.target!r}"
                )
        roles[self.target] = "target"
        if sum(r == "weight" for r in roles.values()) > 1:
            raise ConfigurationError(f"task {self.id!r}: at most one weight column is supported")
        object.__setattr__(self, "col_roles", MappingProxyType(roles))

        validation = tuple(self.validation_rows)
        if self.use_rows is None:
            rows = self.backend.row_ids
        else:
            rows = _frozen_ids(self.use_rows)
            if not self.backend.has_rows(rows):
                raise ConfigurationError(f"task {self.id!r}: row ids not present in the backend")
        if validation:
            rows = rows[~pd.Index(rows).isin(validation)]
            rows.setflags(write=False)
        object.__setattr__(self, "use_rows", rows)
        object.__setattr__(self, "validation_rows", validation)

        if not self.feature_names:
            raise ConfigurationError(f"task {self.id!r}: no feature columns")

    # --- rows ----------------------------------------------------------------

    @property
    def row_ids(self) -> np.ndarray:
        """Row ids with role ``use`` (read-only).

        Backend order, or the order given to :meth:`filter`.
        """
        return self.use_rows  # type: ignore[return-value]

    @property
    def nrow(self) -> int:
        return int(self.row_ids.shape[0])

    # --- columns -------------------------------------------------------------

    def _cols_with(self, role: str) -> Tuple[str, ...]:
        return tuple(c for c, r in self.col_roles.items() if r == role)

    @property
    def feature_names(self) -> Tuple[str, ...]:
        return self._cols_with("feature")

    @property
    def label_names(self) -> Tuple[str, ...]:
        return self._cols_with("label")

    @property
    def weight_name(self) -> Optional[str]:
        names = self._cols_with("weight")
        return names[0] if names else None

    @property
    def feature_types(self) -> Dict[str, str]:
        return {c: _feature_type(self.backend.column(c)) for c in self.feature_names}

    def has_missings(self, rows: Optional[Sequence] = None) -> bool:
        counts = self.backend.missings(self.feature_names, rows)
        return any(v > 0 for v in counts.values())

    # --- data access ---------------------------------------------------------

    def data(self, rows: Optional[Sequence] = None, cols: Optional[Sequence[str]] = None) -> pd.DataFrame:
        rows = self.row_ids if rows is None else rows
        cols = list(self.feature_names) if cols is None else list(cols)
        return self.backend.project(rows, cols)

    def truth(self, rows: Optional[Sequence] = None) -> np.ndarray:
        rows = self.row_ids if rows is None else rows
        return self.backend.project(rows, [self.target])[self.target].to_numpy()

    def weights(self, rows: Optional[Sequence] = None) -> Optional[np.ndarray]:
        """Observation weights of ``rows``; None when no column has role ``weight``."""
        if self.weight_name is None:
            return None
        rows = self.row_ids if rows is None else rows
        return self.backend.project(rows, [self.weight_name])[self.weight_name].to_numpy(dtype=float)

    def strata(self, rows: Optional[Sequence] = None) -> Optional[np.ndarray]:
        """Values used for stratified partitioning; None when not applicable."""
        return None

    # --- modifiers (return new tasks) ---------------------------------------

    def set_col_roles(self, roles: Mapping[str, str]) -> "Task":
        merged = dict(self.col_roles)
        merged.update(roles)
        target = self.target
        new_targets = [c for c, r in roles.items() if r == "target"]
        if new_targets:
            if len(new_targets) > 1:
                raise ConfigurationError("exactly one target column is supported")
            target = new_targets[0]
            if target != self.target and merged.get(self.target) == "target":
                merged[self.target] = "ignore"
        return replace(self, target=target, col_roles=merged)

    def select(self, cols: Sequence[str]) -> "Task":
        """Keep only ``cols`` as features; other features become ``ignore``."""
        keep = set(cols)
        unknown = keep - set(self.feature_names)
        if unknown:
            raise ConfigurationError(f"task {self.id!r}: not features: {sorted(unknown)}")
        roles = {c: ("feature" if c in keep else "ignore") for c in self.feature_names}
        return self.set_col_roles(roles)

    def filter(self, rows: Sequence) -> "Task":
        """Restrict ``use`` rows to ``rows`` (duplicates collapsed, order kept)."""
        return replace(self, use_rows=_frozen_ids(rows), validation_rows=())

    def set_row_roles(self, *, validation: Iterable) -> "Task":
        """Move ``validation`` rows out of the ``use`` set; they never enter a partition."""
        return replace(self, use_rows=self.row_ids, validation_rows=tuple(validation))

    # --- pickling (worker processes) -----------------------------------------

    def __getstate__(self) -> Dict:
        state = dict(self.__dict__)
        state["col_roles"] = dict(self.col_roles)
        return state

    def __setstate__(self, state: Dict) -> None:
        state = dict(state)
        state["col_roles"] = MappingProxyType(state["col_roles"])
        self.__dict__.update(state)

    # --- identity ------------------------------------------------------------

    @property
    def hash(self) -> str:
        return stable_hash(
            [self.task_type, self.id, self.target, self.feature_names, self.weight_name, tuple(self.row_ids.tolist())]
        )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.id!r}: {self.nrow} rows, "
            f"{len(self.feature_names)} features, target={self.target!r}>"
        )


@dataclass(frozen=True, eq=False, repr=False)
class TaskClassif(Task):
    positive: Optional[object] = None

    task_type: ClassVar[str] = "classif"

    def __post_init__(self) -> None:
        super().__post_init__()
        # Class levels come from the full backend column so every subset of
        # this task agrees on probability column order.
        col = self.backend.column(self.target)
        if isinstance(col.dtype, pd.CategoricalDtype):
            levels = list(col.cat.categories)
        else:
            levels = sorted(pd.unique(col.dropna()).tolist(), key=lambda v: (str(type(v)), v))
        if len(levels) < 2:
            raise ConfigurationError(f"task {self.id!r}: classification needs at least 2 classes")
        if self.positive is not None and self.positive not in levels:
            raise ConfigurationError(f"task {self.id!r}: positive class {self.positive!r} not in {levels}")
        object.__setattr__(self, "_class_names", tuple(levels))

    @property
    def class_names(self) -> Tuple:
        return self._class_names  # type: ignore[attr-defined]

    @property
    def properties(self) -> frozenset:
        return frozenset({"twoclass"} if len(self.class_names) == 2 else {"multiclass"})

    def strata(self, rows: Optional[Sequence] = None) -> Optional[np.ndarray]:
        return self.truth(rows)


@dataclass(frozen=True, eq=False, repr=False)
class TaskRegr(Task):
    task_type: ClassVar[str] = "regr"

    @property
    def properties(self) -> frozenset:
        return frozenset()
