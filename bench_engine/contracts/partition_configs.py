from __future__ import annotations

"""Partition (resampling) strategy configs.

Pydantic validates shape and types; the *domain* of each parameter (ratios in
(0, 1), at least two folds, enough rows) is checked by :meth:`check_params` and
:meth:`check_rows` and reported as :class:`~bench_engine.errors.ConfigurationError`.
"""

import math
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from bench_engine.errors import ConfigurationError

RowId = Union[int, str]


def train_size(ratio: float, n: int) -> int:
    """Number of training rows for ``ratio`` of ``n`` (round half up)."""
    return int(math.floor(ratio * n + 0.5))


class _SpecBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    seed: Optional[int] = None

    @property
    def id(self) -> str:
        return str(getattr(self, "strategy"))

    def check_params(self) -> None:
        """Raise ConfigurationError when a parameter is outside its domain."""

    def check_rows(self, n: int) -> None:
        """Raise ConfigurationError when ``n`` rows are too few for this strategy."""

    def expected_iters(self, n: int) -> int:
        raise NotImplementedError


class HoldoutSpec(_SpecBase):
    strategy: Literal["holdout"] = "holdout"
    ratio: float = 2.0 / 3.0
    stratify: bool = False

    def check_params(self) -> None:
        if not 0.0 < self.ratio < 1.0:
            raise ConfigurationError(f"holdout: ratio must be in (0, 1), got {self.ratio}")

    def check_rows(self, n: int) -> None:
        n_train = train_size(self.ratio, n)
        if n < 2 or n_train < 1 or n_train > n - 1:
            raise ConfigurationError(
                f"holdout: ratio={self.ratio} on {n} rows leaves an empty train or test set"
            )

    def expected_iters(self, n: int) -> int:
        return 1


class CVSpec(_SpecBase):
    strategy: Literal["cv"] = "cv"
    folds: int = 10
    repeats: int = 1
    stratify: bool = False

    @property
    def id(self) -> str:
        return "cv" if self.repeats == 1 else "repeated_cv"

    def check_params(self) -> None:
        if self.folds < 2:
            raise ConfigurationError(f"cv: folds must be >= 2, got {self.folds}")
        if self.repeats < 1:
            raise ConfigurationError(f"cv: repeats must be >= 1, got {self.repeats}")

    def check_rows(self, n: int) -> None:
        if self.folds > n:
            raise ConfigurationError(f"cv: folds={self.folds} exceeds the number of rows ({n})")

    def expected_iters(self, n: int) -> int:
        return self.folds * self.repeats


class LOOSpec(_SpecBase):
    strategy: Literal["loo"] = "loo"

    def check_rows(self, n: int) -> None:
        if n < 2:
            raise ConfigurationError(f"loo: needs at least 2 rows, got {n}")

    def expected_iters(self, n: int) -> int:
        return n


class BootstrapSpec(_SpecBase):
    strategy: Literal["bootstrap"] = "bootstrap"
    repeats: int = 30
    ratio: float = 1.0

    def check_params(self) -> None:
        if self.repeats < 1:
            raise ConfigurationError(f"bootstrap: repeats must be >= 1, got {self.repeats}")
        if not self.ratio > 0.0:
            raise ConfigurationError(f"bootstrap: ratio must be > 0, got {self.ratio}")

    def check_rows(self, n: int) -> None:
        if n < 2 or train_size(self.ratio, n) < 1:
            raise ConfigurationError(f"bootstrap: ratio={self.ratio} on {n} rows draws no rows")

    def expected_iters(self, n: int) -> int:
        return self.repeats


class SubsamplingSpec(_SpecBase):
    strategy: Literal["subsampling"] = "subsampling"
    repeats: int = 30
    ratio: float = 2.0 / 3.0
    stratify: bool = False

    def check_params(self) -> None:
        if self.repeats < 1:
            raise ConfigurationError(f"subsampling: repeats must be >= 1, got {self.repeats}")
        if not 0.0 < self.ratio < 1.0:
            raise ConfigurationError(f"subsampling: ratio must be in (0, 1), got {self.ratio}")

    def check_rows(self, n: int) -> None:
        n_train = train_size(self.ratio, n)
        if n < 2 or n_train < 1 or n_train > n - 1:
            raise ConfigurationError(
                f"subsampling: ratio={self.ratio} on {n} rows leaves an empty train or test set"
            )

    def expected_iters(self, n: int) -> int:
        return self.repeats


class CustomSpec(_SpecBase):
    """Explicit train/test id lists; only disjointness is checked."""

    strategy: Literal["custom"] = "custom"
    train_sets: Tuple[Tuple[RowId, ...], ...] = ()
    test_sets: Tuple[Tuple[RowId, ...], ...] = ()

    def check_params(self) -> None:
        if len(self.train_sets) != len(self.test_sets):
            raise ConfigurationError(
                f"custom: {len(self.train_sets)} train sets but {len(self.test_sets)} test sets"
            )
        if not self.train_sets:
            raise ConfigurationError("custom: at least one train/test pair is required")
        for i, (tr, te) in enumerate(zip(self.train_sets, self.test_sets), start=1):
            overlap = set(tr) & set(te)
            if overlap:
                raise ConfigurationError(
                    f"custom: pair {i} shares {len(overlap)} row ids between train and test"
                )

    def expected_iters(self, n: int) -> int:
        return len(self.train_sets)


PartitionSpec = Annotated[
    Union[HoldoutSpec, CVSpec, LOOSpec, BootstrapSpec, SubsamplingSpec, CustomSpec],
    Field(discriminator="strategy"),
]

AnySpec = Union[HoldoutSpec, CVSpec, LOOSpec, BootstrapSpec, SubsamplingSpec, CustomSpec]

__all__ = [
    "RowId",
    "train_size",
    "HoldoutSpec",
    "CVSpec",
    "LOOSpec",
    "BootstrapSpec",
    "SubsamplingSpec",
    "CustomSpec",
    "PartitionSpec",
    "AnySpec",
]
