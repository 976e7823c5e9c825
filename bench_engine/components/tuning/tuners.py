from __future__ import annotations

"""Tuners propose batches of configurations.

A tuner is built fresh for each tuning run from its config. ``propose``
returns an empty list once a finite tuner is exhausted.
"""

from typing import Any, ClassVar, Dict, List

from bench_engine.components.learners.params import ParamSet
from bench_engine.components.tuning.archive import TuningArchive
from bench_engine.contracts.tuning_configs import (
    DesignPointsConfig,
    GridSearchConfig,
    RandomSearchConfig,
    SequentialSearchConfig,
    TunerConfig,
)
from bench_engine.errors import ConfigurationError
from bench_engine.runtime.random import RngManager, resolve_seed


def _check_batch_size(n: int) -> int:
    if n < 1:
        raise ConfigurationError(f"batch_size must be >= 1, got {n}")
    return int(n)


class Tuner:
    finite: ClassVar[bool] = False

    def __init__(self, search_space: ParamSet) -> None:
        self.search_space = search_space

    def propose(self, archive: TuningArchive) -> List[Dict[str, Any]]:
        raise NotImplementedError


class GridSearch(Tuner):
    """Cartesian grid, evaluated in grid order."""

    finite = True

    def __init__(self, search_space: ParamSet, config: GridSearchConfig) -> None:
        super().__init__(search_space)
        self.batch_size = _check_batch_size(config.batch_size)
        self._grid = search_space.grid(config.resolution, config.param_resolutions)
        self._cursor = 0

    @property
    def n_points(self) -> int:
        return len(self._grid)

    def propose(self, archive: TuningArchive) -> List[Dict[str, Any]]:
        batch = self._grid[self._cursor : self._cursor + self.batch_size]
        self._cursor += len(batch)
        return [dict(c) for c in batch]


class DesignPoints(Tuner):
    finite = True

    def __init__(self, search_space: ParamSet, config: DesignPointsConfig) -> None:
        super().__init__(search_space)
        self.batch_size = _check_batch_size(config.batch_size)
        if not config.design:
            raise ConfigurationError("design_points: the design is empty")
        for k, point in enumerate(config.design, start=1):
            unknown = set(point) - set(search_space.ids)
            if unknown:
                raise ConfigurationError(f"design_points: point {k} sets parameters outside the search space: {sorted(unknown)}")
            search_space.validate(point, context=f"design_points: point {k}")
        self._design = [dict(p) for p in config.design]
        self._cursor = 0

    def propose(self, archive: TuningArchive) -> List[Dict[str, Any]]:
        batch = self._design[self._cursor : self._cursor + self.batch_size]
        self._cursor += len(batch)
        return [dict(c) for c in batch]


class RandomSearch(Tuner):
    """Independent uniform draws (log-uniform on logscale parameters)."""

    def __init__(self, search_space: ParamSet, config: RandomSearchConfig) -> None:
        super().__init__(search_space)
        if not search_space.is_bounded:
            raise ConfigurationError("random_search needs a bounded search space")
        self.batch_size = _check_batch_size(config.batch_size)
        self._rng = RngManager(resolve_seed(config.seed)).child_generator("random_search")

    def propose(self, archive: TuningArchive) -> List[Dict[str, Any]]:
        return self.search_space.sample(self.batch_size, self._rng)


class SequentialSearch(Tuner):
    """Random initial design, then perturbations of the incumbent."""

    def __init__(self, search_space: ParamSet, config: SequentialSearchConfig) -> None:
        super().__init__(search_space)
        if not search_space.is_bounded:
            raise ConfigurationError("sequential_search needs a bounded search space")
        if config.n_initial < 1:
            raise ConfigurationError(f"n_initial must be >= 1, got {config.n_initial}")
        if config.step <= 0:
            raise ConfigurationError(f"step must be > 0, got {config.step}")
        self.batch_size = _check_batch_size(config.batch_size)
        self.n_initial = int(config.n_initial)
        self.step = float(config.step)
        self._rng = RngManager(resolve_seed(config.seed)).child_generator("sequential_search")

    def propose(self, archive: TuningArchive) -> List[Dict[str, Any]]:
        if archive.n_evals < self.n_initial:
            n = min(self.batch_size, self.n_initial - archive.n_evals)
            return self.search_space.sample(n, self._rng)
        incumbent = archive.best()
        if incumbent is None:
            return self.search_space.sample(self.batch_size, self._rng)
        return [self.search_space.perturb(incumbent.config, self._rng, self.step) for _ in range(self.batch_size)]


_TUNERS = {
    "grid_search": GridSearch,
    "design_points": DesignPoints,
    "random_search": RandomSearch,
    "sequential_search": SequentialSearch,
}


def tuner_is_finite(config: TunerConfig) -> bool:
    return _TUNERS[config.kind].finite


def make_tuner(config: TunerConfig, search_space: ParamSet) -> Tuner:
    """Build a fresh tuner for one run."""
    if len(search_space) == 0:
        raise ConfigurationError("the search space is empty")
    return _TUNERS[config.kind](search_space, config)


__all__ = [
    "Tuner",
    "GridSearch",
    "DesignPoints",
    "RandomSearch",
    "SequentialSearch",
    "make_tuner",
    "tuner_is_finite",
]
