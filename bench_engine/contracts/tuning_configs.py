from __future__ import annotations

"""Tuner and terminator configs.

Tuners propose hyperparameter configurations; terminators decide when a tuning
run stops. Both are resolved to strategy objects through
:mod:`bench_engine.registries.tuning`.
"""

from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _TuningConfigBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class GridSearchConfig(_TuningConfigBase):
    """Exhaustive search over a grid built from the search space."""
    kind: Literal["grid_search"] = "grid_search"
    resolution: int = 10
    param_resolutions: Dict[str, int] = Field(default_factory=dict)
    batch_size: int = 1


class RandomSearchConfig(_TuningConfigBase):
    kind: Literal["random_search"] = "random_search"
    batch_size: int = 1
    seed: Optional[int] = None


class DesignPointsConfig(_TuningConfigBase):
    """Evaluate a user supplied list of configurations, in order."""
    kind: Literal["design_points"] = "design_points"
    design: Tuple[Dict[str, Any], ...] = ()
    batch_size: int = 1


class SequentialSearchConfig(_TuningConfigBase):
    """Random start, then local perturbation of the incumbent."""
    kind: Literal["sequential_search"] = "sequential_search"
    n_initial: int = 4
    batch_size: int = 1
    # Perturbation scale relative to each numeric range.
    step: float = 0.1
    seed: Optional[int] = None


TunerConfig = Union[GridSearchConfig, RandomSearchConfig, DesignPointsConfig, SequentialSearchConfig]


class EvalsConfig(_TuningConfigBase):
    kind: Literal["evals"] = "evals"
    n_evals: int = 100


class RunTimeConfig(_TuningConfigBase):
    kind: Literal["run_time"] = "run_time"
    secs: float = 30.0


class PerfReachedConfig(_TuningConfigBase):
    kind: Literal["perf_reached"] = "perf_reached"
    level: float = 0.1


class StagnationConfig(_TuningConfigBase):
    kind: Literal["stagnation"] = "stagnation"
    iters: int = 10
    threshold: float = 0.0


class NoTerminationConfig(_TuningConfigBase):
    kind: Literal["none"] = "none"


class ComboConfig(_TuningConfigBase):
    kind: Literal["combo"] = "combo"
    terminators: List["TerminatorConfig"] = Field(default_factory=list)
    # True: stop when any member stops; False: when all stop.
    any: bool = True


TerminatorConfig = Union[
    EvalsConfig,
    RunTimeConfig,
    PerfReachedConfig,
    StagnationConfig,
    NoTerminationConfig,
    ComboConfig,
]

ComboConfig.model_rebuild()

__all__ = [
    "GridSearchConfig",
    "RandomSearchConfig",
    "DesignPointsConfig",
    "SequentialSearchConfig",
    "TunerConfig",
    "EvalsConfig",
    "RunTimeConfig",
    "PerfReachedConfig",
    "StagnationConfig",
    "NoTerminationConfig",
    "ComboConfig",
    "TerminatorConfig",
]
