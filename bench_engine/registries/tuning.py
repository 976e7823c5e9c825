from __future__ import annotations

from typing import Any, Dict, Type

from pydantic import BaseModel, ValidationError

from bench_engine.components.tuning.terminators import make_terminator
from bench_engine.contracts.tuning_configs import (
    ComboConfig,
    DesignPointsConfig,
    EvalsConfig,
    GridSearchConfig,
    NoTerminationConfig,
    PerfReachedConfig,
    RandomSearchConfig,
    RunTimeConfig,
    SequentialSearchConfig,
    StagnationConfig,
    TerminatorConfig,
    TunerConfig,
)
from bench_engine.errors import ConfigurationError
from bench_engine.registries.base import Registry

_TUNERS: Registry[str, Type[BaseModel]] = Registry(_name="tuners")
_TERMINATORS: Registry[str, Type[BaseModel]] = Registry(_name="terminators")

for _cls in (GridSearchConfig, RandomSearchConfig, DesignPointsConfig, SequentialSearchConfig):
    _TUNERS.register(_cls.model_fields["kind"].default)(_cls)

for _cls in (EvalsConfig, RunTimeConfig, PerfReachedConfig, StagnationConfig, NoTerminationConfig, ComboConfig):
    _TERMINATORS.register(_cls.model_fields["kind"].default)(_cls)


def _build(registry: Registry[str, Type[BaseModel]], what: str, key: str, params: Dict[str, Any]) -> Any:
    cls = registry.get(key)
    try:
        return cls(**params)
    except ValidationError as e:
        raise ConfigurationError(f"{what} {key!r}: {e}") from e


def tnr(key: str, **params: Any) -> TunerConfig:
    """Tuner config by key, e.g. ``tnr("grid_search", resolution=5)``."""
    cfg = _build(_TUNERS, "tuner", key, params)
    if cfg.batch_size < 1:
        raise ConfigurationError(f"tuner {key!r}: batch_size must be >= 1, got {cfg.batch_size}")
    if getattr(cfg, "resolution", 1) < 1:
        raise ConfigurationError(f"tuner {key!r}: resolution must be >= 1, got {cfg.resolution}")
    return cfg


def trm(key: str, **params: Any) -> TerminatorConfig:
    """Terminator config by key, e.g. ``trm("evals", n_evals=20)``.

    For ``combo`` pass ``terminators=[trm(...), ...]``. Parameter domains are
    checked immediately.
    """
    cfg = _build(_TERMINATORS, "terminator", key, params)
    make_terminator(cfg)
    return cfg


def list_tuners() -> list[str]:
    return sorted(_TUNERS.keys())


def list_terminators() -> list[str]:
    return sorted(_TERMINATORS.keys())
