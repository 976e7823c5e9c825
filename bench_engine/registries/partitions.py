from __future__ import annotations

from typing import Any, Callable, Dict, Type

from pydantic import ValidationError

from bench_engine.contracts.partition_configs import (
    AnySpec,
    BootstrapSpec,
    CustomSpec,
    CVSpec,
    HoldoutSpec,
    LOOSpec,
    SubsamplingSpec,
)
from bench_engine.errors import ConfigurationError
from bench_engine.registries.base import Registry

StrategyFn = Callable[..., Any]

# strategy name (spec.strategy) -> position-level generator
_STRATEGIES: Registry[str, StrategyFn] = Registry(_name="partition strategies")

# user-facing key -> (spec class, default params)
_SPECS: Registry[str, tuple[Type[AnySpec], Dict[str, Any]]] = Registry(_name="resamplings")

_SPECS.register("holdout")((HoldoutSpec, {}))
_SPECS.register("cv")((CVSpec, {}))
_SPECS.register("repeated_cv")((CVSpec, {"repeats": 10}))
_SPECS.register("loo")((LOOSpec, {}))
_SPECS.register("bootstrap")((BootstrapSpec, {}))
_SPECS.register("subsampling")((SubsamplingSpec, {}))
_SPECS.register("custom")((CustomSpec, {}))

_BUILTINS_LOADED = False


def register_strategy(name: str) -> Callable[[StrategyFn], StrategyFn]:
    return _STRATEGIES.register(name.lower())


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    from bench_engine.registries.builtins import partitions as _  # noqa: F401
    _BUILTINS_LOADED = True


def get_strategy(name: str) -> StrategyFn:
    _ensure_builtins()
    return _STRATEGIES.get(str(name).lower())


def rsmp(key: str, **params: Any) -> AnySpec:
    """Build a partition spec by key, e.g. ``rsmp("cv", folds=3, seed=1)``.

    Parameters are checked against their domain immediately.
    """
    spec_cls, defaults = _SPECS.get(key)
    kwargs = dict(defaults)
    kwargs.update(params)
    try:
        spec = spec_cls(**kwargs)
    except ValidationError as e:
        raise ConfigurationError(f"resampling {key!r}: {e}") from e
    spec.check_params()
    return spec


def list_resamplings() -> list[str]:
    return sorted(list(_SPECS.keys()))
