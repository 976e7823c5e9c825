from __future__ import annotations

from dataclasses import replace
from typing import Any

from bench_engine.components.measures.measure import Measure
from bench_engine.errors import ConfigurationError
from bench_engine.registries.base import Registry

_MEASURES: Registry[str, Measure] = Registry(_name="measures")

_BUILTINS_LOADED = False


def register_measure(measure: Measure) -> Measure:
    return _MEASURES.register(measure.id)(measure)


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    from bench_engine.registries.builtins import measures as _  # noqa: F401
    _BUILTINS_LOADED = True


def msr(key: str, **overrides: Any) -> Measure:
    """Look up a measure, e.g. ``msr("classif.ce")`` or ``msr("classif.ce", average="micro")``.

    ``overrides`` may set ``id``, ``average`` or ``aggregator``.
    """
    _ensure_builtins()
    m = _MEASURES.get(key)
    unknown = set(overrides) - {"id", "average", "aggregator"}
    if unknown:
        raise ConfigurationError(f"measure {key!r}: cannot override {sorted(unknown)}")
    average = overrides.pop("average", None)
    if overrides:
        m = replace(m, **overrides)
    if average is not None:
        m = m.with_average(average)
    return m


def list_measures() -> list[str]:
    _ensure_builtins()
    return sorted(_MEASURES.keys())
