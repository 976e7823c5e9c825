from __future__ import annotations

from typing import Any, Callable

from bench_engine.components.learners.base import Learner
from bench_engine.registries.base import Registry

LearnerFactory = Callable[..., Learner]

_LEARNERS: Registry[str, LearnerFactory] = Registry(_name="learners")

_BUILTINS_LOADED = False


def register_learner(key: str) -> Callable[[LearnerFactory], LearnerFactory]:
    return _LEARNERS.register(key)


def _ensure_builtins() -> None:
    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return
    from bench_engine.registries.builtins import learners as _  # noqa: F401
    _BUILTINS_LOADED = True


def lrn(key: str, **params: Any) -> Learner:
    """Build a learner by key, e.g. ``lrn("classif.tree", max_depth=3)``.

    ``predict_type`` is accepted alongside hyperparameter values.
    """
    _ensure_builtins()
    return _LEARNERS.get(key)(**params)


def list_learners() -> list[str]:
    _ensure_builtins()
    return sorted(_LEARNERS.keys())
