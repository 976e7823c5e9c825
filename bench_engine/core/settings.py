from __future__ import annotations

"""Environment-driven defaults.

``BENCH_ENGINE_N_JOBS``     default worker count for parallel runs (-1 = all cores)
``BENCH_ENGINE_BACKEND``    joblib backend, ``loky`` or ``threading``
``BENCH_ENGINE_LOG_LEVEL``  level used by :func:`configure_logging`
"""

import logging
import os
from typing import Optional

_BACKENDS = ("loky", "threading")


def default_n_jobs() -> int:
    raw = os.environ.get("BENCH_ENGINE_N_JOBS", "-1")
    try:
        return int(raw)
    except ValueError:
        return -1


def default_backend() -> str:
    raw = os.environ.get("BENCH_ENGINE_BACKEND", "loky").strip().lower()
    return raw if raw in _BACKENDS else "loky"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a stream handler to the package logger (scripts only)."""
    lvl = (level or os.environ.get("BENCH_ENGINE_LOG_LEVEL", "INFO")).upper()
    logger = logging.getLogger("bench_engine")
    logger.setLevel(getattr(logging, lvl, logging.INFO))
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
