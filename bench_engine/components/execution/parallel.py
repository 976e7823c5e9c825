from __future__ import annotations

"""Unit dispatch: sequential loop or a joblib worker pool.

Results come back in submission order. Cancellation is checked before each
unit (sequential) or before each batch of ``n_jobs`` units (parallel); units
that never started are handed to ``on_cancel`` instead of ``fn``.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from joblib import Parallel, cpu_count, delayed, effective_n_jobs

from bench_engine.core.cancellation import CancellationToken
from bench_engine.core.progress import _ProgressAdapter

logger = logging.getLogger(__name__)

U = TypeVar("U")
R = TypeVar("R")


def _call(fn: Callable[..., R], unit: Any) -> R:
    return fn(*unit)


def n_workers(n_jobs: int, total: int) -> int:
    """Pool size: ``n_jobs`` bounded by the available CPUs and the number of units."""
    if n_jobs == 1:
        return 1
    return max(1, min(effective_n_jobs(n_jobs), cpu_count(), total))


def run_units(
    fn: Callable[..., R],
    units: Sequence[Sequence[Any]],
    *,
    n_jobs: int = 1,
    backend: str = "loky",
    cancel: Optional[CancellationToken] = None,
    on_cancel: Callable[[Sequence[Any], str], R],
    progress: Optional[_ProgressAdapter] = None,
    label: str = "iterations",
) -> List[R]:
    """Apply ``fn(*unit)`` to every unit; ``fn`` must be a module-level function."""
    out: List[R] = []
    total = len(units)
    if progress is not None:
        progress.init(total, label)

    workers = n_workers(n_jobs, total)

    def _skip_rest(start: int) -> None:
        reason = (cancel.reason if cancel is not None else None) or "cancelled"
        logger.warning("cancelled (%s): skipping %d of %d units", reason, total - start, total)
        out.extend(on_cancel(u, reason) for u in units[start:])

    if workers == 1:
        for i, unit in enumerate(units):
            if cancel is not None and cancel.cancelled:
                _skip_rest(i)
                break
            out.append(fn(*unit))
            if progress is not None:
                progress.advance(1, label)
    else:
        logger.debug("dispatching %d units to %d %s workers", total, workers, backend)
        with Parallel(n_jobs=workers, backend=backend) as parallel:
            for start in range(0, total, workers):
                if cancel is not None and cancel.cancelled:
                    _skip_rest(start)
                    break
                batch = units[start : start + workers]
                out.extend(parallel(delayed(_call)(fn, u) for u in batch))
                if progress is not None:
                    progress.advance(len(batch), label)

    if progress is not None:
        progress.finalize(label)
    return out


__all__ = ["n_workers", "run_units"]
