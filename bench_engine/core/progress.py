from __future__ import annotations

"""Progress reporting primitives.

The engine must remain runnable without any specific UI. Use-cases accept an
optional progress callback to report long-running operations (resampling,
benchmarks, tuning batches).
"""

from typing import Optional, Protocol


class ProgressCallback(Protocol):
    """A minimal progress reporting interface."""

    def init(self, *, total: int, label: Optional[str] = None) -> None:  # pragma: no cover
        ...

    def update(self, *, current: int, label: Optional[str] = None) -> None:  # pragma: no cover
        ...

    def finalize(self, *, label: Optional[str] = None) -> None:  # pragma: no cover
        ...


class _ProgressAdapter:
    """Forward to an optional callback; no-op when none is given."""

    def __init__(self, cb: Optional[ProgressCallback]) -> None:
        self._cb = cb
        self._current = 0

    def init(self, total: int, label: Optional[str] = None) -> None:
        self._current = 0
        if self._cb is not None:
            self._cb.init(total=int(total), label=label)

    def advance(self, n: int = 1, label: Optional[str] = None) -> None:
        self._current += int(n)
        if self._cb is not None:
            self._cb.update(current=self._current, label=label)

    def finalize(self, label: Optional[str] = None) -> None:
        if self._cb is not None:
            self._cb.finalize(label=label)


def wrap_progress(cb: Optional[ProgressCallback]) -> _ProgressAdapter:
    return _ProgressAdapter(cb)
