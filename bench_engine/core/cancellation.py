from __future__ import annotations

"""Cooperative cancellation.

Engines check a token between dispatched units only; a unit that already
started always runs to completion.
"""

import time
from threading import Event
from typing import Optional


class CancellationToken:
    """Thread-safe cancel flag with an optional deadline.

    ``timeout`` is measured from construction with a monotonic clock.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = Event()
        self._deadline = None if timeout is None else time.monotonic() + float(timeout)
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("timeout reached")
            return True
        return False


def resolve_token(
    cancel: Optional[CancellationToken],
    timeout: Optional[float],
) -> Optional[CancellationToken]:
    """Merge an explicit token with an options-level timeout.

    A caller-provided token wins; a timeout alone creates a fresh token.
    """
    if cancel is not None:
        return cancel
    if timeout is not None:
        return CancellationToken(timeout=timeout)
    return None
