from __future__ import annotations

"""Terminators decide, between batches, whether a tuning run stops."""

import time
from typing import ClassVar, List, Optional

import numpy as np

from bench_engine.components.tuning.archive import TuningArchive
from bench_engine.contracts.tuning_configs import (
    ComboConfig,
    EvalsConfig,
    NoTerminationConfig,
    PerfReachedConfig,
    RunTimeConfig,
    StagnationConfig,
    TerminatorConfig,
)
from bench_engine.errors import ConfigurationError


class Terminator:
    guarantees_termination: ClassVar[bool] = False

    def start(self) -> None:
        """Called once when the tuning run begins."""

    def is_terminated(self, archive: TuningArchive) -> bool:
        raise NotImplementedError

    @property
    def reason(self) -> str:
        return type(self).__name__


class Evals(Terminator):
    guarantees_termination = True

    def __init__(self, config: EvalsConfig) -> None:
        if config.n_evals < 1:
            raise ConfigurationError(f"evals: n_evals must be >= 1, got {config.n_evals}")
        self.n_evals = int(config.n_evals)

    def is_terminated(self, archive: TuningArchive) -> bool:
        return archive.n_evals >= self.n_evals

    @property
    def reason(self) -> str:
        return f"{self.n_evals} evaluations reached"


class RunTime(Terminator):
    guarantees_termination = True

    def __init__(self, config: RunTimeConfig) -> None:
        if config.secs <= 0:
            raise ConfigurationError(f"run_time: secs must be > 0, got {config.secs}")
        self.secs = float(config.secs)
        self._t0: Optional[float] = None

    def start(self) -> None:
        self._t0 = time.monotonic()

    def is_terminated(self, archive: TuningArchive) -> bool:
        if self._t0 is None:
            self.start()
        return time.monotonic() - self._t0 >= self.secs  # type: ignore[operator]

    @property
    def reason(self) -> str:
        return f"run time of {self.secs}s reached"


class PerfReached(Terminator):
    def __init__(self, config: PerfReachedConfig) -> None:
        self.level = float(config.level)

    def is_terminated(self, archive: TuningArchive) -> bool:
        best = archive.best()
        if best is None:
            return False
        if archive.measure.minimize:
            return best.score <= self.level
        return best.score >= self.level

    @property
    def reason(self) -> str:
        return f"performance level {self.level} reached"


class Stagnation(Terminator):
    """Stop when the last ``iters`` evaluations improved the best score by at most ``threshold``."""

    def __init__(self, config: StagnationConfig) -> None:
        if config.iters < 1:
            raise ConfigurationError(f"stagnation: iters must be >= 1, got {config.iters}")
        self.iters = int(config.iters)
        self.threshold = float(config.threshold)

    def is_terminated(self, archive: TuningArchive) -> bool:
        scores = archive.scores
        if scores.size <= self.iters:
            return False
        before, recent = scores[: -self.iters], scores[-self.iters :]
        if np.all(np.isnan(before)):
            return False
        if np.all(np.isnan(recent)):
            return True
        if archive.measure.minimize:
            gain = np.nanmin(before) - np.nanmin(recent)
        else:
            gain = np.nanmax(recent) - np.nanmax(before)
        return bool(gain <= self.threshold)

    @property
    def reason(self) -> str:
        return f"no improvement above {self.threshold} in {self.iters} evaluations"


class NoTermination(Terminator):
    def is_terminated(self, archive: TuningArchive) -> bool:
        return False


class Combo(Terminator):
    """``any=True``: stop when any member stops (first satisfied member is the reason)."""

    def __init__(self, config: ComboConfig) -> None:
        if not config.terminators:
            raise ConfigurationError("combo: at least one terminator is required")
        self.members: List[Terminator] = [make_terminator(c) for c in config.terminators]
        self.any = bool(config.any)
        self._fired: Optional[Terminator] = None

    @property
    def guarantees_termination(self) -> bool:  # type: ignore[override]
        flags = [m.guarantees_termination for m in self.members]
        return any(flags) if self.any else all(flags)

    def start(self) -> None:
        for m in self.members:
            m.start()

    def is_terminated(self, archive: TuningArchive) -> bool:
        if self.any:
            for m in self.members:
                if m.is_terminated(archive):
                    self._fired = m
                    return True
            return False
        if all(m.is_terminated(archive) for m in self.members):
            self._fired = self.members[-1]
            return True
        return False

    @property
    def reason(self) -> str:
        if self._fired is None:
            return "combo"
        return self._fired.reason if self.any else "all terminators satisfied"


_TERMINATORS = {
    "evals": Evals,
    "run_time": RunTime,
    "perf_reached": PerfReached,
    "stagnation": Stagnation,
    "none": lambda config: NoTermination(),
    "combo": Combo,
}


def make_terminator(config: TerminatorConfig) -> Terminator:
    return _TERMINATORS[config.kind](config)


__all__ = [
    "Terminator",
    "Evals",
    "RunTime",
    "PerfReached",
    "Stagnation",
    "NoTermination",
    "Combo",
    "make_terminator",
]
