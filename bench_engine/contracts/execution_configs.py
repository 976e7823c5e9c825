from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from bench_engine.core.settings import default_backend, default_n_jobs


class ExecutionOptions(BaseModel):
    """How resampling/benchmark units are executed.

    Predictions are always retained; fitted models only when ``retain_models``
    is set, to bound memory across the full partition x learner product.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    retain_models: bool = False
    parallel: bool = False
    # None -> BENCH_ENGINE_N_JOBS / BENCH_ENGINE_BACKEND
    n_jobs: Optional[int] = None
    backend: Optional[Literal["loky", "threading"]] = None
    # Seconds; checked between dispatched units only.
    timeout: Optional[float] = None

    def resolved_n_jobs(self) -> int:
        if not self.parallel:
            return 1
        return int(self.n_jobs) if self.n_jobs is not None else default_n_jobs()

    def resolved_backend(self) -> str:
        return self.backend or default_backend()
