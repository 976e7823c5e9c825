from __future__ import annotations

"""JSON-friendly result rows.

The rich result containers (ResampleResult, BenchmarkResult, TuningResult) hold
numpy arrays and fitted models; the rows below are what they emit for tables,
error logs and external consumers. Callers serialize via ``model_dump()``.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ErrorStage = Literal["fit", "predict", "score", "cancelled"]


class ResultModel(BaseModel):
    """Base class for result rows (strict by default)."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class ErrorRecord(ResultModel):
    """One execution-time failure, recorded as data."""

    iteration: int
    stage: ErrorStage
    error_class: str
    message: str
    task_id: Optional[str] = None
    learner_id: Optional[str] = None
    # Benchmark row (1-based) when the record comes from a BenchmarkResult.
    nr: Optional[int] = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        iteration: int,
        stage: ErrorStage,
        task_id: Optional[str] = None,
        learner_id: Optional[str] = None,
    ) -> "ErrorRecord":
        # FitError/PredictError wrap the learner's own exception; report that one.
        cause = exc.__cause__ if exc.__cause__ is not None else exc
        return cls(
            iteration=int(iteration),
            stage=stage,
            error_class=type(cause).__name__,
            message=str(cause),
            task_id=task_id,
            learner_id=learner_id,
        )


class ScoreRow(ResultModel):
    """Per-iteration scores."""

    nr: Optional[int] = None
    task_id: str
    learner_id: str
    resampling_id: str
    iteration: int
    ok: bool
    scores: Dict[str, float] = Field(default_factory=dict)


class AggregateRow(ResultModel):
    """Aggregated scores of one resample result (one benchmark design row)."""

    nr: int
    task_id: str
    learner_id: str
    resampling_id: str
    iters: int
    n_errors: int
    scores: Dict[str, float] = Field(default_factory=dict)


class ArchiveRow(ResultModel):
    """One evaluated configuration of a tuning run."""

    batch_nr: int
    config: Dict[str, Any]
    score: float
    n_iters: int
    n_errors: int
    runtime: float


__all__ = [
    "ErrorStage",
    "ResultModel",
    "ErrorRecord",
    "ScoreRow",
    "AggregateRow",
    "ArchiveRow",
]
