"""Public Engine API.

This module is the **stable public surface** of the engine. Prefer importing
from here instead of reaching into internal subpackages:

    from bench_engine.api import TaskClassif, lrn, msr, rsmp, resample

The underlying implementations live under :mod:`bench_engine.use_cases` and
:mod:`bench_engine.components`.
"""

from __future__ import annotations

from bench_engine.use_cases import TuningResult, benchmark, expand_grid, resample, tune

# Non-use-case helpers that are still part of the stable public surface.
from bench_engine.components.execution.design import DesignRow
from bench_engine.components.execution.iteration import IterationResult, run_iteration
from bench_engine.components.learners import (
    Learner,
    LearnerModel,
    ParamDbl,
    ParamFct,
    ParamInt,
    ParamLgl,
    ParamSet,
    ParamUty,
    SklearnLearner,
)
from bench_engine.components.measures import Measure
from bench_engine.components.partitions import Partitioning, generate, instantiate
from bench_engine.components.prediction import PredictionClassif, PredictionRegr, combine_predictions
from bench_engine.components.tuning.auto_tuner import AutoTuner, tuning_result_of
from bench_engine.contracts.execution_configs import ExecutionOptions
from bench_engine.core.cancellation import CancellationToken
from bench_engine.core.progress import ProgressCallback
from bench_engine.core.settings import configure_logging
from bench_engine.data import DataBackend, TaskClassif, TaskRegr
from bench_engine.registries.learners import list_learners, lrn
from bench_engine.registries.measures import list_measures, msr
from bench_engine.registries.partitions import list_resamplings, rsmp
from bench_engine.registries.tuning import list_terminators, list_tuners, tnr, trm
from bench_engine.results import BenchmarkResult, ResampleResult

__all__ = [
    "resample",
    "benchmark",
    "expand_grid",
    "tune",
    "TuningResult",
    "AutoTuner",
    "tuning_result_of",
    "DesignRow",
    "IterationResult",
    "run_iteration",
    "Learner",
    "LearnerModel",
    "SklearnLearner",
    "ParamSet",
    "ParamDbl",
    "ParamInt",
    "ParamFct",
    "ParamLgl",
    "ParamUty",
    "Measure",
    "Partitioning",
    "generate",
    "instantiate",
    "PredictionClassif",
    "PredictionRegr",
    "combine_predictions",
    "ExecutionOptions",
    "CancellationToken",
    "ProgressCallback",
    "configure_logging",
    "DataBackend",
    "TaskClassif",
    "TaskRegr",
    "lrn",
    "msr",
    "rsmp",
    "tnr",
    "trm",
    "list_learners",
    "list_measures",
    "list_resamplings",
    "list_tuners",
    "list_terminators",
    "ResampleResult",
    "BenchmarkResult",
]
