from __future__ import annotations

"""Nested resampling by composition.

An :class:`AutoTuner` is a learner whose ``fit`` tunes the wrapped learner on
the training rows only and then refits it with the best configuration.
Resampling an AutoTuner therefore gives an unbiased estimate of the whole
tune-then-fit procedure.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from bench_engine.components.learners.base import Learner, LearnerModel
from bench_engine.components.learners.params import ParamSet
from bench_engine.components.measures.measure import Measure
from bench_engine.components.partitions.types import Partitioning
from bench_engine.components.prediction.records import Prediction
from bench_engine.components.tuning.tuners import make_tuner
from bench_engine.contracts.execution_configs import ExecutionOptions
from bench_engine.contracts.partition_configs import AnySpec
from bench_engine.contracts.tuning_configs import TerminatorConfig, TunerConfig
from bench_engine.core.hashing import stable_hash
from bench_engine.data.task import Task
from bench_engine.errors import ConfigurationError, FitError
from bench_engine.use_cases.tuning import TuningResult, check_tuning_setup, tune

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoTunerState:
    learner: Learner
    model: LearnerModel
    tuning_result: TuningResult


class AutoTuner(Learner):
    def __init__(
        self,
        learner: Learner,
        search_space: ParamSet,
        resampling: AnySpec,
        measure: Measure,
        tuner: TunerConfig,
        terminator: TerminatorConfig,
        *,
        store_benchmark_result: bool = False,
        options: Optional[ExecutionOptions] = None,
        id: Optional[str] = None,
    ) -> None:
        if isinstance(resampling, Partitioning):
            raise ConfigurationError(
                f"AutoTuner needs an uninstantiated resampling spec, got partitioning {resampling.id!r}; "
                "the inner split is drawn from each training set"
            )
        resampling.check_params()
        check_tuning_setup(learner, search_space, tuner, terminator)
        # grid and bound problems surface here, not on the first fit
        make_tuner(tuner, search_space)
        measure.check_prediction_setup(learner.task_type, learner.predict_type)

        self.learner = learner
        self.search_space = search_space
        self.resampling = resampling
        self.measure = measure
        self.tuner = tuner
        self.terminator = terminator
        self.store_benchmark_result = bool(store_benchmark_result)
        # inner runs are sequential unless asked otherwise
        self.options = options or ExecutionOptions()

        self.task_type = learner.task_type  # type: ignore[misc]
        self.feature_types = learner.feature_types  # type: ignore[misc]
        self.properties = learner.properties  # type: ignore[misc]
        self.predict_types = learner.predict_types  # type: ignore[misc]
        super().__init__(id or f"{learner.id}.tuned", param_set=ParamSet(), predict_type=learner.predict_type)

    @property
    def hash(self) -> str:
        return stable_hash(
            [
                "AutoTuner",
                self.id,
                self.learner.hash,
                tuple(self.search_space.ids),
                repr(self.resampling),
                self.measure.id,
                self.tuner.model_dump_json(),
                self.terminator.model_dump_json(),
            ]
        )

    def check_task(self, task: Task) -> None:
        self.learner.check_task(task)

    def _train(self, task: Task, row_ids: Sequence) -> Any:
        inner_task = task.filter(row_ids)
        try:
            result = tune(
                inner_task,
                self.learner,
                self.resampling,
                self.measure,
                self.search_space,
                self.tuner,
                self.terminator,
                self.options,
                store_benchmark_result=self.store_benchmark_result,
            )
        except ConfigurationError as e:
            # depends on the outer training set (e.g. too few rows for the inner split)
            raise FitError(f"{self.id}: inner tuning on {len(row_ids)} rows is not possible: {e}") from e
        if result.best is None:
            raise RuntimeError(f"tuning produced no valid {self.measure.id} score")
        final = result.tuned_learner()
        logger.debug("%s: refitting with %s on %d rows", self.id, result.config, len(row_ids))
        model = final.fit(task, row_ids)
        return AutoTunerState(learner=final, model=model, tuning_result=result)

    def predict(self, model: LearnerModel, task: Task, row_ids: Sequence) -> Prediction:
        state: AutoTunerState = model.state
        return state.learner.predict(state.model, task, row_ids)

    def __repr__(self) -> str:
        return f"<AutoTuner {self.id!r} over {self.search_space.ids}>"


def tuning_result_of(model: LearnerModel) -> TuningResult:
    """The inner TuningResult stored in a fitted AutoTuner model."""
    if not isinstance(model.state, AutoTunerState):
        raise ConfigurationError(f"model of {model.learner_id!r} is not a fitted AutoTuner")
    return model.state.tuning_result


__all__ = ["AutoTuner", "AutoTunerState", "tuning_result_of"]
