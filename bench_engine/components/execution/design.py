from __future__ import annotations

"""Benchmark design rows and the up-front compatibility checks."""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from bench_engine.components.learners.base import Learner
from bench_engine.components.measures.measure import Measure
from bench_engine.components.partitions.types import Partitioning
from bench_engine.contracts.partition_configs import AnySpec
from bench_engine.data.task import Task
from bench_engine.errors import ConfigurationError

PartitionArg = Union[Partitioning, AnySpec]


@dataclass(frozen=True, eq=False)
class DesignRow:
    task: Task
    learner: Learner
    partitioning: PartitionArg
    measures: Tuple[Measure, ...] = ()

    @property
    def resampling_id(self) -> str:
        return self.partitioning.id

    def __repr__(self) -> str:
        return f"<DesignRow {self.task.id} x {self.learner.id} x {self.resampling_id}>"


def check_setup(task: Task, learner: Learner, measures: Sequence[Measure] = ()) -> None:
    """Raise ConfigurationError before execution for incompatible combinations."""
    if not isinstance(task, Task):
        raise ConfigurationError(f"expected a Task, got {type(task).__name__}")
    if not isinstance(learner, Learner):
        raise ConfigurationError(f"expected a Learner, got {type(learner).__name__}")
    learner.check_task(task)
    seen = set()
    for m in measures:
        if not isinstance(m, Measure):
            raise ConfigurationError(f"expected a Measure, got {type(m).__name__}")
        if m.id in seen:
            raise ConfigurationError(f"measure {m.id!r} given twice")
        seen.add(m.id)
        m.check_prediction_setup(task.task_type, learner.predict_type)
        if "twoclass" in m.properties and "twoclass" not in getattr(task, "properties", frozenset()):
            raise ConfigurationError(f"measure {m.id!r} needs a two-class task, task {task.id!r} is not")


__all__ = ["DesignRow", "PartitionArg", "check_setup"]
