"""Configuration and result contracts.

Pydantic models used to validate configuration payloads and to emit
JSON-friendly result rows. Keep module imports explicit in most of the
codebase:

    from bench_engine.contracts.partition_configs import CVSpec
"""

from .execution_configs import ExecutionOptions
from .partition_configs import (
    BootstrapSpec,
    CustomSpec,
    CVSpec,
    HoldoutSpec,
    LOOSpec,
    PartitionSpec,
    SubsamplingSpec,
)
from .results import AggregateRow, ArchiveRow, ErrorRecord, ScoreRow
from .tuning_configs import (
    ComboConfig,
    DesignPointsConfig,
    EvalsConfig,
    GridSearchConfig,
    NoTerminationConfig,
    PerfReachedConfig,
    RandomSearchConfig,
    RunTimeConfig,
    SequentialSearchConfig,
    StagnationConfig,
)

__all__ = [
    "ExecutionOptions",
    "BootstrapSpec",
    "CustomSpec",
    "CVSpec",
    "HoldoutSpec",
    "LOOSpec",
    "PartitionSpec",
    "SubsamplingSpec",
    "AggregateRow",
    "ArchiveRow",
    "ErrorRecord",
    "ScoreRow",
    "ComboConfig",
    "DesignPointsConfig",
    "EvalsConfig",
    "GridSearchConfig",
    "NoTerminationConfig",
    "PerfReachedConfig",
    "RandomSearchConfig",
    "RunTimeConfig",
    "SequentialSearchConfig",
    "StagnationConfig",
]
