"""Built-in partition strategy registrations."""

from __future__ import annotations

from bench_engine.components.partitions import strategies
from bench_engine.registries.partitions import register_strategy

register_strategy("holdout")(strategies.holdout)
register_strategy("cv")(strategies.cv)
register_strategy("loo")(strategies.loo)
register_strategy("bootstrap")(strategies.bootstrap)
register_strategy("subsampling")(strategies.subsampling)
