"""Built-in measure registrations."""

from __future__ import annotations

import math

from bench_engine.components.measures import metrics
from bench_engine.components.measures.measure import Measure
from bench_engine.registries.measures import register_measure

_UNIT = (0.0, 1.0)
_POS = (0.0, math.inf)

# classification
register_measure(Measure("classif.ce", metrics.ce, minimize=True, task_type="classif", range=_UNIT))
register_measure(Measure("classif.acc", metrics.acc, minimize=False, task_type="classif", range=_UNIT))
register_measure(Measure("classif.bacc", metrics.bacc, minimize=False, task_type="classif", range=_UNIT))
register_measure(
    Measure("classif.f1", metrics.f1, minimize=False, task_type="classif", range=_UNIT, properties=frozenset({"twoclass"}))
)
register_measure(
    Measure(
        "classif.precision",
        metrics.precision,
        minimize=False,
        task_type="classif",
        range=_UNIT,
        properties=frozenset({"twoclass"}),
    )
)
register_measure(
    Measure(
        "classif.recall",
        metrics.recall,
        minimize=False,
        task_type="classif",
        range=_UNIT,
        properties=frozenset({"twoclass"}),
    )
)
register_measure(
    Measure(
        "classif.auc",
        metrics.auc,
        minimize=False,
        task_type="classif",
        predict_type="prob",
        range=_UNIT,
        properties=frozenset({"twoclass"}),
    )
)
register_measure(
    Measure("classif.logloss", metrics.logloss, minimize=True, task_type="classif", predict_type="prob", range=_POS)
)
register_measure(
    Measure("classif.mbrier", metrics.mbrier, minimize=True, task_type="classif", predict_type="prob", range=(0.0, 2.0))
)

# regression
register_measure(Measure("regr.mse", metrics.mse, minimize=True, task_type="regr", range=_POS))
register_measure(Measure("regr.rmse", metrics.rmse, minimize=True, task_type="regr", range=_POS))
register_measure(Measure("regr.mae", metrics.mae, minimize=True, task_type="regr", range=_POS))
register_measure(Measure("regr.mape", metrics.mape, minimize=True, task_type="regr", range=_POS))
register_measure(Measure("regr.rsq", metrics.rsq, minimize=False, task_type="regr", range=(-math.inf, 1.0)))

# timings (any task type)
register_measure(Measure("time_train", None, minimize=True, range=_POS, timing=("time_train",)))
register_measure(Measure("time_predict", None, minimize=True, range=_POS, timing=("time_predict",)))
register_measure(Measure("time_both", None, minimize=True, range=_POS, timing=("time_train", "time_predict")))
