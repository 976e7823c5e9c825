import numpy as np
import pandas as pd
import pytest

from bench_engine.components.learners.base import Learner
from bench_engine.components.learners.featureless import LearnerClassifFeatureless
from bench_engine.components.learners.params import ParamDbl, ParamSet
from bench_engine.data import DataBackend, TaskClassif, TaskRegr


class FailUnlessRowInTrain(LearnerClassifFeatureless):
    """Featureless classifier that fails to fit when ``row`` is not a training row.

    Under k-fold CV this fails in exactly one fold: the one testing ``row``.
    """

    def __init__(self, row=0, **kwargs):
        super().__init__(id="classif.fail_unless_row", **kwargs)
        self.row = row

    def _train(self, task, row_ids):
        if self.row not in set(np.asarray(row_ids).tolist()):
            raise RuntimeError(f"row {self.row} missing from training set")
        return super()._train(task, row_ids)


class ConstantRegr(Learner):
    """Predicts the constant ``c`` for every row."""

    task_type = "regr"
    calls = []

    def __init__(self, **kwargs):
        ps = ParamSet({"c": ParamDbl(lower=0.0, upper=2.0, default=0.0)})
        super().__init__("regr.constant", param_set=ps, **kwargs)

    def _train(self, task, row_ids):
        ConstantRegr.calls.append(len(row_ids))
        return {"c": float(self._param_values["c"])}

    def _predict(self, model, task, row_ids):
        return {"response": np.full(len(row_ids), model.state["c"])}


@pytest.fixture(scope="session")
def seed():
    return 42


@pytest.fixture
def classif_task(seed):
    rng = np.random.default_rng(seed)
    n = 60
    x1 = rng.normal(size=n)
    x2 = rng.normal(size=n)
    y = np.where(x1 + 0.5 * x2 > 0, "pos", "neg")
    df = pd.DataFrame({"x1": x1, "x2": x2, "y": y})
    return TaskClassif("toy_classif", DataBackend(df), "y")


@pytest.fixture
def imbalanced_task(seed):
    rng = np.random.default_rng(seed)
    y = np.array(["a"] * 30 + ["b"] * 70)
    df = pd.DataFrame({"x": rng.normal(size=100), "y": y})
    return TaskClassif("imbalanced", DataBackend(df), "y")


@pytest.fixture
def multiclass_task(seed):
    rng = np.random.default_rng(seed)
    n = 45
    df = pd.DataFrame({"x": rng.normal(size=n), "y": np.repeat(["r", "g", "b"], n // 3)})
    return TaskClassif("three_classes", DataBackend(df), "y")


@pytest.fixture
def regr_task(seed):
    rng = np.random.default_rng(seed)
    n = 30
    x = rng.normal(size=n)
    # target close to 1 everywhere: the best constant is c = 1
    y = 1.0 + rng.uniform(-0.1, 0.1, size=n)
    df = pd.DataFrame({"x": x, "y": y})
    return TaskRegr("toy_regr", DataBackend(df), "y")


@pytest.fixture
def constant_regr():
    ConstantRegr.calls.clear()
    return ConstantRegr()


@pytest.fixture
def failing_learner():
    return FailUnlessRowInTrain(row=0)
