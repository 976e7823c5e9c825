import pickle

import numpy as np
import pandas as pd
import pytest

from bench_engine.data import DataBackend, TaskClassif, TaskRegr
from bench_engine.errors import ConfigurationError


def _frame():
    return pd.DataFrame(
        {
            "id": ["r1", "r2", "r3", "r4"],
            "x": [1.0, 2.0, 3.0, 4.0],
            "n": [1, 2, 3, 4],
            "y": ["a", "b", "a", "b"],
        }
    )


def test_backend_primary_key_and_projection():
    be = DataBackend(_frame(), primary_key="id")
    assert be.row_ids.tolist() == ["r1", "r2", "r3", "r4"]
    assert be.has_rows(["r2", "r4"])
    assert not be.has_rows(["r9"])
    block = be.project(["r3", "r1"], ["x"])
    assert block["x"].tolist() == [3.0, 1.0]


def test_backend_rejects_duplicate_ids():
    df = _frame()
    df.loc[1, "id"] = "r1"
    with pytest.raises(ConfigurationError, match="unique"):
        DataBackend(df, primary_key="id")


def test_backend_from_arrays():
    be = DataBackend.from_arrays(np.zeros((5, 2)), np.arange(5.0))
    assert be.colnames == ["x1", "x2", "y"]
    with pytest.raises(ConfigurationError, match="mismatch"):
        DataBackend.from_arrays(np.zeros((5, 2)), np.arange(4.0))


def test_task_roles_and_feature_types():
    task = TaskClassif("t", DataBackend(_frame(), primary_key="id"), "y")
    assert task.feature_names == ("x", "n")
    assert task.feature_types == {"x": "numeric", "n": "integer"}
    assert task.class_names == ("a", "b")
    assert task.properties == frozenset({"twoclass"})


def test_task_modifiers_return_new_tasks():
    task = TaskClassif("t", DataBackend(_frame(), primary_key="id"), "y")
    narrowed = task.select(["x"])
    assert narrowed.feature_names == ("x",)
    assert task.feature_names == ("x", "n")
    assert narrowed.backend is task.backend

    sub = task.filter(["r4", "r2", "r4"])
    assert sub.row_ids.tolist() == ["r4", "r2"]
    assert task.nrow == 4
    # class levels come from the whole column, not the subset
    assert sub.class_names == ("a", "b")


def test_validation_rows_leave_use_set():
    task = TaskClassif("t", DataBackend(_frame(), primary_key="id"), "y")
    held = task.set_row_roles(validation=["r1"])
    assert held.row_ids.tolist() == ["r2", "r3", "r4"]
    assert held.validation_rows == ("r1",)


def test_task_configuration_errors():
    be = DataBackend(_frame(), primary_key="id")
    with pytest.raises(ConfigurationError, match="target column"):
        TaskRegr("t", be, "nope")
    with pytest.raises(ConfigurationError, match="positive class"):
        TaskClassif("t", be, "y", positive="z")
    with pytest.raises(ConfigurationError, match="not present"):
        TaskClassif("t", be, "y").filter(["r1", "zz"])
    with pytest.raises(ConfigurationError, match="at least 2 classes"):
        TaskClassif("t", DataBackend(pd.DataFrame({"x": [1.0, 2.0], "y": ["a", "a"]})), "y")
    two_weights = pd.DataFrame({"x": [1.0, 2.0], "w1": [1.0, 1.0], "w2": [1.0, 1.0], "y": [0.0, 1.0]})
    with pytest.raises(ConfigurationError, match="at most one weight column"):
        TaskRegr("t", DataBackend(two_weights), "y", col_roles={"w1": "weight", "w2": "weight"})


def test_row_ids_are_read_only(classif_task):
    with pytest.raises(ValueError):
        classif_task.row_ids[0] = 5


def test_task_survives_pickling(classif_task):
    clone = pickle.loads(pickle.dumps(classif_task))
    assert clone.hash == classif_task.hash
    assert clone.col_roles["y"] == "target"
    with pytest.raises(TypeError):
        clone.col_roles["y"] = "feature"


def test_strata_only_for_classification(classif_task, regr_task):
    assert classif_task.strata() is not None
    assert regr_task.strata() is None
