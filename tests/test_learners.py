import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LogisticRegression

from bench_engine.components.learners import LearnerClassifFeatureless, SklearnLearner
from bench_engine.data import DataBackend, TaskClassif, TaskRegr
from bench_engine.errors import ConfigurationError, FitError
from bench_engine.registries.learners import list_learners, lrn


def test_featureless_classif_predicts_mode(imbalanced_task):
    learner = lrn("classif.featureless", predict_type="prob")
    model = learner.fit(imbalanced_task, imbalanced_task.row_ids)
    pred = learner.predict(model, imbalanced_task, imbalanced_task.row_ids[:5])

    assert model.n_train == 100
    assert pred.response.tolist() == ["b"] * 5
    assert pred.prob.shape == (5, 2)
    assert pred.prob_of("a") == pytest.approx([0.3] * 5)


def test_featureless_regr_mean_and_se(regr_task):
    learner = lrn("regr.featureless", predict_type="se")
    model = learner.fit(regr_task, regr_task.row_ids)
    pred = learner.predict(model, regr_task, regr_task.row_ids)

    y = regr_task.truth().astype(float)
    assert pred.response == pytest.approx(np.full(30, y.mean()))
    assert pred.se == pytest.approx(np.full(30, y.std(ddof=1)))


def test_fit_does_not_mutate_learner(classif_task):
    learner = lrn("classif.log_reg")
    before = learner.hash
    learner.fit(classif_task, classif_task.row_ids)
    assert learner.hash == before
    assert not hasattr(learner.estimator, "coef_")


def test_sklearn_learner_probabilities_follow_class_order(classif_task):
    learner = lrn("classif.log_reg", predict_type="prob")
    ids = classif_task.row_ids
    model = learner.fit(classif_task, ids[:40])
    pred = learner.predict(model, classif_task, ids[40:])

    assert pred.class_names == ("neg", "pos")
    assert pred.prob.shape == (20, 2)
    assert pred.prob.sum(axis=1) == pytest.approx(np.ones(20))
    expected = np.where(pred.prob[:, 1] >= 0.5, "pos", "neg")
    assert (pred.response == expected).mean() > 0.9


def test_missing_class_in_training_fold_gets_zero_column():
    df = pd.DataFrame({"x": [0.0, 0.1, 0.2, 5.0, 5.1, 9.0], "y": ["a", "a", "a", "b", "b", "c"]})
    task = TaskClassif("abc", DataBackend(df), "y")
    learner = SklearnLearner(LogisticRegression(), id="lr", task_type="classif", predict_type="prob")
    model = learner.fit(task, [0, 1, 2, 3, 4])
    pred = learner.predict(model, task, [5])
    assert pred.prob[0, 2] == 0.0


def test_sklearn_learner_regression(regr_task):
    learner = lrn("regr.ridge", alpha=0.5)
    model = learner.fit(regr_task, regr_task.row_ids)
    pred = learner.predict(model, regr_task, regr_task.row_ids)
    assert pred.n == 30
    assert model.param_values["alpha"] == 0.5


def test_with_params_validates_and_copies():
    learner = lrn("classif.tree")
    deeper = learner.with_params(max_depth=3)
    assert deeper.param_values["max_depth"] == 3
    assert "max_depth" not in learner.param_values
    assert deeper.hash != learner.hash
    with pytest.raises(ConfigurationError, match="max_depth"):
        learner.with_params(max_depth=0)
    with pytest.raises(ConfigurationError, match="unknown parameter"):
        lrn("classif.tree", depth=3)


def test_unsupported_predict_type():
    with pytest.raises(ConfigurationError, match="predict types"):
        lrn("regr.lm", predict_type="prob")


def test_check_task_rejects_wrong_task_type(regr_task, multiclass_task):
    with pytest.raises(ConfigurationError, match="'classif' tasks"):
        lrn("classif.featureless").check_task(regr_task)
    with pytest.raises(ConfigurationError, match="'regr' tasks"):
        lrn("regr.lm").check_task(multiclass_task)


def test_check_task_rejects_unsupported_feature_types():
    df = pd.DataFrame({"color": ["red", "blue", "red", "blue"], "y": [1.0, 2.0, 3.0, 4.0]})
    task = TaskRegr("colors", DataBackend(df), "y")
    with pytest.raises(ConfigurationError, match="feature types"):
        lrn("regr.lm").check_task(task)
    lrn("regr.featureless").check_task(task)


def test_check_task_rejects_missings():
    df = pd.DataFrame({"x": [1.0, np.nan, 3.0, 4.0], "y": ["a", "b", "a", "b"]})
    task = TaskClassif("holes", DataBackend(df), "y")
    with pytest.raises(ConfigurationError, match="missing values"):
        lrn("classif.log_reg").check_task(task)
    LearnerClassifFeatureless().check_task(task)


def test_weight_column_reaches_the_estimator():
    x = np.arange(10, dtype=float)
    y = 2.0 * x
    y[-2:] = 100.0
    w = np.ones(10)
    w[-2:] = 0.0
    df = pd.DataFrame({"x": x, "w": w, "y": y})
    plain = TaskRegr("outliers", DataBackend(df), "y", col_roles={"w": "ignore"})
    weighted = plain.set_col_roles({"w": "weight"})

    assert weighted.feature_names == ("x",)
    assert weighted.weights(weighted.row_ids[-3:]).tolist() == [1.0, 0.0, 0.0]
    assert plain.weights() is None

    learner = lrn("regr.lm")
    assert "weights" in learner.properties
    fitted = learner.fit(weighted, weighted.row_ids)
    assert fitted.state.coef_[0] == pytest.approx(2.0)
    assert learner.fit(plain, plain.row_ids).state.coef_[0] != pytest.approx(2.0)


def test_check_task_rejects_weights_without_support():
    df = pd.DataFrame({"x": [1.0, 2.0, 3.0, 4.0], "w": [1.0, 2.0, 1.0, 2.0], "y": ["a", "b", "a", "b"]})
    task = TaskClassif("weighted", DataBackend(df), "y", col_roles={"w": "weight"})
    with pytest.raises(ConfigurationError, match="does not support weights"):
        lrn("classif.featureless").check_task(task)
    with pytest.raises(ConfigurationError, match="does not support weights"):
        lrn("classif.knn").check_task(task)
    lrn("classif.log_reg").check_task(task)


def test_debug_learner_fit_error_keeps_cause(classif_task):
    learner = lrn("classif.debug", error_train=1.0)
    with pytest.raises(FitError) as exc:
        learner.fit(classif_task, classif_task.row_ids)
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_debug_learner_failures_are_deterministic(classif_task):
    learner = lrn("classif.debug", error_train=0.5, seed=7)
    ids = classif_task.row_ids
    outcomes = []
    for _ in range(2):
        run = []
        for k in range(6):
            try:
                learner.fit(classif_task, ids[k * 10 : k * 10 + 20])
                run.append(True)
            except FitError:
                run.append(False)
        outcomes.append(run)
    assert outcomes[0] == outcomes[1]


def test_registry_keys():
    keys = list_learners()
    for key in ("classif.featureless", "regr.featureless", "classif.debug", "classif.rf", "regr.rf"):
        assert key in keys
    with pytest.raises(ConfigurationError, match="unknown key"):
        lrn("classif.svm_magic")
