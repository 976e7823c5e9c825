"""Built-in learner registrations."""

from __future__ import annotations

import math

from sklearn.linear_model import LinearRegression, LogisticRegression, Ridge
from sklearn.neighbors import KNeighborsClassifier, KNeighborsRegressor
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor

from bench_engine.components.learners.debug import LearnerClassifDebug
from bench_engine.components.learners.featureless import LearnerClassifFeatureless, LearnerRegrFeatureless
from bench_engine.components.learners.params import ParamDbl, ParamFct, ParamInt, ParamLgl, ParamSet, ParamUty
from bench_engine.components.learners.sklearn_glue import SklearnLearner
from bench_engine.registries.learners import register_learner

register_learner("classif.featureless")(LearnerClassifFeatureless)
register_learner("regr.featureless")(LearnerRegrFeatureless)
register_learner("classif.debug")(LearnerClassifDebug)


def _tree_params(criteria) -> ParamSet:
    return ParamSet(
        {
            "criterion": ParamFct(levels=criteria),
            "max_depth": ParamInt(lower=1),
            "min_samples_split": ParamInt(lower=2),
            "min_samples_leaf": ParamInt(lower=1),
            "random_state": ParamUty(),
        }
    )


def _forest_params(criteria) -> ParamSet:
    return ParamSet(
        {
            "n_estimators": ParamInt(lower=1),
            "criterion": ParamFct(levels=criteria),
            "max_depth": ParamInt(lower=1),
            "min_samples_leaf": ParamInt(lower=1),
            "max_features": ParamUty(),
            "n_jobs": ParamUty(),
            "random_state": ParamUty(),
        }
    )


def _knn_params() -> ParamSet:
    return ParamSet(
        {
            "n_neighbors": ParamInt(lower=1),
            "weights": ParamFct(levels=("uniform", "distance")),
            "p": ParamInt(lower=1),
        }
    )


@register_learner("classif.log_reg")
def _log_reg(**params) -> SklearnLearner:
    ps = ParamSet(
        {
            "C": ParamDbl(lower=0.0, upper=math.inf),
            "fit_intercept": ParamLgl(),
            "max_iter": ParamInt(lower=1, default=1000),
            "tol": ParamDbl(lower=0.0),
        }
    )
    return SklearnLearner(LogisticRegression(), id="classif.log_reg", task_type="classif", param_set=ps, **params)


@register_learner("classif.tree")
def _classif_tree(**params) -> SklearnLearner:
    return SklearnLearner(
        DecisionTreeClassifier(),
        id="classif.tree",
        task_type="classif",
        param_set=_tree_params(("gini", "entropy", "log_loss")),
        properties=("importance",),
        **params,
    )


@register_learner("classif.rf")
def _classif_rf(**params) -> SklearnLearner:
    return SklearnLearner(
        RandomForestClassifier(),
        id="classif.rf",
        task_type="classif",
        param_set=_forest_params(("gini", "entropy", "log_loss")),
        properties=("importance",),
        **params,
    )


@register_learner("classif.knn")
def _classif_knn(**params) -> SklearnLearner:
    return SklearnLearner(KNeighborsClassifier(), id="classif.knn", task_type="classif", param_set=_knn_params(), **params)


@register_learner("regr.lm")
def _regr_lm(**params) -> SklearnLearner:
    ps = ParamSet({"fit_intercept": ParamLgl()})
    return SklearnLearner(LinearRegression(), id="regr.lm", task_type="regr", param_set=ps, **params)


@register_learner("regr.ridge")
def _regr_ridge(**params) -> SklearnLearner:
    ps = ParamSet(
        {
            "alpha": ParamDbl(lower=0.0, upper=math.inf),
            "fit_intercept": ParamLgl(),
        }
    )
    return SklearnLearner(Ridge(), id="regr.ridge", task_type="regr", param_set=ps, **params)


@register_learner("regr.tree")
def _regr_tree(**params) -> SklearnLearner:
    return SklearnLearner(
        DecisionTreeRegressor(),
        id="regr.tree",
        task_type="regr",
        param_set=_tree_params(("squared_error", "friedman_mse", "absolute_error", "poisson")),
        properties=("importance",),
        **params,
    )


@register_learner("regr.rf")
def _regr_rf(**params) -> SklearnLearner:
    return SklearnLearner(
        RandomForestRegressor(),
        id="regr.rf",
        task_type="regr",
        param_set=_forest_params(("squared_error", "friedman_mse", "absolute_error", "poisson")),
        properties=("importance",),
        **params,
    )


@register_learner("regr.knn")
def _regr_knn(**params) -> SklearnLearner:
    return SklearnLearner(KNeighborsRegressor(), id="regr.knn", task_type="regr", param_set=_knn_params(), **params)
