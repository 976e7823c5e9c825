import numpy as np
import pytest

from bench_engine.components.measures import Measure
from bench_engine.components.partitions import instantiate
from bench_engine.contracts.execution_configs import ExecutionOptions
from bench_engine.core.cancellation import CancellationToken
from bench_engine.errors import ConfigurationError, IncompatibleResultError
from bench_engine.registries.learners import lrn
from bench_engine.registries.measures import msr
from bench_engine.registries.partitions import rsmp
from bench_engine.use_cases import resample


class RecordingProgress:
    def __init__(self, cancel_after=None, token=None):
        self.events = []
        self.cancel_after = cancel_after
        self.token = token

    def init(self, *, total, label=None):
        self.events.append(("init", total))

    def update(self, *, current, label=None):
        self.events.append(("update", current))
        if self.cancel_after is not None and current >= self.cancel_after:
            self.token.cancel("enough")

    def finalize(self, *, label=None):
        self.events.append(("finalize", None))


def test_aggregate_is_mean_of_iteration_scores(regr_task):
    first_row = Measure("first_row", lambda p: p.row_ids[0] / 10, minimize=True, task_type="regr")
    spec = rsmp("custom", train_sets=[[0, 4], [0, 4], [0, 4]], test_sets=[[1], [2], [3]])

    rr = resample(regr_task, lrn("regr.featureless"), spec, measures=[first_row])

    assert rr.iters == 3
    assert rr.performance(first_row) == pytest.approx([0.1, 0.2, 0.3])
    assert rr.aggregate()["first_row"] == pytest.approx(0.2)


def test_iterations_follow_partition_order(classif_task):
    spec = rsmp("cv", folds=5, seed=3)
    rr = resample(classif_task, lrn("classif.featureless"), spec, measures=[msr("classif.ce")])
    assert [it.iteration for it in rr.iterations] == [1, 2, 3, 4, 5]
    for i, it in enumerate(rr.iterations, start=1):
        assert it.prediction.row_ids.tolist() == rr.partitioning.test_set(i).tolist()
        assert it.n_train == len(rr.partitioning.train_set(i))


def test_failing_fold_is_recorded_and_others_continue(classif_task, failing_learner):
    ce = msr("classif.ce")
    rr = resample(classif_task, failing_learner, rsmp("cv", folds=5, seed=1), measures=[ce])

    assert rr.iters == 5
    assert len(rr.valid_iterations) == 4
    assert rr.n_errors == 1
    (err,) = rr.errors
    assert err.stage == "fit"
    assert err.error_class == "RuntimeError"
    assert err.learner_id == "classif.fail_unless_row"
    failed = next(it for it in rr.iterations if not it.ok)
    assert 0 in rr.partitioning.test_set(failed.iteration).tolist()

    perf = rr.performance(ce)
    assert np.isnan(perf).sum() == 1
    assert rr.aggregate()["classif.ce"] == pytest.approx(np.nanmean(perf))


def test_predict_errors_are_recorded(classif_task):
    learner = lrn("classif.debug", error_predict=1.0)
    rr = resample(classif_task, learner, rsmp("holdout", seed=1), measures=[msr("classif.ce")])
    assert rr.errors[0].stage == "predict"
    assert np.isnan(rr.aggregate()["classif.ce"])
    assert rr.prediction() is None


def test_warnings_are_captured(classif_task):
    learner = lrn("classif.debug", warning_train=1.0)
    rr = resample(classif_task, learner, rsmp("cv", folds=3))
    assert rr.n_errors == 0
    assert len(rr.warnings) == 3
    assert all("train warning" in w for _, w in rr.warnings)


def test_configuration_errors_are_raised_before_running(classif_task, regr_task):
    with pytest.raises(ConfigurationError):
        resample(regr_task, lrn("classif.featureless"), rsmp("cv", folds=3))
    with pytest.raises(ConfigurationError, match="predict_type"):
        resample(classif_task, lrn("classif.featureless"), rsmp("cv", folds=3), measures=[msr("classif.auc")])
    with pytest.raises(ConfigurationError, match="given twice"):
        resample(classif_task, lrn("classif.featureless"), rsmp("cv", folds=3), measures=[msr("classif.ce")] * 2)


def test_two_class_measure_on_multiclass_task(multiclass_task):
    with pytest.raises(ConfigurationError, match="two-class"):
        resample(multiclass_task, lrn("classif.featureless"), rsmp("cv", folds=3), measures=[msr("classif.f1")])


def test_precancelled_token_skips_every_unit(classif_task):
    token = CancellationToken()
    token.cancel("stop")
    rr = resample(classif_task, lrn("classif.featureless"), rsmp("cv", folds=4), cancel=token)
    assert rr.iters == 4
    assert rr.n_errors == 4
    assert {e.stage for e in rr.errors} == {"cancelled"}
    assert rr.errors[0].message == "stop"


def test_cancel_between_units(classif_task):
    token = CancellationToken()
    progress = RecordingProgress(cancel_after=2, token=token)
    rr = resample(
        classif_task,
        lrn("classif.featureless"),
        rsmp("cv", folds=5),
        measures=[msr("classif.ce")],
        progress=progress,
        cancel=token,
    )
    assert [it.ok for it in rr.iterations] == [True, True, False, False, False]
    assert progress.events[0] == ("init", 5)
    assert progress.events[-1] == ("finalize", None)


def test_progress_reports_every_unit(classif_task):
    progress = RecordingProgress()
    resample(classif_task, lrn("classif.featureless"), rsmp("cv", folds=3), progress=progress)
    assert progress.events == [("init", 3), ("update", 1), ("update", 2), ("update", 3), ("finalize", None)]


def test_models_only_kept_when_asked(classif_task):
    spec = rsmp("cv", folds=3)
    plain = resample(classif_task, lrn("classif.featureless"), spec)
    kept = resample(classif_task, lrn("classif.featureless"), spec, ExecutionOptions(retain_models=True))
    assert plain.models() == [None, None, None]
    assert all(m is not None and m.n_train == 40 for m in kept.models())


def test_threading_matches_sequential(classif_task):
    spec = rsmp("cv", folds=4, seed=5)
    learner = lrn("classif.log_reg")
    ce = msr("classif.ce")
    seq = resample(classif_task, learner, spec, measures=[ce])
    par = resample(
        classif_task,
        learner,
        spec,
        ExecutionOptions(parallel=True, n_jobs=2, backend="threading"),
        measures=[ce],
    )
    assert [it.iteration for it in par.iterations] == [1, 2, 3, 4]
    assert par.performance(ce) == pytest.approx(seq.performance(ce))


def test_process_pool_matches_sequential(classif_task):
    spec = rsmp("cv", folds=3, seed=5)
    ce = msr("classif.ce")
    seq = resample(classif_task, lrn("classif.tree", random_state=0), spec, measures=[ce])
    par = resample(
        classif_task,
        lrn("classif.tree", random_state=0),
        spec,
        ExecutionOptions(parallel=True, n_jobs=2, backend="loky"),
        measures=[ce],
    )
    assert par.performance(ce) == pytest.approx(seq.performance(ce))


def test_prebuilt_partitioning_must_match_task(classif_task):
    part = instantiate(classif_task, rsmp("cv", folds=3))
    rr = resample(classif_task, lrn("classif.featureless"), part)
    assert rr.partitioning is part
    with pytest.raises(ConfigurationError, match="different rows"):
        resample(classif_task.filter(classif_task.row_ids[:20]), lrn("classif.featureless"), part)


def test_combine_same_configuration(classif_task):
    ce = msr("classif.ce")
    a = resample(classif_task, lrn("classif.featureless"), rsmp("cv", folds=3, seed=1), measures=[ce])
    b = resample(classif_task, lrn("classif.featureless"), rsmp("holdout", seed=2), measures=[ce])
    both = a.combine(b)
    assert both.iters == 4
    assert [it.iteration for it in both.iterations] == [1, 2, 3, 4]
    assert both.partitioning.test_set(4).tolist() == b.partitioning.test_set(1).tolist()
    assert both.performance(ce)[3] == pytest.approx(b.performance(ce)[0])


def test_combine_different_learners_is_rejected(classif_task):
    spec = rsmp("cv", folds=3)
    a = resample(classif_task, lrn("classif.featureless"), spec)
    b = resample(classif_task, lrn("classif.featureless", method="sample"), spec)
    with pytest.raises(IncompatibleResultError):
        a.combine(b)


def test_micro_average_uses_combined_prediction(classif_task):
    spec = rsmp("cv", folds=3, seed=2)
    macro = msr("classif.ce")
    micro = msr("classif.ce", average="micro", id="classif.ce.micro")
    rr = resample(classif_task, lrn("classif.featureless"), spec, measures=[macro])
    agg = rr.aggregate([macro, micro])
    assert agg["classif.ce.micro"] == pytest.approx(macro.score(rr.prediction()))
    # equal-sized folds: micro and macro agree
    assert agg["classif.ce.micro"] == pytest.approx(agg["classif.ce"])


def test_filter_keeps_numbering(classif_task):
    rr = resample(classif_task, lrn("classif.featureless"), rsmp("cv", folds=4))
    sub = rr.filter([2, 4])
    assert [it.iteration for it in sub.iterations] == [2, 4]
    with pytest.raises(IndexError):
        rr.filter([7])
