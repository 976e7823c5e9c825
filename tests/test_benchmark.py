import logging

import numpy as np
import pytest

from bench_engine.components.execution.design import DesignRow
from bench_engine.contracts.execution_configs import ExecutionOptions
from bench_engine.errors import ConfigurationError
from bench_engine.registries.learners import lrn
from bench_engine.registries.measures import msr
from bench_engine.registries.partitions import rsmp
from bench_engine.use_cases import benchmark, expand_grid


def test_expand_grid_shares_one_partitioning_per_task(classif_task, imbalanced_task):
    learners = [lrn("classif.featureless"), lrn("classif.log_reg")]
    design = expand_grid([classif_task, imbalanced_task], learners, [rsmp("holdout", seed=1), rsmp("cv", folds=3)])

    assert len(design) == 2 * 2 * 2
    assert [(r.task.id, r.resampling_id, r.learner.id) for r in design[:4]] == [
        ("toy_classif", "holdout", "classif.featureless"),
        ("toy_classif", "holdout", "classif.log_reg"),
        ("toy_classif", "cv", "classif.featureless"),
        ("toy_classif", "cv", "classif.log_reg"),
    ]
    assert design[0].partitioning is design[1].partitioning
    assert design[0].partitioning is not design[4].partitioning


def test_learners_see_identical_splits(classif_task):
    design = expand_grid(classif_task, [lrn("classif.featureless"), lrn("classif.log_reg")], rsmp("holdout", seed=4))
    assert len(design) == 2
    assert design[0].partitioning is design[1].partitioning

    bmr = benchmark(design)
    a, b = bmr.resample_results
    assert a.partitioning is b.partitioning
    assert a.partitioning.train_set(1).tolist() == b.partitioning.train_set(1).tolist()
    assert a.partitioning.test_set(1).tolist() == b.partitioning.test_set(1).tolist()


def test_aggregate_rows_in_design_order(classif_task):
    ce = msr("classif.ce")
    design = expand_grid(classif_task, [lrn("classif.featureless"), lrn("classif.log_reg")], rsmp("cv", folds=3, seed=1), ce)
    bmr = benchmark(design)

    rows = bmr.aggregate()
    assert [r.nr for r in rows] == [1, 2]
    assert [r.learner_id for r in rows] == ["classif.featureless", "classif.log_reg"]
    assert all(r.iters == 3 and r.n_errors == 0 for r in rows)
    assert rows[1].scores["classif.ce"] < rows[0].scores["classif.ce"]

    table = bmr.aggregate_table()
    assert table[("toy_classif", "classif.log_reg", "classif.ce")] == rows[1].scores["classif.ce"]

    best = bmr.best(ce)
    assert best.learner_id == "classif.log_reg"

    scores = bmr.score()
    assert len(scores) == 6
    assert [s.nr for s in scores] == [1, 1, 1, 2, 2, 2]


def test_errors_carry_design_row(classif_task, failing_learner):
    design = expand_grid(classif_task, [lrn("classif.featureless"), failing_learner], rsmp("cv", folds=5, seed=1))
    bmr = benchmark(design)
    assert bmr.n_errors == 1
    (err,) = bmr.errors
    assert err.nr == 2
    assert err.stage == "fit"


def test_incompatible_row_fails_before_anything_runs(classif_task, regr_task, constant_regr):
    design = [
        DesignRow(task=regr_task, learner=constant_regr, partitioning=rsmp("cv", folds=3)),
        DesignRow(task=regr_task, learner=lrn("classif.featureless"), partitioning=rsmp("cv", folds=3)),
    ]
    with pytest.raises(ConfigurationError, match="design row 2"):
        benchmark(design)
    assert type(constant_regr).calls == []


def test_empty_design():
    with pytest.raises(ConfigurationError, match="empty"):
        benchmark([])
    with pytest.raises(ConfigurationError):
        expand_grid([], [lrn("classif.featureless")], rsmp("cv"))


def test_repeated_rows_are_executed_again(classif_task):
    row = DesignRow(task=classif_task, learner=lrn("classif.featureless"), partitioning=rsmp("holdout", seed=1))
    bmr = benchmark([row, row])
    assert bmr.n_resample_results == 2
    assert bmr.resample_result(1) is not bmr.resample_result(2)


def test_parallel_benchmark_matches_sequential(classif_task, imbalanced_task):
    ce = msr("classif.ce")
    design = expand_grid([classif_task, imbalanced_task], [lrn("classif.featureless"), lrn("classif.log_reg")], rsmp("cv", folds=3, seed=2), ce)
    seq = benchmark(design)
    par = benchmark(design, ExecutionOptions(parallel=True, n_jobs=3, backend="threading"))
    for a, b in zip(seq.resample_results, par.resample_results):
        assert a.iters == b.iters
        assert a.performance(ce) == pytest.approx(b.performance(ce))


def test_filter_and_combine(classif_task, imbalanced_task):
    design = expand_grid([classif_task, imbalanced_task], [lrn("classif.featureless")], rsmp("holdout", seed=1))
    bmr = benchmark(design)
    only_first = bmr.filter(task_ids=["toy_classif"])
    assert only_first.n_resample_results == 1
    assert only_first.combine(bmr.filter(task_ids=["imbalanced"])).n_resample_results == 2


def test_best_without_valid_scores(classif_task):
    ce = msr("classif.ce")
    row = DesignRow(
        task=classif_task,
        learner=lrn("classif.debug", error_train=1.0),
        partitioning=rsmp("holdout", seed=1),
        measures=(ce,),
    )
    bmr = benchmark([row])
    assert np.isnan(bmr.aggregate()[0].scores["classif.ce"])
    with pytest.raises(ConfigurationError, match="no design row"):
        bmr.best(ce)


def test_aggregate_table_reports_dropped_rows(classif_task, caplog):
    ce = msr("classif.ce")
    design = expand_grid(classif_task, [lrn("classif.featureless")], [rsmp("holdout", seed=1), rsmp("cv", folds=3, seed=1)], ce)
    bmr = benchmark(design)
    rows = bmr.aggregate()

    with caplog.at_level(logging.WARNING, logger="bench_engine"):
        table = bmr.aggregate_table()
    assert table == {("toy_classif", "classif.featureless", "classif.ce"): rows[0].scores["classif.ce"]}
    assert "design row 2 duplicates" in caplog.text

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="bench_engine"):
        by_rsmp = bmr.aggregate_table(by_resampling=True)
    assert by_rsmp[("toy_classif", "classif.featureless", "holdout", "classif.ce")] == rows[0].scores["classif.ce"]
    assert by_rsmp[("toy_classif", "classif.featureless", "cv", "classif.ce")] == rows[1].scores["classif.ce"]
    assert caplog.text == ""
