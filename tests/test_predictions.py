import numpy as np
import pytest

from bench_engine.components.prediction import PredictionClassif, PredictionRegr, combine_predictions
from bench_engine.errors import ConfigurationError


@pytest.fixture
def binary_pred():
    return PredictionClassif(
        row_ids=np.array([1, 2, 3, 4]),
        truth=np.array(["neg", "pos", "pos", "neg"], dtype=object),
        response=np.array(["neg", "neg", "pos", "neg"], dtype=object),
        prob=np.array([[0.9, 0.1], [0.6, 0.4], [0.2, 0.8], [0.7, 0.3]]),
        class_names=("neg", "pos"),
    )


def test_positive_defaults_to_last_class(binary_pred):
    assert binary_pred.positive == "pos"
    assert binary_pred.predict_types == ("response", "prob")


def test_binary_threshold(binary_pred):
    relabelled = binary_pred.set_threshold(0.35)
    assert relabelled.response.tolist() == ["neg", "pos", "pos", "neg"]
    # the original record is untouched
    assert binary_pred.response.tolist() == ["neg", "neg", "pos", "neg"]
    assert binary_pred.set_threshold(0.0).response.tolist() == ["pos"] * 4


def test_multiclass_threshold_weights():
    pred = PredictionClassif(
        row_ids=np.array([1, 2]),
        truth=np.array(["a", "b"], dtype=object),
        response=np.array(["a", "a"], dtype=object),
        prob=np.array([[0.5, 0.3, 0.2], [0.4, 0.35, 0.25]]),
        class_names=("a", "b", "c"),
    )
    out = pred.set_threshold({"a": 1.0, "b": 0.5, "c": 1.0})
    assert out.response.tolist() == ["b", "b"]
    with pytest.raises(ConfigurationError, match="missing"):
        pred.set_threshold({"a": 1.0})
    with pytest.raises(ConfigurationError, match="binary"):
        pred.set_threshold(0.5)


def test_threshold_needs_probabilities():
    pred = PredictionClassif(
        row_ids=np.array([1]),
        truth=np.array(["a"], dtype=object),
        response=np.array(["a"], dtype=object),
        class_names=("a", "b"),
    )
    with pytest.raises(ConfigurationError, match="probability"):
        pred.set_threshold(0.5)


def test_confusion(binary_pred):
    cm = binary_pred.confusion()
    assert cm.loc["neg", "pos"] == 1
    assert cm.loc["neg", "neg"] == 2
    assert cm.loc["pos", "pos"] == 1
    assert int(cm.to_numpy().sum()) == 4


def test_records_are_read_only(binary_pred):
    with pytest.raises(ValueError):
        binary_pred.prob[0, 0] = 0.0
    with pytest.raises(ValueError):
        binary_pred.response[0] = "pos"


def test_length_mismatch_is_rejected():
    with pytest.raises(ValueError, match="disagree"):
        PredictionRegr(row_ids=np.array([1, 2]), truth=np.array([1.0]), response=np.array([1.0, 2.0]))


def test_combine_concatenates_in_order():
    a = PredictionRegr(row_ids=np.array([1, 2]), truth=np.array([1.0, 2.0]), response=np.array([1.5, 2.5]))
    b = PredictionRegr(row_ids=np.array([3]), truth=np.array([3.0]), response=np.array([2.0]))
    both = combine_predictions([a, b])
    assert both.row_ids.tolist() == [1, 2, 3]
    assert both.response.tolist() == [1.5, 2.5, 2.0]
    assert both.se is None
    assert list(both.to_frame().columns) == ["row_id", "truth", "response"]


def test_combine_rejects_mixed_types(binary_pred):
    regr = PredictionRegr(row_ids=np.array([9]), truth=np.array([1.0]), response=np.array([1.0]))
    with pytest.raises(ValueError, match="different types"):
        combine_predictions([binary_pred, regr])
