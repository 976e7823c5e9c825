import numpy as np
import pytest

from bench_engine.components.learners.params import ParamDbl, ParamFct, ParamInt, ParamLgl, ParamSet, ParamUty
from bench_engine.errors import ConfigurationError


@pytest.fixture
def space():
    return ParamSet(
        {
            "alpha": ParamDbl(lower=0.0, upper=1.0),
            "k": ParamInt(lower=1, upper=3),
            "kernel": ParamFct(levels=("linear", "rbf")),
        }
    )


def test_validate_reports_every_problem(space):
    assert space.validate({"alpha": 0.5, "k": 2}) == {"alpha": 0.5, "k": 2}
    with pytest.raises(ConfigurationError) as exc:
        space.validate({"alpha": 2.0, "k": 1.5, "gamma": 1})
    msg = str(exc.value)
    assert "alpha" in msg
    assert "k must be an integer" in msg
    assert "unknown parameter 'gamma'" in msg


def test_booleans_are_not_numbers():
    ps = ParamSet({"a": ParamDbl(), "b": ParamLgl()})
    with pytest.raises(ConfigurationError):
        ps.validate({"a": True})
    with pytest.raises(ConfigurationError):
        ps.validate({"b": 1})


def test_grid_last_parameter_varies_fastest(space):
    grid = space.grid(resolution=2)
    assert len(grid) == 2 * 2 * 2
    assert grid[0] == {"alpha": 0.0, "k": 1, "kernel": "linear"}
    assert grid[1] == {"alpha": 0.0, "k": 1, "kernel": "rbf"}
    assert grid[2] == {"alpha": 0.0, "k": 3, "kernel": "linear"}
    assert grid[-1] == {"alpha": 1.0, "k": 3, "kernel": "rbf"}


def test_grid_per_parameter_resolution(space):
    grid = space.grid(resolution=2, param_resolutions={"k": 3})
    assert sorted({c["k"] for c in grid}) == [1, 2, 3]
    with pytest.raises(ConfigurationError):
        space.grid(param_resolutions={"nope": 2})


def test_integer_grid_drops_duplicates():
    assert ParamInt(lower=1, upper=3).grid(10) == [1, 2, 3]


def test_logscale_grid():
    assert ParamDbl(lower=0.01, upper=1.0, logscale=True).grid(3) == pytest.approx([0.01, 0.1, 1.0])
    with pytest.raises(ConfigurationError, match="positive lower bound"):
        ParamDbl(lower=0.0, upper=1.0, logscale=True).grid(3)


def test_sample_within_bounds(space):
    rng = np.random.default_rng(3)
    for config in space.sample(50, rng):
        assert 0.0 <= config["alpha"] <= 1.0
        assert config["k"] in (1, 2, 3)
        assert config["kernel"] in ("linear", "rbf")


def test_perturb_is_clamped():
    p = ParamDbl(lower=0.0, upper=1.0)
    rng = np.random.default_rng(0)
    for _ in range(50):
        assert 0.0 <= p.perturb(0.99, rng, step=0.5) <= 1.0


def test_unbounded_and_untyped_parameters_cannot_be_searched():
    with pytest.raises(ConfigurationError, match="finite"):
        ParamDbl(lower=0.0).grid(3)
    with pytest.raises(ConfigurationError):
        ParamUty().grid(3)
    assert not ParamSet({"a": ParamInt(lower=1)}).is_bounded
