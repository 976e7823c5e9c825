from .benchmark import benchmark, expand_grid
from .resampling import resample
from .tuning import TuningResult, tune

__all__ = ["resample", "benchmark", "expand_grid", "tune", "TuningResult"]
