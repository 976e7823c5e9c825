"""Result containers returned by the resampling, benchmark and tuning use cases."""

from .benchmark_result import BenchmarkResult
from .resample_result import ResampleResult

__all__ = ["ResampleResult", "BenchmarkResult"]
