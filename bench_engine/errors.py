"""Engine exceptions.

Configuration errors are raised before any work starts. Fit/predict errors are
raised by learners during one iteration and are recorded by the executors as
data (``ErrorRecord``) instead of propagating to sibling iterations.
"""


class BenchEngineError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(BenchEngineError, ValueError):
    """Raised for invalid specs, parameters, registry keys or designs."""


class FitError(BenchEngineError):
    """Raised when a learner fails to fit on one training set."""


class PredictError(BenchEngineError):
    """Raised when a learner fails to predict on one test set."""


class IncompatibleResultError(BenchEngineError, ValueError):
    """Raised when combining results of different tasks or learners."""


class CancelledError(BenchEngineError):
    """Marks a unit that was skipped after a cancellation request."""


__all__ = [
    "BenchEngineError",
    "ConfigurationError",
    "FitError",
    "PredictError",
    "IncompatibleResultError",
    "CancelledError",
]
