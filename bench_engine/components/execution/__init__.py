from .design import DesignRow, check_setup
from .iteration import IterationResult, run_iteration
from .parallel import run_units

__all__ = ["DesignRow", "check_setup", "IterationResult", "run_iteration", "run_units"]
