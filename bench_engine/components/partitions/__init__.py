from .generate import check_partitioning, generate, instantiate, resolve_partitioning
from .types import Partitioning

__all__ = ["Partitioning", "generate", "instantiate", "check_partitioning", "resolve_partitioning"]
