from .rng import RngManager, resolve_seed

__all__ = ["RngManager", "resolve_seed"]
