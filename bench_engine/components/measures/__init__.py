from .measure import Measure

__all__ = ["Measure"]
