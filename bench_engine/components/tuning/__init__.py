"""Tuning strategies.

``auto_tuner`` is not imported here: it depends on the tuning use case, which
in turn depends on this package.
"""

from .archive import ArchiveEntry, TuningArchive
from .terminators import Terminator, make_terminator
from .tuners import Tuner, make_tuner

__all__ = ["ArchiveEntry", "TuningArchive", "Terminator", "Tuner", "make_terminator", "make_tuner"]
