"""Resampling, benchmark and nested-tuning engine.

The public surface lives in :mod:`bench_engine.api`.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
