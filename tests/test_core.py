import logging

import pytest

from bench_engine.components.execution import parallel
from bench_engine.contracts.execution_configs import ExecutionOptions
from bench_engine.core.cancellation import CancellationToken, resolve_token
from bench_engine.core.hashing import stable_hash
from bench_engine.core.settings import configure_logging, default_backend, default_n_jobs
from bench_engine.runtime.random import RngManager, resolve_seed


def test_token_deadline():
    token = CancellationToken(timeout=0.0)
    assert token.cancelled
    assert token.reason == "timeout reached"


def test_first_cancel_reason_wins():
    token = CancellationToken()
    assert not token.cancelled
    token.cancel("first")
    token.cancel("second")
    assert token.reason == "first"


def test_resolve_token():
    given = CancellationToken()
    assert resolve_token(given, 10.0) is given
    assert resolve_token(None, None) is None
    assert isinstance(resolve_token(None, 5.0), CancellationToken)


def test_child_streams_are_stable_and_independent():
    a, b = RngManager(1), RngManager(1)
    assert a.child_seed("x") == b.child_seed("x")
    assert a.child_seed("x") != a.child_seed("y")
    assert a.child_generator("x").integers(0, 1000) == b.child_generator("x").integers(0, 1000)
    assert resolve_seed(None) == 0
    assert resolve_seed(7) == 7


def test_stable_hash():
    assert stable_hash(["a", 1]) == stable_hash(["a", 1])
    assert stable_hash(["a", 1]) != stable_hash(["a", 2])


def test_execution_defaults_from_environment(monkeypatch):
    monkeypatch.setenv("BENCH_ENGINE_N_JOBS", "3")
    monkeypatch.setenv("BENCH_ENGINE_BACKEND", "threading")
    assert default_n_jobs() == 3
    assert default_backend() == "threading"
    assert ExecutionOptions().resolved_n_jobs() == 1
    assert ExecutionOptions(parallel=True).resolved_n_jobs() == 3
    assert ExecutionOptions(parallel=True, n_jobs=2).resolved_n_jobs() == 2

    monkeypatch.setenv("BENCH_ENGINE_BACKEND", "dask")
    assert default_backend() == "loky"


def test_execution_options_are_strict():
    with pytest.raises(ValueError):
        ExecutionOptions(workers=4)
    with pytest.raises(ValueError):
        ExecutionOptions(backend="multiprocessing")


def test_configure_logging_is_idempotent(monkeypatch):
    monkeypatch.setenv("BENCH_ENGINE_LOG_LEVEL", "debug")
    pkg_logger = logging.getLogger("bench_engine")
    before_handlers, before_level = list(pkg_logger.handlers), pkg_logger.level
    try:
        logger = configure_logging()
        n = len(logger.handlers)
        configure_logging()
        assert logger is pkg_logger
        assert len(logger.handlers) == n
        assert logger.level == logging.DEBUG
    finally:
        pkg_logger.handlers[:] = before_handlers
        pkg_logger.setLevel(before_level)


def test_worker_count_is_bounded_by_cpus_and_units(monkeypatch):
    monkeypatch.setattr(parallel, "cpu_count", lambda: 4)
    assert parallel.n_workers(64, 100) == 4
    assert parallel.n_workers(64, 3) == 3
    assert parallel.n_workers(2, 100) == 2
    assert parallel.n_workers(1, 100) == 1
    assert parallel.n_workers(-1, 100) <= 4
    assert parallel.n_workers(8, 0) == 1
