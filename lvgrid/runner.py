"""
Worker Runner
=============

Runs engine calls in a separate process so interactive callers are not
blocked, and abandons them after a time budget. The engine itself has no
timeout or cancellation; terminating the worker process is the only way
to stop a call in flight.

Usage:
    result = run_in_worker(calculate, "s1", nodes, params, cables, ips, timeout=10)
"""

import multiprocessing
import os
from typing import Any, Callable, Optional

from loguru import logger

from .exceptions import EngineTimeoutError

TIMEOUT_ENV = "LVGRID_WORKER_TIMEOUT_S"
DEFAULT_TIMEOUT_S = 30.0


def default_timeout() -> float:
    raw = os.environ.get(TIMEOUT_ENV)
    if raw is None:
        return DEFAULT_TIMEOUT_S
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"{TIMEOUT_ENV}={raw!r} is not a number; using {DEFAULT_TIMEOUT_S}s")
        return DEFAULT_TIMEOUT_S
    return value if value > 0 else DEFAULT_TIMEOUT_S


def run_in_worker(fn: Callable[..., Any], *args, timeout: Optional[float] = None, **kwargs) -> Any:
    """
    Call fn(*args, **kwargs) in a worker process.

    Args:
        fn: A picklable top-level callable (calculate, optimize, run_monte_carlo)
        timeout: Seconds before the worker is terminated; env default when None

    Returns:
        Whatever fn returns

    Raises:
        EngineTimeoutError: the call did not finish in time
        Exception: any exception raised by fn is re-raised here
    """
    budget = default_timeout() if timeout is None else float(timeout)
    pool = multiprocessing.Pool(processes=1)
    try:
        pending = pool.apply_async(fn, args, kwargs)
        try:
            result = pending.get(timeout=budget)
        except multiprocessing.TimeoutError:
            logger.warning(f"{getattr(fn, '__name__', fn)} exceeded {budget:.1f}s; terminating worker")
            raise EngineTimeoutError(f"Engine call timed out after {budget:.1f}s") from None
        return result
    finally:
        pool.terminate()
        pool.join()
