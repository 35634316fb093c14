"""
Worker pool for independent resampling tasks.

Bootstrap replicates, nested inner resamples and jackknife evaluations
are embarrassingly parallel. parallel_map() runs them either inline
(n_jobs=1) or on a thread pool, always returning results in task order
so that aggregation never depends on completion order.

A shared deadline (time.perf_counter() value) bounds the whole run.
When it passes, pending work is cancelled and BootstrapTimeoutError is
raised; partial results are discarded.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Callable, Sequence

from pybootci.core.exceptions import BootstrapTimeoutError, InvalidArgumentError

logger = logging.getLogger(__name__)


def resolve_n_jobs(n_jobs: int | None) -> int:
    """
    Translate an n_jobs request into a worker count.

    None and 1 mean sequential. -1 means one worker per CPU. Any other
    value must be a positive integer.
    """
    if n_jobs is None:
        return 1
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, int):
        raise InvalidArgumentError(
            f"n_jobs: expected an integer, got {type(n_jobs).__name__}"
        )
    if n_jobs == -1:
        return os.cpu_count() or 1
    if n_jobs < 1:
        raise InvalidArgumentError(f"n_jobs must be >= 1 or -1, got {n_jobs}")
    return n_jobs


def deadline_from_timeout(timeout: float | None) -> float | None:
    """Absolute perf_counter deadline for a relative timeout, or None."""
    if timeout is None:
        return None
    return time.perf_counter() + timeout


def parallel_map(
    func: Callable[[Any], Any],
    items: Sequence[Any],
    n_jobs: int = 1,
    deadline: float | None = None,
    timeout: float | None = None,
) -> list[Any]:
    """
    Apply func to every item, returning results in item order.

    Args:
        func: Task function. Must not mutate shared state.
        items: Task inputs.
        n_jobs: Worker count (see resolve_n_jobs).
        deadline: Absolute time.perf_counter() limit, or None.
        timeout: Original timeout in seconds, reported on failure.

    Returns:
        List of func(item), aligned with items.

    Raises:
        BootstrapTimeoutError: If the deadline passes before all tasks
            complete.
        Exception: The first exception raised by any task propagates;
            remaining tasks are cancelled.
    """
    workers = resolve_n_jobs(n_jobs)
    total = len(items)

    if workers == 1 or total <= 1:
        results = []
        for k, item in enumerate(items):
            check_deadline(deadline, timeout, k, total)
            results.append(func(item))
        check_deadline(deadline, timeout, total, total)
        return results

    check_deadline(deadline, timeout, 0, total)
    logger.debug("dispatching %d tasks to %d threads", total, workers)

    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [executor.submit(func, item) for item in items]
        remaining = None
        if deadline is not None:
            remaining = max(0.0, deadline - time.perf_counter())
        done, not_done = wait(
            futures, timeout=remaining, return_when=FIRST_EXCEPTION,
        )

        for future in done:
            exc = future.exception()
            if exc is not None:
                raise exc

        if not_done:
            raise BootstrapTimeoutError(
                f"timed out after {timeout}s with {len(done)} of {total} "
                f"tasks complete",
                timeout=timeout if timeout is not None else 0.0,
                completed=len(done),
                total=total,
            )

        return [f.result() for f in futures]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def check_deadline(
    deadline: float | None,
    timeout: float | None,
    completed: int,
    total: int,
) -> None:
    """Raise BootstrapTimeoutError once deadline has passed."""
    if deadline is not None and time.perf_counter() > deadline:
        raise BootstrapTimeoutError(
            f"timed out after {timeout}s with {completed} of {total} "
            f"tasks complete",
            timeout=timeout if timeout is not None else 0.0,
            completed=completed,
            total=total,
        )
