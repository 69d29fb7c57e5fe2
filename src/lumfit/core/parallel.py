"""Parallel evaluation support for LumFit.

Used to run independent model fits (e.g. one mixture model per component
count) concurrently. Threads are used and BLAS is limited to one thread per
worker so the workers do not oversubscribe the cores.
"""

import multiprocessing as mp
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from threadpoolctl import threadpool_limits

T = TypeVar("T")
R = TypeVar("R")


def optimal_worker_count(n_tasks: int, requested: int | None = None) -> int:
    """Number of threads to use for n_tasks independent tasks.

    Args:
        n_tasks: Number of tasks to run
        requested: Requested number of workers (default: number of CPUs)

    Returns:
        Worker count between 1 and n_tasks
    """
    if requested is None:
        requested = mp.cpu_count()
    return max(1, min(requested, n_tasks))


def map_parallel(
    func: Callable[[T], R],
    items: Sequence[T],
    *,
    n_workers: int | None = 1,
    progress_callback: Callable[[R], None] | None = None,
) -> list[R]:
    """Apply func to every item, optionally on a thread pool.

    Results are returned in the order of ``items`` whatever the completion
    order. Exceptions raised by ``func`` propagate to the caller.

    Args:
        func: Function applied to each item
        items: Items to process
        n_workers: Number of threads (None uses all CPUs, 1 runs sequentially)
        progress_callback: Optional callback invoked with each result, in order

    Returns
    -------
        List of results
    """
    workers = optimal_worker_count(len(items), n_workers)

    if workers > 1:
        # Limit BLAS threads so workers do not oversubscribe the cores
        with (
            threadpool_limits(limits=1, user_api="blas"),
            ThreadPoolExecutor(max_workers=workers) as executor,
        ):
            results = list(executor.map(func, items))
    else:
        # Sequential for a single task or worker
        results = [func(item) for item in items]

    if progress_callback is not None:
        for result in results:
            progress_callback(result)

    return results


__all__ = ["map_parallel", "optimal_worker_count"]
