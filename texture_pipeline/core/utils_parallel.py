"""Parallel execution helpers for the map builders."""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable, Dict, Mapping, Optional, TypeVar


LOGGER = logging.getLogger("texture_pipeline.parallel")

R = TypeVar("R")


def create_thread_pool(max_workers: Optional[int] = None) -> concurrent.futures.ThreadPoolExecutor:
    """Create a thread pool executor with sane defaults."""

    return concurrent.futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="texture-map")


def run_parallel(tasks: Mapping[str, Callable[[], R]], *, max_workers: Optional[int] = None) -> Dict[str, R]:
    """Run every named task concurrently and return results keyed by name.

    The first failure is logged and re-raised once all tasks have finished.
    """

    if not tasks:
        return {}
    if max_workers == 1 or len(tasks) == 1:
        return {name: task() for name, task in tasks.items()}

    results: Dict[str, R] = {}
    failure: Optional[BaseException] = None
    with create_thread_pool(max_workers=max_workers) as executor:
        futures = {executor.submit(task): name for name, task in tasks.items()}
        for future in concurrent.futures.as_completed(futures):
            name = futures[future]
            try:
                results[name] = future.result()
            except Exception as exc:
                LOGGER.error("Map worker %r failed: %s", name, exc)
                if failure is None:
                    failure = exc
    if failure is not None:
        raise failure
    return {name: results[name] for name in tasks}
