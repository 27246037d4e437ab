"""
Concurrency helpers for fanning out independent remote calls.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def fan_out(func: Callable[[T], R], items: Sequence[T], max_workers: Optional[int] = None) -> List[R]:
    """
    Call ``func`` on every item concurrently and wait for all of them.

    Each call returns its own result; nothing is shared while calls run.

    Args:
        func: Function applied to each item
        items: Inputs, one call per item
        max_workers: Upper bound on simultaneous calls (defaults to one per item)

    Returns:
        Results in the same order as ``items``
    """
    if not items:
        return []
    workers = min(max_workers or len(items), len(items))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(func, items))
