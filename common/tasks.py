"""Thread pool helpers for CPU-light, IO-bound fan-out."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar


T = TypeVar("T")
R = TypeVar("R")


def map_ordered(func: Callable[[T], R], items: Iterable[T], *, workers: int = 1) -> list[R]:
    """Apply ``func`` to every item and return results in input order.

    With ``workers <= 1`` everything runs inline on the calling thread.
    Exceptions raised by ``func`` propagate to the caller.
    """

    items = list(items)
    if workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=min(workers, len(items))) as executor:
        return list(executor.map(func, items))


__all__ = ["map_ordered"]
