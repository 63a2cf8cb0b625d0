"""Bounded-concurrency task pool."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def bounded_map(
    fn: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    *,
    limit: int,
) -> list[R]:
    """
    Apply ``fn`` to every item with at most ``limit`` calls in flight.

    A fixed set of workers pulls ``(index, item)`` pairs off a queue, so
    results come back in input order regardless of completion order. An
    exception from ``fn`` cancels the remaining workers and propagates.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    pending = list(items)
    results: list[R] = [None] * len(pending)  # type: ignore[list-item]
    if not pending:
        return results

    queue: asyncio.Queue[tuple[int, T]] = asyncio.Queue()
    for pair in enumerate(pending):
        queue.put_nowait(pair)

    async def worker() -> None:
        while True:
            try:
                index, item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            results[index] = await fn(item)

    workers = [asyncio.create_task(worker()) for _ in range(min(limit, len(pending)))]
    try:
        await asyncio.gather(*workers)
    finally:
        for task in workers:
            if not task.done():
                task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
    return results
