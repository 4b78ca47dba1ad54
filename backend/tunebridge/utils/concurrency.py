"""Bounded-concurrency async map with input-ordered results."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from tunebridge.errors import InvalidInputError

T = TypeVar("T")
R = TypeVar("R")


async def map_with_concurrency(
    items: Sequence[T],
    concurrency: int,
    fn: Callable[[T, int], Awaitable[R]],
) -> list[R]:
    """Apply ``fn(item, index)`` to every item with at most ``concurrency`` calls in flight.

    ``min(concurrency, len(items))`` workers share one ``enumerate`` iterator.
    Pulling the next ``(index, item)`` pair is synchronous, so on a single
    event loop no two workers can claim the same index, and each result is
    stored at the index claimed rather than in completion order.

    ``fn`` is expected to turn its own failures into values. If it raises
    anyway, the other workers are cancelled and the exception propagates.
    """
    if concurrency < 1:
        raise InvalidInputError(f"concurrency must be at least 1, got {concurrency}")
    if not items:
        return []

    results: list[R | None] = [None] * len(items)
    claims = enumerate(items)

    async def _worker() -> None:
        for index, item in claims:
            results[index] = await fn(item, index)

    workers = [asyncio.ensure_future(_worker()) for _ in range(min(concurrency, len(items)))]
    try:
        await asyncio.gather(*workers)
    except BaseException:
        for worker in workers:
            worker.cancel()
        raise

    return results  # type: ignore[return-value]
