"""Bounded, order-preserving concurrent execution."""

from __future__ import annotations

from collections.abc import Coroutine
from typing import TYPE_CHECKING, TypeVar

import asyncio


if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable


T = TypeVar("T")


async def bounded(semaphore: asyncio.Semaphore, awaitable: Awaitable[T]) -> T:
    """Await under a semaphore so at most its value run at once."""
    try:
        async with semaphore:
            return await awaitable
    finally:
        # A coroutine cancelled while queued never started; close it
        if isinstance(awaitable, Coroutine):
            awaitable.close()


async def gather_ordered(
    awaitables: Iterable[Awaitable[T]],
    semaphore: asyncio.Semaphore | None = None,
) -> list[T]:
    """Run awaitables concurrently and return their results in input order.

    When a semaphore is given every awaitable runs under it. If one fails, the
    others are cancelled and the first error is raised; no partial list is
    ever returned.

    Args:
        awaitables: Coroutines to run
        semaphore: Optional limit on how many run at the same time

    Returns:
        Results, index-aligned with the input

    Example:
        ```python
        sem = asyncio.Semaphore(10)
        receipts = await gather_ordered(
            (node.get_transaction_receipt(h) for h in hashes), sem
        )
        ```
    """
    if semaphore is not None:
        awaitables = [bounded(semaphore, a) for a in awaitables]
    tasks = [asyncio.ensure_future(a) for a in awaitables]
    if not tasks:
        return []

    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        # Let cancelled tasks unwind before the error leaves this frame
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


__all__ = ["bounded", "gather_ordered"]
