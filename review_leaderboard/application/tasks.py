"""Joining groups of tasks so that one failure takes the whole group down."""
import asyncio
from typing import Awaitable, List, Sequence


async def cancel_all(tasks: Sequence[asyncio.Future]) -> None:
    """Cancel the tasks and wait until every one of them has stopped."""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def join_all(aws: Sequence[Awaitable]) -> List:
    """Run the awaitables concurrently and return their results in order.

    When one of them fails, or the caller is cancelled, the others are
    cancelled and awaited before the error is raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        await cancel_all(tasks)
        raise
