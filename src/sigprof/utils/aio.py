"""
asyncio helpers for racing waiters against each other
"""

import asyncio
import contextlib
from typing import Awaitable, Optional


async def wait_first(*aws: Awaitable, timeout: Optional[float] = None) -> Optional[int]:
    """
    Wait until the first of several awaitables completes.

    The remaining waiters are cancelled and awaited before returning, so
    nothing is left pending on the loop.

    Args:
        *aws: coroutines or futures to race
        timeout: give up after this many seconds

    Returns:
        Index of the first completed awaitable, or None on timeout
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        done, _ = await asyncio.wait(tasks, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        for index, task in enumerate(tasks):
            if task in done:
                return index
        return None
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        for task in pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task


class StopToken:
    """
    Stop request made of one or more asyncio.Events.

    Set as soon as any of its events is set; used to combine Profiler.stop()
    with an external cancellation event.
    """

    def __init__(self, *events: asyncio.Event):
        self._events = tuple(e for e in events if e is not None)

    def is_set(self) -> bool:
        return any(e.is_set() for e in self._events)

    async def wait(self) -> None:
        if self.is_set():
            return
        await wait_first(*(e.wait() for e in self._events))
