import asyncio

import pytest

from sigprof.utils.aio import StopToken, wait_first


@pytest.mark.asyncio
async def test_wait_first_returns_index_of_winner():
    fast = asyncio.sleep(0.01)
    slow = asyncio.sleep(10)
    assert await wait_first(slow, fast) == 1


@pytest.mark.asyncio
async def test_wait_first_timeout():
    assert await wait_first(asyncio.sleep(10), timeout=0.01) is None


@pytest.mark.asyncio
async def test_wait_first_cancels_losers():
    cancelled = asyncio.Event()

    async def loser():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    assert await wait_first(asyncio.sleep(0.01), loser()) == 0
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_stop_token_any_event():
    a, b = asyncio.Event(), asyncio.Event()
    token = StopToken(a, None, b)
    assert not token.is_set()

    asyncio.get_running_loop().call_later(0.01, b.set)
    await asyncio.wait_for(token.wait(), timeout=1)
    assert token.is_set()


@pytest.mark.asyncio
async def test_stop_token_already_set():
    event = asyncio.Event()
    event.set()
    await asyncio.wait_for(StopToken(event).wait(), timeout=0.1)
