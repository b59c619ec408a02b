"""
Shutdown coordinator ordering, timeouts and the profiler shutdown handler.
"""

import asyncio
import os
import signal

import pytest

from sigprof.lifecycle.handlers import ProfilerShutdownHandler
from sigprof.lifecycle.profiler import Profiler
from sigprof.lifecycle.shutdown_coordinator import ShutdownCoordinator
from sigprof.models.config import ProfilerConfig


class FakeHandler:
    def __init__(self, name, priority, calls, delay=0.0, fail=False):
        self.name = name
        self._priority = priority
        self.calls = calls
        self.delay = delay
        self.fail = fail

    @property
    def shutdown_priority(self):
        return self._priority

    async def shutdown(self):
        await asyncio.sleep(self.delay)
        self.calls.append(self.name)
        if self.fail:
            raise RuntimeError(f"{self.name} failed")


@pytest.mark.asyncio
async def test_handlers_run_by_descending_priority():
    calls = []
    coordinator = ShutdownCoordinator()
    coordinator.register(FakeHandler("low", 10, calls))
    coordinator.register(FakeHandler("high", 100, calls))
    coordinator.register(FakeHandler("mid", 50, calls))

    await coordinator.shutdown_all()

    assert calls == ["high", "mid", "low"]


@pytest.mark.asyncio
async def test_failing_or_slow_handler_does_not_block_the_rest():
    calls = []
    coordinator = ShutdownCoordinator(timeout_per_handler=0.1)
    coordinator.register(FakeHandler("slow", 100, calls, delay=5))
    coordinator.register(FakeHandler("broken", 50, calls, fail=True))
    coordinator.register(FakeHandler("last", 10, calls))

    await coordinator.shutdown_all()

    assert calls == ["broken", "last"]


def test_register_rejects_incomplete_handler():
    coordinator = ShutdownCoordinator()
    with pytest.raises(ValueError):
        coordinator.register(object())


@pytest.mark.asyncio
async def test_request_shutdown_releases_waiter():
    coordinator = ShutdownCoordinator()
    coordinator.setup_signal_handlers(asyncio.get_running_loop())
    try:
        asyncio.get_running_loop().call_later(0.05, coordinator.request_shutdown, "test")
        await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=2)
        assert coordinator.reason == "test"
    finally:
        coordinator.remove_signal_handlers()


@pytest.mark.asyncio
@pytest.mark.skipif(os.name != "posix", reason="POSIX signal delivery")
async def test_sigterm_triggers_shutdown():
    coordinator = ShutdownCoordinator()
    coordinator.setup_signal_handlers(asyncio.get_running_loop())
    try:
        os.kill(os.getpid(), signal.SIGTERM)
        await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=2)
        assert coordinator.reason == "SIGTERM"
    finally:
        coordinator.remove_signal_handlers()
    assert signal.getsignal(signal.SIGTERM) == signal.SIG_DFL


@pytest.mark.asyncio
async def test_wait_requires_setup():
    with pytest.raises(RuntimeError):
        await ShutdownCoordinator().wait_for_shutdown()


@pytest.mark.asyncio
async def test_profiler_shutdown_handler(watch_signal, address, recorder):
    profiler = Profiler(ProfilerConfig(signal=watch_signal, address=address, event_handler=recorder))
    handler = ProfilerShutdownHandler(profiler)
    coordinator = ShutdownCoordinator()
    coordinator.register(handler)

    profiler.start()
    await coordinator.shutdown_all()

    assert not profiler.is_running
    assert recorder.lifecycle() == ["start profiler signal handler", "stop profiler signal handler"]

    # nothing left to stop
    await handler.shutdown()
    assert recorder.count("stop profiler signal handler") == 1
