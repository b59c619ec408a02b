"""
Shared fixtures for the sigprof test suite
"""

import asyncio
import signal
import socket

import pytest

from sigprof.models.enums import EventType

# SIGUSR1 is left alone so a stray delivery never kills the test run
TEST_SIGNAL = getattr(signal, "SIGUSR2", None)



class EventRecorder:
    """EventHandler that keeps every event for later assertions."""

    def __init__(self):
        self.events = []

    def __call__(self, event_type, message, **attrs):
        self.events.append((event_type, message, attrs))

    @property
    def messages(self):
        return [message for _, message, _ in self.events]

    def count(self, message, event_type=None):
        return sum(
            1 for t, m, _ in self.events
            if m == message and (event_type is None or t == event_type)
        )

    def errors(self):
        return [(m, a) for t, m, a in self.events if t == EventType.ERROR]

    def lifecycle(self):
        """Only the start/stop events of the signal handler loop."""
        wanted = {"start profiler signal handler", "stop profiler signal handler"}
        return [m for t, m, _ in self.events if m in wanted and t == EventType.INFO]


class RecordingHook:
    """Hook appending its calls to a shared journal."""

    def __init__(self, name="hook", journal=None, fail_on=None):
        self.name = name
        self.journal = journal if journal is not None else []
        self.fail_on = fail_on
        self.pre_start_calls = 0
        self.post_shutdown_calls = 0

    def pre_start(self):
        self.pre_start_calls += 1
        self.journal.append((self.name, "pre_start"))
        if self.fail_on == "pre_start":
            raise RuntimeError(f"{self.name} pre_start failed")

    def post_shutdown(self):
        self.post_shutdown_calls += 1
        self.journal.append((self.name, "post_shutdown"))
        if self.fail_on == "post_shutdown":
            raise RuntimeError(f"{self.name} post_shutdown failed")


def find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def free_port():
    return find_free_port()


@pytest.fixture
def address(free_port):
    return f"127.0.0.1:{free_port}"


@pytest.fixture
def journal():
    return []


@pytest.fixture
def make_hook(journal):
    """Factory for RecordingHook instances sharing one journal."""
    def factory(name="hook", fail_on=None):
        return RecordingHook(name, journal, fail_on)
    return factory


@pytest.fixture
def watch_signal():
    if TEST_SIGNAL is None:
        pytest.skip("platform has no SIGUSR2")
    return TEST_SIGNAL


async def _until(predicate, timeout=5.0, interval=0.01):
    """Poll predicate() on the running loop; fail the test after timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            pytest.fail(f"condition not met within {timeout}s")
        await asyncio.sleep(interval)


@pytest.fixture
def until():
    return _until
