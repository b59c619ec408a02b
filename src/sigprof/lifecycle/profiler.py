"""
Profiler - arms the debug endpoint on an OS signal.

    profiler = Profiler(ProfilerConfig(address="localhost:6666", timeout=300))
    profiler.start()                 # returns immediately
    ...                              # kill -USR1 <pid> -> endpoint serves 300s
    await profiler.stop()            # returns once everything drained

State machine:

    not running --start()--> watching --signal--> serving --timeout/stop--+
         ^                      ^                                         |
         |                      +------------ (not stopped) <-------------+
         +---- stop()/cancel ---+-- (stopped: exit after session drains) -+

start() and stop() must be called from the thread running the event loop.
The run handle is swapped without an intervening await, so concurrent
coroutines calling start()/stop() see exactly one transition each way.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from sigprof.lifecycle.endpoint_session import EndpointSession
from sigprof.lifecycle.hooks import HookChain
from sigprof.lifecycle.signal_watcher import SignalWatcher
from sigprof.models.config import ProfilerConfig
from sigprof.models.enums import EventType
from sigprof.utils.aio import StopToken, wait_first
from sigprof.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SIGNAL)


@dataclass
class _Run:
    """One start()..stop() generation of the watch loop."""
    stopped: asyncio.Event = field(default_factory=asyncio.Event)
    cancel: Optional[asyncio.Event] = None
    task: Optional[asyncio.Task] = None

    @property
    def token(self) -> StopToken:
        return StopToken(self.stopped, self.cancel)


class Profiler:
    """
    Lifecycle controller of the signal-armed debug endpoint.

    Args:
        config: Profiler configuration (default: ProfilerConfig())
    """

    def __init__(self, config: Optional[ProfilerConfig] = None):
        self.config = config or ProfilerConfig()
        self._evt = self.config.event_handler
        self._hooks = HookChain(self.config.hooks, self._evt)
        self._watcher = SignalWatcher(self.config.signal)
        self._run: Optional[_Run] = None
        self._running = asyncio.Lock()
        self._last_task: Optional[asyncio.Task] = None

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------
    @property
    def address(self) -> str:
        """Listen address of the debug endpoint."""
        return self.config.address

    @property
    def is_running(self) -> bool:
        return self._run is not None

    def start(self, cancel: Optional[asyncio.Event] = None) -> None:
        """
        Start the signal handler loop. Non-blocking; no-op while running.

        Args:
            cancel: optional external cancellation; setting it has the same
                    effect as stop() without waiting for the drain

        Raises:
            RuntimeError: no running event loop
        """
        if self._run is not None:
            return

        loop = asyncio.get_running_loop()
        run = _Run(cancel=cancel)
        self._run = run
        run.task = loop.create_task(self._watch(run), name="sigprof-signal-handler")
        self._last_task = run.task

    async def stop(self) -> None:
        """
        Stop the signal handler loop and wait until it fully drained,
        including an endpoint session in flight. No-op when not running.
        """
        run = self._run
        if run is None:
            return

        self._run = None
        run.stopped.set()
        log.debug("Stop requested, waiting for the watch loop to drain", address=self.address)
        if run.task is not None:
            await asyncio.wait({run.task})

    async def wait_stopped(self) -> None:
        """Block until the most recent loop has exited (by stop() or cancel)."""
        if self._last_task is not None:
            await asyncio.wait({self._last_task})

    # ----------------------------------------------------------------------
    # WATCH LOOP
    # ----------------------------------------------------------------------
    async def _watch(self, run: _Run) -> None:
        token = run.token
        sig_name = self.config.signal.name

        # a restarted loop waits for the previous one to finish draining
        async with self._running:
            try:
                self._watcher.open()
            except (RuntimeError, ValueError, OSError) as e:
                self._evt(EventType.ERROR, "start profiler signal handler", signal=sig_name, err=repr(e))
                self._finish(run)
                return

            # emitted once the previous generation has drained, so start/stop
            # events alternate even when start() races a draining stop()
            self._evt(EventType.INFO, "start profiler signal handler", signal=sig_name)
            try:
                while not token.is_set():
                    self._watcher.subscribe()
                    fired = await wait_first(self._watcher.wait(), token.wait())
                    self._watcher.unsubscribe()
                    if fired != 0:
                        break

                    self._evt(EventType.DEBUG, "signal received", signal=sig_name)
                    log.debug(f"{sig_name} received, arming {self.address}")
                    await EndpointSession(self.config, self._hooks, token).run()
            finally:
                self._watcher.close()
                self._evt(EventType.INFO, "stop profiler signal handler", signal=sig_name)
                self._finish(run)

        self._evt(EventType.DEBUG, "profiler signal handler stopped", signal=sig_name)

    def _finish(self, run: _Run) -> None:
        # external cancellation: stop() was never called for this run
        if self._run is run:
            self._run = None
