"""
Signal watcher - turns one OS signal into an awaitable notification.

The OS-level handler is installed once by open() and kept until close();
subscribe()/unsubscribe() only gate delivery. A signal arriving while the
watcher is unsubscribed is dropped: it neither wakes a waiter later nor falls
back to the default disposition (which for SIGUSR1 would terminate the
process).

Usage:
    watcher = SignalWatcher(signal.SIGUSR1)
    watcher.open()
    watcher.subscribe()
    await watcher.wait()
    watcher.unsubscribe()
    ...
    watcher.close()
"""

from __future__ import annotations

import asyncio
import signal
from typing import Any, Optional

from sigprof.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SIGNAL)


class SignalWatcher:
    """Single-signal subscription bound to the running event loop."""

    def __init__(self, sig: signal.Signals):
        self.signal = sig
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._fired = asyncio.Event()
        self._subscribed = False
        self._previous: Any = None
        self._loop_handler = False

    # ----------------------------------------------------------------------
    # INSTALL / RESTORE
    # ----------------------------------------------------------------------
    def open(self) -> None:
        """
        Install the OS signal handler on the running loop.

        Raises:
            RuntimeError: No running event loop
            ValueError: Not called from the main thread / invalid signal
        """
        if self._loop is not None:
            return

        loop = asyncio.get_running_loop()
        self._previous = signal.getsignal(self.signal)
        try:
            loop.add_signal_handler(self.signal, self._on_signal)
            self._loop_handler = True
        except NotImplementedError:
            # Loops without add_signal_handler (Windows proactor)
            signal.signal(
                self.signal,
                lambda signum, frame: loop.call_soon_threadsafe(self._on_signal),
            )
            self._loop_handler = False

        self._loop = loop
        log.debug(f"Handler installed for {self.signal.name}")

    def close(self) -> None:
        """Remove the handler and restore the disposition found by open()."""
        if self._loop is None:
            return

        self.unsubscribe()
        if self._loop_handler:
            self._loop.remove_signal_handler(self.signal)
        if self._previous is not None:
            signal.signal(self.signal, self._previous)

        self._loop = None
        self._previous = None
        log.debug(f"Handler removed for {self.signal.name}")

    # ----------------------------------------------------------------------
    # SUBSCRIPTION
    # ----------------------------------------------------------------------
    def subscribe(self) -> None:
        """Start delivering notifications to wait()."""
        if self._loop is None:
            raise RuntimeError("SignalWatcher.open() must be called before subscribe()")
        self._subscribed = True

    def unsubscribe(self) -> None:
        """Stop delivering notifications and drop any not yet consumed."""
        self._subscribed = False
        self._fired.clear()

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    async def wait(self) -> None:
        """Block until the signal is delivered while subscribed."""
        await self._fired.wait()

    def _on_signal(self) -> None:
        if not self._subscribed:
            log.debug(f"{self.signal.name} dropped (not subscribed)")
            return
        self._fired.set()
