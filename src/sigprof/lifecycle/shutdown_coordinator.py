"""
Shutdown coordinator that orchestrates graceful shutdown of the runner.

Manages SIGINT/SIGTERM handlers, shutdown sequencing, and error handling
across multiple shutdown handlers in priority order.
"""

import asyncio
import signal
from typing import Dict, List, Optional, Tuple

from sigprof.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)

SHUTDOWN_SIGNALS: Tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown of multiple components.

    Maintains a list of shutdown handlers and executes them in priority order
    when shutdown is triggered. Handles signal registration, timeout management,
    and error logging.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.register(ProfilerShutdownHandler(profiler))

        coordinator.setup_signal_handlers(loop)
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
    """

    def __init__(self, timeout_per_handler: float = 5.0, total_timeout: float = 15.0):
        """
        Initialize shutdown coordinator.

        Args:
            timeout_per_handler: Timeout for each individual handler (seconds)
            total_timeout: Total timeout for entire shutdown sequence (seconds)
        """
        self._handlers: List = []
        self._shutdown_event: Optional[asyncio.Event] = None
        self._timeout_per_handler = timeout_per_handler
        self._total_timeout = total_timeout
        self._shutdown_trigger: Dict[str, Optional[str]] = {"reason": None}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def register(self, handler) -> None:
        """
        Register a shutdown handler.

        Handler must have:
        - shutdown_priority property (int)
        - async shutdown() method

        Args:
            handler: Object implementing IShutdownHandler protocol

        Raises:
            ValueError: Handler does not implement the protocol
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not hasattr(handler, "shutdown"):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Install OS signal handlers for graceful shutdown.

        Registers SIGINT (Ctrl+C) and SIGTERM.

        Args:
            loop: Running asyncio event loop
        """
        self._shutdown_event = asyncio.Event()
        self._loop = loop

        for sig in SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, lambda s=sig: self.request_shutdown(s.name))

        log.info("Signal handlers installed (SIGINT, SIGTERM)")

    def remove_signal_handlers(self) -> None:
        """Uninstall the handlers added by setup_signal_handlers()."""
        if self._loop is None:
            return
        for sig in SHUTDOWN_SIGNALS:
            self._loop.remove_signal_handler(sig)
        self._loop = None

    def request_shutdown(self, reason: str) -> None:
        """Trigger shutdown programmatically (also used by the signal handlers)."""
        if self._shutdown_event is None:
            raise RuntimeError("Call setup_signal_handlers() first")
        if self._shutdown_event.is_set():
            return
        self._shutdown_trigger["reason"] = reason
        log.info(f"{reason} received → triggering shutdown")
        self._shutdown_event.set()

    @property
    def reason(self) -> Optional[str]:
        return self._shutdown_trigger["reason"]

    async def wait_for_shutdown(self) -> None:
        """
        Wait for a shutdown signal.

        Raises:
            RuntimeError: If signal handlers weren't setup
        """
        if self._shutdown_event is None:
            raise RuntimeError("Call setup_signal_handlers() first")

        await self._shutdown_event.wait()
        log.debug("Shutdown triggered")

    async def shutdown_all(self) -> None:
        """
        Execute graceful shutdown of all handlers in priority order.

        Handlers are called in descending priority order (highest first).
        Each handler has its own timeout (timeout_per_handler) and the entire
        sequence has a global timeout (total_timeout). A failing handler is
        logged and the sequence continues.
        """
        log.info("🛑 Initiating graceful shutdown sequence...")
        log.info(f"   Reason: {self._shutdown_trigger.get('reason') or 'UNKNOWN'}")

        sorted_handlers = sorted(
            self._handlers, key=lambda h: h.shutdown_priority, reverse=True
        )

        loop = asyncio.get_running_loop()
        start_time = loop.time()

        for handler in sorted_handlers:
            handler_name = handler.__class__.__name__
            priority = handler.shutdown_priority

            elapsed = loop.time() - start_time
            if elapsed > self._total_timeout:
                log.error(
                    f"⚠️  Total shutdown timeout exceeded ({elapsed:.1f}s > {self._total_timeout}s)"
                )
                break

            try:
                log.debug(f"Shutting down {handler_name} (priority={priority})...")
                await asyncio.wait_for(handler.shutdown(), timeout=self._timeout_per_handler)
                log.debug(f"✓ {handler_name} shutdown complete")

            except asyncio.TimeoutError:
                log.error(
                    f"⚠️  {handler_name} shutdown timeout "
                    f"({self._timeout_per_handler}s)"
                )

            except Exception as e:
                log.error(f"❌ Error shutting down {handler_name}: {e}")

        log.info("✓ Shutdown sequence complete")

