from __future__ import annotations
from typing import TYPE_CHECKING

from sigprof.lifecycle.shutdown_protocol import IShutdownHandler
from sigprof.utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from sigprof.lifecycle.profiler import Profiler

log = get_logger().for_category(LogCategory.SHUTDOWN)


class ProfilerShutdownHandler(IShutdownHandler):
    """
    Shutdown handler for the profiler signal loop.

    Stops the watch loop and waits for an active debug endpoint session to
    drain, so its post_shutdown hooks run before the process exits.

    Priority: 100 (shutdown first)
    """

    def __init__(self, profiler: "Profiler"):
        """
        Initialize profiler shutdown handler.

        Args:
            profiler: Profiler instance to stop
        """
        self.profiler = profiler

    @property
    def shutdown_priority(self) -> int:
        """Profiler shuts down before anything it may be profiling."""
        return 100

    async def shutdown(self) -> None:
        """Stop the profiler and wait for the drain."""
        if not self.profiler.is_running:
            log.debug("Profiler not running")
            return

        log.info(f"Stopping profiler ({self.profiler.address})...")
        await self.profiler.stop()
