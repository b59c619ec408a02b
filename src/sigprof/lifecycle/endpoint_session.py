"""
Endpoint session - one activation of the debug endpoint.

Phases, strictly sequential:
  1. pre_start hooks
  2. bind + serve a fresh debug app (BindError -> skip to 6)
  3. race the serving timeout against the stop token
  4. graceful shutdown, drain bounded by the same timeout
  5. wait for the serve task, release the socket
  6. post_shutdown hooks (always, exactly once)
"""

from __future__ import annotations

from typing import Optional

from sigprof.lifecycle.api_server_wrapper import DebugServer
from sigprof.lifecycle.hooks import HookChain
from sigprof.models.config import ProfilerConfig
from sigprof.models.enums import EventType
from sigprof.models.errors import BindError, ShutdownTimeoutError
from sigprof.utils.aio import StopToken, wait_first
from sigprof.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.ENDPOINT)

_STOP_REQUESTED, _SERVER_EXITED = 0, 1


class EndpointSession:
    """
    Runs a single serve cycle of the debug endpoint.

    run() never raises for endpoint failures (bind errors, drain timeouts,
    broken app factories); they are reported to the event handler. It returns
    only after the serve task has finished and post_shutdown hooks ran.
    """

    def __init__(self, config: ProfilerConfig, hooks: HookChain, stop: StopToken):
        self._config = config
        self._hooks = hooks
        self._stop = stop
        self._evt = config.event_handler
        self.server: Optional[DebugServer] = None

    async def run(self) -> None:
        address = self._config.address
        timeout = self._config.timeout

        self._hooks.pre_start()
        try:
            server = DebugServer(self._config.build_app(), address)
            self.server = server
            try:
                server.bind()
            except BindError as e:
                self._evt(EventType.ERROR, "start debug endpoint", address=address, err=e.message)
                return

            self._evt(EventType.INFO, "start debug endpoint", address=address)
            await server.start(timeout)

            reason = await wait_first(self._stop.wait(), server.wait_closed(), timeout=timeout)
            if reason == _SERVER_EXITED:
                self._evt(EventType.ERROR, "debug endpoint exited unexpectedly", address=address)

            self._evt(
                EventType.INFO,
                "shutdown debug endpoint",
                address=address,
                timeout=timeout,
                reason=_describe(reason),
            )
            if not await server.shutdown(timeout):
                err = ShutdownTimeoutError(address, timeout)
                self._evt(EventType.ERROR, "shutdown debug endpoint", address=address, err=err.message)

            await server.close()
            self._evt(EventType.INFO, "debug endpoint stopped", address=address)
        except Exception as e:
            log.error(f"Session failed: {e!r}")
            self._evt(EventType.ERROR, "debug endpoint failed", address=address, err=repr(e))
        finally:
            if self.server is not None:
                await self.server.close()
            self._hooks.post_shutdown()


def _describe(reason: Optional[int]) -> str:
    if reason is None:
        return "timeout"
    if reason == _STOP_REQUESTED:
        return "stop requested"
    return "listener exited"
