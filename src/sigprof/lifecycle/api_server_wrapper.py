from __future__ import annotations
import asyncio
import contextlib
import math
import socket
from typing import Any, Optional

import uvicorn

from sigprof.models.errors import BindError
from sigprof.models.config import parse_address
from sigprof.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.ENDPOINT)


class _EmbeddedServer(uvicorn.Server):
    """uvicorn.Server that never touches process signal handlers."""

    def install_signal_handlers(self) -> None:  # uvicorn < 0.29
        pass

    @contextlib.contextmanager
    def capture_signals(self):  # uvicorn >= 0.29
        yield


class DebugServer:
    """
    Wrapper for running the debug endpoint's uvicorn server as an asyncio task.

    The listen socket is bound by bind() before uvicorn starts, so an
    unavailable address surfaces as BindError instead of uvicorn's sys.exit().
    uvicorn's own signal handling is disabled; the host process keeps full
    control of SIGINT/SIGTERM.

    Behaviour:
      - bind() opens the listening socket (connections queue in the backlog)
      - start() launches uvicorn.Server.serve() as a background task
      - shutdown(timeout) asks uvicorn to drain and exit; returns False if the
        deadline passed, after forcing exit
      - close() cancels anything left and releases the socket; idempotent
    """

    def __init__(self, app: Any, address: str):
        self.app = app
        self.address = address
        self.host, self.port = parse_address(address)
        self._sock: Optional[socket.socket] = None
        self._server: Optional[_EmbeddedServer] = None
        self._serve_task: Optional[asyncio.Task] = None

    # ----------------------------------------------------------------------
    # INTERNAL
    # ----------------------------------------------------------------------
    def _create_server(self, timeout: float) -> _EmbeddedServer:
        config = uvicorn.Config(
            app=self.app,
            loop="asyncio",
            lifespan="off",
            log_config=None,
            log_level="warning",
            access_log=False,
            server_header=False,
            # backstop only; shutdown() forces exit at the exact deadline first
            timeout_graceful_shutdown=math.ceil(timeout) + 1,
        )
        return _EmbeddedServer(config)

    def _create_socket(self) -> socket.socket:
        if self.host == "" and socket.has_dualstack_ipv6():
            return socket.create_server(
                ("", self.port), family=socket.AF_INET6, dualstack_ipv6=True
            )
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        return socket.create_server((self.host, self.port), family=family)

    async def _serve(self) -> None:
        try:
            await self._server.serve(sockets=[self._sock])
        except SystemExit as e:
            # uvicorn reports startup failures with sys.exit()
            raise RuntimeError(f"uvicorn exited during startup (code {e.code})") from e

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------
    def bind(self) -> None:
        """
        Open the listening socket.

        Raises:
            BindError: Address in use, permission denied or unresolvable
        """
        try:
            self._sock = self._create_socket()
        except OSError as e:
            raise BindError(self.address, e) from e
        log.debug(f"Bound {self.address}", sockname=self._sock.getsockname())

    async def start(self, timeout: float, *, wait_started_timeout: float = 5.0) -> None:
        """
        Start serving on the bound socket in a background task.

        Args:
            timeout: graceful shutdown deadline handed to uvicorn
            wait_started_timeout: how long to wait for uvicorn to report started
        """
        if self._sock is None:
            raise RuntimeError("DebugServer.bind() must succeed before start()")
        if self._serve_task is not None and not self._serve_task.done():
            raise RuntimeError("Debug server already started")

        self._server = self._create_server(timeout)
        self._serve_task = asyncio.create_task(self._serve(), name="sigprof-debug-endpoint")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + wait_started_timeout
        while loop.time() < deadline:
            if self._server.started or self._serve_task.done():
                break
            await asyncio.sleep(0.01)

        if self._serve_task.done():
            # surfaces the startup exception, if any
            self._serve_task.result()
        log.debug(f"Serving on {self.address}")

    async def wait_closed(self) -> None:
        """Block until the serve task exits on its own."""
        if self._serve_task is not None:
            await asyncio.wait({self._serve_task})

    async def shutdown(self, timeout: float) -> bool:
        """
        Gracefully stop accepting and drain in-flight requests.

        Returns:
            True if uvicorn exited within timeout, False if exit was forced
        """
        if self._server is None or self._serve_task is None:
            return True

        self._server.should_exit = True
        done, _ = await asyncio.wait({self._serve_task}, timeout=timeout)
        if done:
            return True

        log.warn(f"Drain deadline ({timeout}s) passed, forcing exit")
        self._server.force_exit = True
        return False

    async def close(self, *, grace: float = 1.0) -> None:
        """Cancel the serve task if still running and release the socket."""
        task = self._serve_task
        if task is not None and not task.done():
            done, _ = await asyncio.wait({task}, timeout=grace)
            if not done:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        if task is not None and task.done() and not task.cancelled():
            exc = task.exception()
            if exc is not None:
                log.debug(f"Serve task ended with {exc!r}")

        if self._sock is not None:
            self._sock.close()
            log.debug(f"Released {self.address}")

        self._sock = None
        self._server = None
        self._serve_task = None

    # ----------------------------------------------------------------------
    # PROPERTIES
    # ----------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        """Return whether the uvicorn serve task is active."""
        return self._serve_task is not None and not self._serve_task.done()

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._serve_task

    @property
    def server(self) -> Optional[uvicorn.Server]:
        return self._server
