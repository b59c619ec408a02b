import asyncio
import signal
import socket

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from sigprof.lifecycle.api_server_wrapper import DebugServer
from sigprof.models.errors import BindError


def make_app():
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(10)
        return {"done": True}

    return app


@pytest_asyncio.fixture
async def server(address):
    srv = DebugServer(make_app(), address)
    yield srv
    await srv.close()


def port_is_free(port):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind(("127.0.0.1", port))
        except OSError:
            return False
    return True


@pytest.mark.asyncio
async def test_start_serve_and_shutdown(server, free_port):
    server.bind()
    await server.start(timeout=2)
    assert server.is_running
    assert server.server.started

    async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{free_port}") as client:
        response = await client.get("/ping")
    assert response.status_code == 200
    assert response.json() == {"pong": True}

    assert await server.shutdown(timeout=2) is True
    await server.close()

    assert not server.is_running
    assert port_is_free(free_port)


@pytest.mark.asyncio
async def test_bind_error_when_address_in_use(free_port):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
        blocker.bind(("127.0.0.1", free_port))
        blocker.listen()

        srv = DebugServer(make_app(), f"127.0.0.1:{free_port}")
        with pytest.raises(BindError) as exc_info:
            srv.bind()

    err = exc_info.value
    assert err.code == "BIND_ERROR"
    assert err.status_code == 503
    assert isinstance(err.__cause__, OSError)
    assert err.details["address"] == f"127.0.0.1:{free_port}"


@pytest.mark.asyncio
async def test_start_requires_bind(server):
    with pytest.raises(RuntimeError):
        await server.start(timeout=1)


@pytest.mark.asyncio
async def test_close_without_start(server):
    await server.close()
    await server.close()
    assert await server.shutdown(timeout=0.1) is True


@pytest.mark.asyncio
async def test_forced_exit_when_drain_exceeds_deadline(server, free_port):
    server.bind()
    await server.start(timeout=5)

    async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{free_port}") as client:
        request = asyncio.create_task(client.get("/slow"))
        await asyncio.sleep(0.2)

        assert await server.shutdown(timeout=0.2) is False
        await server.close(grace=0.5)

        request.cancel()
        await asyncio.gather(request, return_exceptions=True)

    assert server.task is None
    assert port_is_free(free_port)


@pytest.mark.asyncio
async def test_uvicorn_does_not_capture_process_signals(server):
    before = signal.getsignal(signal.SIGINT)
    server.bind()
    await server.start(timeout=1)
    assert signal.getsignal(signal.SIGINT) is before
    await server.shutdown(timeout=1)
