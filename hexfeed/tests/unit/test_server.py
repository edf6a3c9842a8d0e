"""Unit tests for listener binding and signal routing in the process runner."""

from __future__ import annotations

import contextlib
import signal
import socket

import pytest
import uvicorn
from fastapi import FastAPI

from hexfeed.core.config import Settings
from hexfeed.core.errors import ListenBindFailure
from hexfeed.core.shutdown import LifecyclePhase
from hexfeed.main import create_app
from hexfeed.server import FeedServer, bind_socket, main


@pytest.fixture
def busy_port():
    holder = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    holder.bind(("127.0.0.1", 0))
    holder.listen(1)
    try:
        yield holder.getsockname()[1]
    finally:
        holder.close()


def test_bind_socket_reports_bind_failure(busy_port: int) -> None:
    with pytest.raises(ListenBindFailure) as info:
        bind_socket("127.0.0.1", busy_port)

    assert info.value.port == busy_port
    assert isinstance(info.value.cause, OSError)


def test_bind_socket_on_free_port() -> None:
    sock = bind_socket("127.0.0.1", 0)
    try:
        assert sock.getsockname()[1] > 0
    finally:
        sock.close()


def test_main_exits_non_zero_when_port_is_taken(monkeypatch, busy_port: int) -> None:
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", str(busy_port))

    assert main() == 1


def test_handle_exit_routes_signal_to_coordinator(fast_settings) -> None:
    app = create_app(fast_settings)
    coordinator = app.state.container.coordinator
    server = FeedServer(uvicorn.Config(app, log_config=None), coordinator)

    server.handle_exit(signal.SIGTERM, None)

    assert coordinator.phase is LifecyclePhase.DRAINING
    assert server.should_exit is False

    server.stop_accepting()
    assert server.should_exit is True

    server.force_stop()
    assert server.force_exit is True


def test_main_exits_non_zero_when_startup_fails(monkeypatch) -> None:
    @contextlib.asynccontextmanager
    async def failing_lifespan(_app: FastAPI):
        raise RuntimeError("container warmup failed")
        yield

    def build_failing_app(settings: Settings) -> FastAPI:
        app = create_app(settings)
        app.router.lifespan_context = failing_lifespan
        return app

    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "0")
    monkeypatch.setattr("hexfeed.server.create_app", build_failing_app)

    assert main() == 1
