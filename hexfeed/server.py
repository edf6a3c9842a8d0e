"""Process runner: bind the listener, serve with uvicorn, coordinate shutdown."""

from __future__ import annotations

import asyncio
import contextlib
import socket
from types import FrameType

import uvicorn
from fastapi import FastAPI

from hexfeed.core.config import Settings
from hexfeed.core.errors import ListenBindFailure
from hexfeed.core.shutdown import ShutdownCoordinator
from hexfeed.infra.observability.logger import get_logger, setup_logging
from hexfeed.main import create_app

logger = get_logger(__name__)

# Extra time uvicorn waits after the coordinator's own grace period.
UVICORN_GRACE_MARGIN_SECONDS = 1.0


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket up front so bind errors surface before serving."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise ListenBindFailure(host, port, exc) from exc
    sock.set_inheritable(True)
    return sock


class FeedServer(uvicorn.Server):
    """uvicorn server whose termination signals go to the shutdown coordinator."""

    def __init__(self, config: uvicorn.Config, coordinator: ShutdownCoordinator) -> None:
        super().__init__(config)
        self._coordinator = coordinator
        self._loop: asyncio.AbstractEventLoop | None = None

    async def serve(self, sockets: list[socket.socket] | None = None) -> None:
        self._loop = asyncio.get_running_loop()
        await super().serve(sockets=sockets)

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        if self._loop is None or self._loop.is_closed():
            self._coordinator.request_drain(sig)
            return
        self._loop.call_soon_threadsafe(self._coordinator.request_drain, sig)

    def stop_accepting(self) -> None:
        self.should_exit = True

    def force_stop(self) -> None:
        self.should_exit = True
        self.force_exit = True


async def serve(app: FastAPI, sock: socket.socket) -> tuple[bool, bool]:
    """Run until shutdown completes.

    Returns `(started, clean)`: whether uvicorn finished its startup
    (lifespan included) and whether the drain closed every session in time.
    """
    container = app.state.container
    coordinator: ShutdownCoordinator = container.coordinator
    config = uvicorn.Config(
        app,
        log_config=None,
        lifespan="on",
        access_log=False,
        timeout_graceful_shutdown=int(coordinator.grace_seconds + UVICORN_GRACE_MARGIN_SECONDS),
    )
    server = FeedServer(config, coordinator)
    watcher = asyncio.create_task(
        coordinator.await_signal(stop_accepting=server.stop_accepting, force_exit=server.force_stop)
    )
    clean = False
    try:
        await server.serve(sockets=[sock])
    finally:
        if not coordinator.draining:
            # uvicorn stopped on its own; make sure sessions are not left behind.
            coordinator.request_drain()
        with contextlib.suppress(asyncio.CancelledError):
            clean = await watcher
    return server.started, clean


def main() -> int:
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    try:
        sock = bind_socket(settings.host, settings.port)
    except ListenBindFailure as exc:
        logger.error("error running server: %s", exc)
        return 1

    app = create_app(settings)
    logger.info("server started host=%s port=%d", settings.host, settings.port)
    try:
        started, _ = asyncio.run(serve(app, sock))
    finally:
        if sock.fileno() != -1:
            sock.close()
    if not started:
        logger.error("error running server: startup failed host=%s port=%d", settings.host, settings.port)
        return 1
    logger.info("server shutdown complete")
    return 0
