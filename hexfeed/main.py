"""FastAPI entrypoint: wires config, container, routes, and lifecycle hooks."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from hexfeed.api.http.health import router as health_router
from hexfeed.api.http.page import router as page_router
from hexfeed.api.stream.sse import router as sse_router
from hexfeed.core.config import Settings
from hexfeed.core.container import build_container
from hexfeed.core.lifecycle import on_shutdown, on_startup
from hexfeed.infra.observability.access_log import AccessLogMiddleware
from hexfeed.infra.observability.logger import setup_logging


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)
    container = build_container(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        on_startup(container)
        try:
            yield
        finally:
            on_shutdown(container)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.container = container

    app.add_middleware(AccessLogMiddleware)

    app.include_router(page_router)
    app.include_router(health_router)
    app.include_router(sse_router)

    return app
