"""Observability layer: ASGI access log that also covers long-lived streams."""

from __future__ import annotations

from time import perf_counter

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from hexfeed.infra.observability.logger import get_logger

access_logger = get_logger("uvicorn.access")


class AccessLogMiddleware:
    """Log one line per HTTP request once the response has fully finished."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (perf_counter() - start) * 1000
            query = scope.get("query_string", b"").decode("latin-1")
            path = f"{scope.get('path', '')}?{query}" if query else scope.get("path", "")
            client = scope.get("client")
            client_ip = client[0] if client else "-"
            access_logger.info(
                '%s "%s %s" %s %.2fms',
                client_ip,
                scope.get("method", "-"),
                path,
                status_code,
                duration_ms,
            )
