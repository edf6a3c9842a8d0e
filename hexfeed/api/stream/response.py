"""Stream API layer: ASGI response that binds a StreamSession to its connection."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Mapping

from datastar_py.sse import SSE_HEADERS
from starlette.responses import Response
from starlette.types import Message, Receive, Scope, Send

from hexfeed.core.errors import StreamError, TransportWriteFailure
from hexfeed.feed.session import CloseReason, StreamSession

_ERROR_BODY = b"Internal Server Error"


class SessionStreamResponse(Response):
    """Send the session's fragments as they are produced.

    Headers are committed with the first fragment so a failure before that
    point can still be answered with a 500. A concurrent listener turns the
    transport's `http.disconnect` into the session's cancellation token.
    """

    media_type = "text/event-stream"

    def __init__(self, session: StreamSession, headers: Mapping[str, str] | None = None) -> None:
        self.session = session
        self.status_code = 200
        self.background = None
        merged = dict(SSE_HEADERS)
        if headers:
            merged.update(headers)
        self.init_headers(merged)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        token = self.session.token
        started = False

        async def send_or_fail(message: Message) -> None:
            try:
                await send(message)
            except OSError as exc:
                token.cancel(CloseReason.DISCONNECT)
                raise TransportWriteFailure(str(exc) or type(exc).__name__) from exc

        async def write(frame: str) -> None:
            nonlocal started
            if not started:
                await send_or_fail(
                    {"type": "http.response.start", "status": self.status_code, "headers": self.raw_headers}
                )
                started = True
            await send_or_fail({"type": "http.response.body", "body": frame.encode("utf-8"), "more_body": True})

        async def listen_for_disconnect() -> None:
            while True:
                message = await receive()
                if message["type"] == "http.disconnect":
                    token.cancel(CloseReason.DISCONNECT)
                    return

        listener = asyncio.create_task(listen_for_disconnect())
        try:
            failed = False
            try:
                await self.session.run(write)
            except StreamError:
                failed = True

            with contextlib.suppress(OSError):
                if not started:
                    if failed:
                        await self._send_error(send)
                        return
                    await send({"type": "http.response.start", "status": self.status_code, "headers": self.raw_headers})
                await send({"type": "http.response.body", "body": b"", "more_body": False})
        finally:
            listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await listener

    async def _send_error(self, send: Send) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": 500,
                "headers": [
                    (b"content-type", b"text/plain; charset=utf-8"),
                    (b"content-length", str(len(_ERROR_BODY)).encode("latin-1")),
                ],
            }
        )
        await send({"type": "http.response.body", "body": _ERROR_BODY, "more_body": False})
