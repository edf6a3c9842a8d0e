"""Stream session runtime: tick, encode and write one client's feed.

A session owns a cancellation token that the transport sets when the client
goes away and the shutdown coordinator sets when the grace period runs out.
The token is observed at every suspension point: while waiting for the next
tick and right before each write.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from uuid import uuid4

from datastar_py import ServerSentEventGenerator as SSE

from hexfeed.core.errors import StreamError, TransportWriteFailure
from hexfeed.feed.encoder import encode
from hexfeed.feed.entropy import EntropySource
from hexfeed.infra.observability.logger import get_logger

Writer = Callable[[str], Awaitable[None]]


class SessionState(str, Enum):
    ACTIVE = "active"
    CLOSING = "closing"


class CloseReason(str, Enum):
    DISCONNECT = "disconnect"
    ERROR = "error"
    SHUTDOWN = "shutdown"
    LIMIT = "limit"


class CancelToken:
    """One-shot cancellation signal; the first reason wins."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: CloseReason | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> CloseReason | None:
        return self._reason

    def cancel(self, reason: CloseReason = CloseReason.DISCONNECT) -> bool:
        if self._event.is_set():
            return False
        self._reason = reason
        self._event.set()
        return True

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait up to `timeout` seconds; return True when cancelled."""
        if self._event.is_set():
            return True
        if timeout is not None and timeout <= 0:
            return False
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True


class SessionRegistry:
    """Track live sessions so shutdown can wait for or cancel them."""

    def __init__(self) -> None:
        self._sessions: set[StreamSession] = set()
        self._empty = asyncio.Event()
        self._empty.set()

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    def add(self, session: StreamSession) -> None:
        self._sessions.add(session)
        self._empty.clear()

    def discard(self, session: StreamSession) -> None:
        self._sessions.discard(session)
        if not self._sessions:
            self._empty.set()

    def cancel_all(self, reason: CloseReason = CloseReason.SHUTDOWN) -> int:
        """Cancel every live session; return how many tokens were newly set."""
        return sum(1 for session in list(self._sessions) if session.token.cancel(reason))

    async def wait_empty(self, timeout: float | None = None) -> bool:
        if self._empty.is_set():
            return True
        try:
            await asyncio.wait_for(self._empty.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True


class StreamSession:
    """Drive one client's event stream from connection open to close."""

    def __init__(
        self,
        *,
        source: EntropySource,
        interval: float,
        token: CancelToken | None = None,
        max_ticks: int = 0,
        registry: SessionRegistry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.session_id = uuid4().hex[:12]
        self.token = token or CancelToken()
        self._source = source
        self._interval = interval
        self._max_ticks = max(0, max_ticks)
        self._registry = registry
        self._logger = logger or get_logger(__name__)
        self._state = SessionState.ACTIVE
        self._close_reason: CloseReason | None = None
        self._written = 0
        self._started = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def close_reason(self) -> CloseReason | None:
        return self._close_reason

    @property
    def written(self) -> int:
        return self._written

    def _next_frame(self) -> str:
        fragment = encode(self._source.next())
        return SSE.patch_elements(fragment.html)

    def _close(self, reason: CloseReason) -> None:
        if self._state is SessionState.CLOSING:
            return
        self._state = SessionState.CLOSING
        self._close_reason = reason
        if self._registry is not None:
            self._registry.discard(self)

    def _close_on_cancel(self) -> int:
        reason = self.token.reason or CloseReason.DISCONNECT
        if reason is CloseReason.SHUTDOWN:
            self._logger.info("stream session %s closed by shutdown after %d events", self.session_id, self._written)
        else:
            self._logger.debug("client connection closed session=%s events=%d", self.session_id, self._written)
        self._close(reason)
        return self._written

    async def run(self, write: Writer) -> int:
        """Tick until closed; return the number of fragments written.

        Entropy, encode and non-disconnect write failures are logged and
        re-raised after the session is closed so the transport can decide
        whether an error response is still possible.
        """
        if self._started:
            raise RuntimeError(f"session {self.session_id} already ran")
        self._started = True
        if self._registry is not None:
            self._registry.add(self)

        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval
        try:
            while True:
                if await self.token.wait(next_tick - loop.time()):
                    return self._close_on_cancel()

                now = loop.time()
                next_tick += self._interval
                if next_tick <= now:
                    # Fell behind; drop the missed ticks instead of bursting.
                    skipped = int((now - next_tick) // self._interval) + 1
                    next_tick += skipped * self._interval

                try:
                    frame = self._next_frame()
                except StreamError as exc:
                    self._logger.error("error generating stream event session=%s: %s", self.session_id, exc)
                    self._close(CloseReason.ERROR)
                    raise

                if self.token.cancelled:
                    return self._close_on_cancel()
                try:
                    await write(frame)
                except TransportWriteFailure as exc:
                    if self.token.cancelled:
                        return self._close_on_cancel()
                    self._logger.error("failed to patch elements session=%s: %s", self.session_id, exc)
                    self._close(CloseReason.ERROR)
                    raise
                self._written += 1

                if self._max_ticks and self._written >= self._max_ticks:
                    self._logger.debug("stream session %s reached %d events", self.session_id, self._written)
                    self._close(CloseReason.LIMIT)
                    return self._written
        except asyncio.CancelledError:
            self._logger.debug("stream session %s task cancelled", self.session_id)
            self._close(self.token.reason or CloseReason.SHUTDOWN)
            raise
        finally:
            self._close(CloseReason.ERROR)
