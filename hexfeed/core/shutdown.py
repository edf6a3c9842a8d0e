"""Shutdown coordination: drain live stream sessions within a bounded grace period."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Callable
from enum import Enum

from hexfeed.core.errors import ShutdownTimeout
from hexfeed.feed.session import CloseReason, SessionRegistry
from hexfeed.infra.observability.logger import get_logger

# Time allowed for force-cancelled sessions to unwind after the grace period.
FORCED_CLOSE_SECONDS = 1.0


class LifecyclePhase(str, Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


def _signal_name(sig: int | None) -> str:
    if sig is None:
        return "manual"
    try:
        return signal.Signals(sig).name
    except ValueError:
        return str(sig)


class ShutdownCoordinator:
    """Move the process from running to draining exactly once and bound the drain.

    A repeated termination signal while draining forces exit: every session is
    cancelled at once and the server is told not to wait any longer.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        grace_seconds: float = 5.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._grace_seconds = max(0.0, grace_seconds)
        self._logger = logger or get_logger(__name__)
        self._phase = LifecyclePhase.RUNNING
        self._requested = asyncio.Event()
        self._forced = False
        self._on_force: Callable[[], None] | None = None
        self.last_error: ShutdownTimeout | None = None

    @property
    def phase(self) -> LifecyclePhase:
        return self._phase

    @property
    def draining(self) -> bool:
        return self._phase is not LifecyclePhase.RUNNING

    @property
    def forced(self) -> bool:
        return self._forced

    @property
    def grace_seconds(self) -> float:
        return self._grace_seconds

    def request_drain(self, sig: int | None = None) -> bool:
        """Begin draining; return True only for the call that started it."""
        if self._phase is LifecyclePhase.RUNNING:
            self._phase = LifecyclePhase.DRAINING
            self._logger.info(
                "shutdown requested by %s; draining %d active session(s)",
                _signal_name(sig),
                self._registry.active_count,
            )
            self._requested.set()
            return True

        if not self._forced:
            self._forced = True
            self._logger.warning("repeated %s during shutdown; forcing exit", _signal_name(sig))
            self._registry.cancel_all(CloseReason.SHUTDOWN)
            if self._on_force is not None:
                self._on_force()
        return False

    async def await_signal(
        self,
        stop_accepting: Callable[[], None],
        force_exit: Callable[[], None] | None = None,
    ) -> bool:
        """Wait for the first drain request, stop the listener, then drain."""
        self._on_force = force_exit
        await self._requested.wait()
        stop_accepting()
        if self._forced and force_exit is not None:
            force_exit()
        return await self.drain()

    async def drain(self) -> bool:
        """Wait for sessions to close; cancel leftovers once the grace period expires.

        Returns True when every session closed on its own.
        """
        if self._phase is LifecyclePhase.RUNNING:
            self.request_drain()

        clean = await self._registry.wait_empty(self._grace_seconds)
        if not clean:
            self.last_error = ShutdownTimeout(self._registry.active_count, self._grace_seconds)
            self._logger.error("error encountered during server shutdown: %s", self.last_error)
            self._registry.cancel_all(CloseReason.SHUTDOWN)
            if not await self._registry.wait_empty(FORCED_CLOSE_SECONDS):
                self._logger.warning(
                    "%d session(s) did not unwind after cancellation", self._registry.active_count
                )
        self._phase = LifecyclePhase.STOPPED
        self._logger.info("drain finished clean=%s", clean)
        return clean
