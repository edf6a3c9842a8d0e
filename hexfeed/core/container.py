"""Composition layer: build and hold long-lived service objects for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass

from hexfeed.api.http.landing import render_page
from hexfeed.core.config import Settings
from hexfeed.core.shutdown import ShutdownCoordinator
from hexfeed.core.stream_profile import StreamConfig, resolve_stream_config
from hexfeed.feed.entropy import EntropySource
from hexfeed.feed.session import SessionRegistry, StreamSession
from hexfeed.infra.observability.logger import get_logger

STREAM_PATH = "/stream"


@dataclass
class AppContainer:
    """Container object attached to FastAPI app state."""

    settings: Settings
    stream_config: StreamConfig
    page: bytes
    registry: SessionRegistry
    coordinator: ShutdownCoordinator

    def open_session(self) -> StreamSession:
        """Create a session with its own entropy source and cancellation token."""
        return StreamSession(
            source=EntropySource(),
            interval=self.stream_config.interval_seconds,
            max_ticks=self.stream_config.max_ticks,
            registry=self.registry,
            logger=get_logger("hexfeed.feed.session"),
        )


def build_container(settings: Settings) -> AppContainer:
    """Construct runtime dependencies in one place."""
    stream_config = resolve_stream_config(settings)
    registry = SessionRegistry()
    coordinator = ShutdownCoordinator(
        registry,
        grace_seconds=stream_config.grace_seconds,
        logger=get_logger("hexfeed.core.shutdown"),
    )
    return AppContainer(
        settings=settings,
        stream_config=stream_config,
        page=render_page(script_url=settings.datastar_script_url, stream_path=STREAM_PATH),
        registry=registry,
        coordinator=coordinator,
    )
