"""Lifecycle hooks for startup and shutdown diagnostics."""

from __future__ import annotations

from hexfeed.core.container import AppContainer
from hexfeed.infra.observability.logger import get_logger

logger = get_logger(__name__)


def on_startup(container: AppContainer) -> None:
    config = container.stream_config
    logger.info(
        "stream profile=%s tick=%dms max_ticks=%d grace=%.1fs",
        config.profile_name,
        config.tick_ms,
        config.max_ticks,
        config.grace_seconds,
    )


def on_shutdown(container: AppContainer) -> None:
    logger.info(
        "hexfeed app shutdown: phase=%s active_sessions=%d",
        container.coordinator.phase.value,
        container.registry.active_count,
    )
