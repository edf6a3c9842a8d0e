"""Configuration layer: load runtime settings from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATASTAR_SCRIPT_URL = (
    "https://cdn.jsdelivr.net/gh/starfederation/datastar@main/bundles/datastar.js"
)


def _resolve_path(path_like: str) -> Path:
    candidate = Path(path_like)
    if candidate.is_absolute():
        return candidate
    if candidate.exists():
        return candidate
    project_root = Path(__file__).resolve().parents[2]
    rooted = project_root / candidate
    if rooted.exists():
        return rooted
    return candidate


@dataclass(frozen=True)
class Settings:
    """Immutable application settings used across server/stream layers."""

    app_name: str = "hexfeed"
    app_version: str = "0.1.0"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 9001
    stream_tick_ms: int = 100
    stream_max_ticks: int = 0
    shutdown_grace_seconds: float = 5.0
    datastar_script_url: str = DEFAULT_DATASTAR_SCRIPT_URL
    stream_profiles_file: Path = Path("config/stream_profiles.yaml")
    stream_profile: str = "default"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from process env with deterministic defaults."""
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            app_version=os.getenv("APP_VERSION", cls.app_version),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
            stream_tick_ms=int(os.getenv("STREAM_TICK_MS", str(cls.stream_tick_ms))),
            stream_max_ticks=int(os.getenv("STREAM_MAX_TICKS", str(cls.stream_max_ticks))),
            shutdown_grace_seconds=float(
                os.getenv("SHUTDOWN_GRACE_SECONDS", str(cls.shutdown_grace_seconds))
            ),
            datastar_script_url=os.getenv("DATASTAR_SCRIPT_URL", cls.datastar_script_url),
            stream_profiles_file=_resolve_path(
                os.getenv("STREAM_PROFILES_FILE", str(cls.stream_profiles_file))
            ),
            stream_profile=os.getenv("STREAM_PROFILE", cls.stream_profile),
        )
