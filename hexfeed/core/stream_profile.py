"""Stream config resolver: merge YAML stream profiles with explicit settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from hexfeed.core.config import Settings

MIN_TICK_MS = 10


@dataclass(frozen=True)
class StreamConfig:
    """Normalized timing configuration for stream sessions and shutdown."""

    tick_ms: int
    max_ticks: int
    grace_seconds: float
    profile_name: str = "default"

    @property
    def interval_seconds(self) -> float:
        return self.tick_ms / 1000.0


def _load_profile(profile_file: Path, profile_name: str) -> dict[str, Any]:
    if not profile_file.exists():
        return {}
    try:
        raw = yaml.safe_load(profile_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(raw, dict):
        return {}
    profiles = raw.get("profiles")
    if not isinstance(profiles, dict):
        return {}
    payload = profiles.get(profile_name)
    if not isinstance(payload, dict):
        payload = profiles.get("default")
    if not isinstance(payload, dict):
        return {}
    return payload


def _pick_int(payload: dict[str, Any], key: str, fallback: int) -> int:
    value = payload.get(key)
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return fallback
    return fallback


def _pick_float(payload: dict[str, Any], key: str, fallback: float) -> float:
    value = payload.get(key)
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return fallback
    return fallback


def resolve_stream_config(settings: Settings) -> StreamConfig:
    """Build stream config from app settings; explicit settings beat the profile."""
    profile = _load_profile(settings.stream_profiles_file, settings.stream_profile)
    defaults = Settings()

    tick_ms = (
        settings.stream_tick_ms
        if settings.stream_tick_ms != defaults.stream_tick_ms
        else _pick_int(profile, "tick_ms", defaults.stream_tick_ms)
    )
    max_ticks = (
        settings.stream_max_ticks
        if settings.stream_max_ticks != defaults.stream_max_ticks
        else _pick_int(profile, "max_ticks", defaults.stream_max_ticks)
    )
    grace_seconds = (
        float(settings.shutdown_grace_seconds)
        if float(settings.shutdown_grace_seconds) != float(defaults.shutdown_grace_seconds)
        else _pick_float(profile, "grace_seconds", float(defaults.shutdown_grace_seconds))
    )

    return StreamConfig(
        tick_ms=max(MIN_TICK_MS, tick_ms),
        max_ticks=max(0, max_ticks),
        grace_seconds=max(0.0, grace_seconds),
        profile_name=settings.stream_profile,
    )
