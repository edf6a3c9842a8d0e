"""Test fixtures shared by unit/integration tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from hexfeed.core.config import Settings


@pytest.fixture
def fast_settings(tmp_path: Path) -> Settings:
    """Settings with a short tick and no profile file on disk."""
    return Settings(
        log_level="DEBUG",
        stream_tick_ms=20,
        shutdown_grace_seconds=0.5,
        stream_profiles_file=tmp_path / "missing.yaml",
    )
