"""HTTP API layer: health and drain-state endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hexfeed.api.deps import get_container
from hexfeed.core.container import AppContainer

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container: AppContainer = Depends(get_container)) -> dict:
    return {
        "status": "ok" if not container.coordinator.draining else "draining",
        "phase": container.coordinator.phase.value,
        "active_sessions": container.registry.active_count,
        "version": container.settings.app_version,
    }
