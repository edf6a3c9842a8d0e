"""Stream API layer: Datastar feed endpoint, one session per connection."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from hexfeed.api.deps import get_container
from hexfeed.api.stream.response import SessionStreamResponse
from hexfeed.core.container import STREAM_PATH, AppContainer

router = APIRouter(tags=["stream"])


@router.get(STREAM_PATH)
async def stream(container: AppContainer = Depends(get_container)) -> SessionStreamResponse:
    if container.coordinator.draining:
        raise HTTPException(status_code=503, detail="server is shutting down", headers={"Retry-After": "1"})
    return SessionStreamResponse(container.open_session())
