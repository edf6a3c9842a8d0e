"""HTTP API layer: landing page route."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from hexfeed.api.deps import get_container
from hexfeed.core.container import AppContainer

router = APIRouter(tags=["page"])


@router.get("/", response_class=Response)
def index(container: AppContainer = Depends(get_container)) -> Response:
    return Response(content=container.page, media_type="text/html")
