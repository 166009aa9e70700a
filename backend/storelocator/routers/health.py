from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from storelocator.config import Settings
from storelocator.dependencies import get_app_settings

router = APIRouter(prefix="/api", tags=["health"])

SERVICE_NAME = "storelocator-backend"
VERSION = "0.1.0"


@router.get("/health")
async def health(request: Request, settings: Settings = Depends(get_app_settings)):
    # Configuration checks only; upstream is never called from here.
    api_key_status = "configured" if settings.google_api_key else "missing"
    client_status = (
        "ok" if getattr(request.app.state, "places_service", None) is not None else "unavailable"
    )
    is_healthy = api_key_status == "configured" and client_status == "ok"

    return {
        "status": "healthy" if is_healthy else "degraded",
        "service": SERVICE_NAME,
        "version": VERSION,
        "checks": {
            "api_key": api_key_status,
            "http_client": client_status,
        },
    }
