"""FastAPI dependency injection for settings and the places service."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from storelocator.config import Settings
from storelocator.services.places import PlacesService


def get_app_settings(request: Request) -> Settings:
    """Inject the Settings instance the application was built with."""
    return request.app.state.settings


def get_places_service(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> PlacesService:
    """Credential guard shared by every proxy endpoint.

    Raises HTTPException 500 when the API key is missing or the outbound
    HTTP client was never created, so no request reaches upstream without
    the key.
    """
    if not settings.google_api_key:
        raise HTTPException(
            status_code=500, detail="GOOGLE_API_KEY not configured on the server"
        )
    svc = getattr(request.app.state, "places_service", None)
    if svc is None:
        raise HTTPException(
            status_code=500,
            detail="Outbound HTTP client unavailable: places service not initialized",
        )
    return svc
