from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from storelocator.config import Settings, get_settings
from storelocator.middleware import SecurityHeadersMiddleware
from storelocator.routers import health, places, static
from storelocator.services.places import PlacesService

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the application around one immutable Settings instance.

    ``transport`` replaces the outbound network layer of the places
    client; tests pass an ``httpx.MockTransport`` here.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.google_api_key:
            logger.warning(
                "GOOGLE_API_KEY is not set; /api proxy endpoints will return 500"
            )

        # Initialize PlacesService singleton (owns the shared HTTP client)
        app.state.places_service = PlacesService(settings, transport=transport)

        yield

        # Shutdown: close places HTTP client
        if getattr(app.state, "places_service", None) is not None:
            await app.state.places_service.close()
            app.state.places_service = None

    app = FastAPI(
        title="Store Locator",
        description="Jewelry store locator with a server-side Google Places proxy",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(health.router)
    app.include_router(places.router)
    # Catch-all static route must come last.
    app.include_router(static.router)

    return app


app = create_app()
