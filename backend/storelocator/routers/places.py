"""Places proxy router: geocode, nearby search, details and photos.

Each endpoint makes exactly one upstream call with the server-held key
attached and relays the answer. JSON bodies are passed through byte for
byte; upstream status strings such as ``ZERO_RESULTS`` stay inside the body.
"""
from __future__ import annotations

import math

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from storelocator.dependencies import get_places_service
from storelocator.services.places import (
    DEFAULT_DETAIL_FIELDS,
    DEFAULT_KEYWORD,
    DEFAULT_PHOTO_MAX_WIDTH,
    DEFAULT_RADIUS_METERS,
    PlacesError,
    PlacesService,
    UpstreamStatusError,
    sanitize_photo_reference,
)

router = APIRouter(prefix="/api", tags=["places"])


def _json_response(body: bytes) -> Response:
    return Response(content=body, media_type="application/json")


def _parse_number(value: str | None, name: str, cast: type) -> float | int | None:
    """Parse an optional numeric query parameter, 400 on garbage."""
    if value is None or not value.strip():
        return None
    try:
        number = cast(value.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{name} must be a number")
    if not math.isfinite(number):
        raise HTTPException(status_code=400, detail=f"{name} must be a finite number")
    return number


@router.get("/geocode")
async def geocode(
    address: str | None = Query(None),
    places_service: PlacesService = Depends(get_places_service),
) -> Response:
    """Geocode a free-text address, ZIP code, town or city."""
    if not address or not address.strip():
        raise HTTPException(status_code=400, detail="address required")
    try:
        body = await places_service.geocode(address)
    except PlacesError:
        raise HTTPException(status_code=500, detail="geocode failed")
    return _json_response(body)


@router.get("/nearby")
async def nearby(
    lat: str | None = Query(None),
    lng: str | None = Query(None),
    radius: str | None = Query(None),
    keyword: str | None = Query(None),
    places_service: PlacesService = Depends(get_places_service),
) -> Response:
    """Search for stores around a coordinate (jewelry stores unless overridden)."""
    latitude = _parse_number(lat, "lat", float)
    longitude = _parse_number(lng, "lng", float)
    if latitude is None or longitude is None:
        raise HTTPException(status_code=400, detail="lat and lng required")
    radius_meters = _parse_number(radius, "radius", int)
    try:
        body = await places_service.nearby_search(
            latitude,
            longitude,
            radius=DEFAULT_RADIUS_METERS if radius_meters is None else radius_meters,
            keyword=keyword or DEFAULT_KEYWORD,
        )
    except PlacesError:
        raise HTTPException(status_code=500, detail="nearby search failed")
    return _json_response(body)


@router.get("/details")
async def details(
    place_id: str | None = Query(None),
    fields: str | None = Query(None),
    places_service: PlacesService = Depends(get_places_service),
) -> Response:
    """Fetch phone, website, hours, address, rating, URL and photos for a place."""
    if not place_id or not place_id.strip():
        raise HTTPException(status_code=400, detail="place_id required")
    try:
        body = await places_service.place_details(
            place_id, fields=fields or DEFAULT_DETAIL_FIELDS
        )
    except PlacesError:
        raise HTTPException(status_code=500, detail="place details failed")
    return _json_response(body)


@router.get("/photo")
async def photo(
    photoreference: str | None = Query(None),
    maxwidth: str | None = Query(None),
    places_service: PlacesService = Depends(get_places_service),
) -> Response:
    """Proxy a place photo. Errors are plain text since the caller is an <img>."""
    if not photoreference or not sanitize_photo_reference(photoreference):
        return PlainTextResponse("photoreference required", status_code=400)
    try:
        max_width = _parse_number(maxwidth, "maxwidth", int)
    except HTTPException:
        return PlainTextResponse("maxwidth must be an integer", status_code=400)

    try:
        body = await places_service.fetch_photo(
            photoreference,
            max_width=DEFAULT_PHOTO_MAX_WIDTH if max_width is None else max_width,
        )
    except UpstreamStatusError:
        return PlainTextResponse("photo fetch failed", status_code=502)
    except PlacesError:
        return PlainTextResponse("photo proxy failed", status_code=500)

    return StreamingResponse(
        body.iter_bytes(),
        media_type=body.content_type,
        headers={"Content-Length": str(body.content_length)},
        background=BackgroundTask(body.aclose),
    )
