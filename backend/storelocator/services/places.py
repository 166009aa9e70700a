"""Places service: server-side client for the Google Maps web services.

The browser never sees the API key. Every call made here attaches the
server-held key, performs exactly one outbound request and hands the
upstream body back untouched. Nothing is cached or retried.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

import httpx

from storelocator.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 10000
DEFAULT_KEYWORD = "jewelry"
DEFAULT_DETAIL_FIELDS = (
    "formatted_phone_number,website,opening_hours,formatted_address,rating,url,photos"
)
DEFAULT_PHOTO_MAX_WIDTH = 400
DEFAULT_PHOTO_CONTENT_TYPE = "image/jpeg"

_WHITESPACE_RE = re.compile(r"\s+")


class PlacesError(Exception):
    """An upstream call failed: transport error, bad status or unparsable body."""


class UpstreamStatusError(PlacesError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Upstream returned HTTP {status_code}")
        self.status_code = status_code


def sanitize_photo_reference(reference: str) -> str:
    """Remove every whitespace character from a photo reference.

    References copied out of upstream payloads sometimes carry embedded
    newlines or spaces, which the photo endpoint rejects.
    """
    return _WHITESPACE_RE.sub("", reference)


class PhotoBody(ABC):
    """Image bytes plus the metadata needed to relay them."""

    def __init__(self, content_type: str, content_length: int) -> None:
        self.content_type = content_type
        self.content_length = content_length

    @abstractmethod
    def iter_bytes(self) -> AsyncIterator[bytes]:
        """Yield the image bytes in order."""

    async def aclose(self) -> None:
        return None


class BufferedPhoto(PhotoBody):
    """Photo whose full body has already been read into memory."""

    def __init__(self, content: bytes, content_type: str) -> None:
        super().__init__(content_type, len(content))
        self.content = content

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        yield self.content


class StreamedPhoto(PhotoBody):
    """Photo relayed chunk by chunk from an open upstream response."""

    def __init__(self, response: httpx.Response, content_type: str, content_length: int) -> None:
        super().__init__(content_type, content_length)
        self._response = response

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        async for chunk in self._response.aiter_raw():
            yield chunk

    async def aclose(self) -> None:
        await self._response.aclose()


def _declared_length(response: httpx.Response) -> int | None:
    """Return the upstream Content-Length when the raw stream can be relayed as-is."""
    encoding = response.headers.get("content-encoding", "identity").strip().lower()
    if encoding not in ("", "identity"):
        return None
    value = response.headers.get("content-length", "").strip()
    if not value.isdigit():
        return None
    return int(value)


class PlacesService:
    """Forward geocode, nearby-search, details and photo requests upstream."""

    GEOCODE_PATH = "/geocode/json"
    NEARBY_SEARCH_PATH = "/place/nearbysearch/json"
    DETAILS_PATH = "/place/details/json"
    PHOTO_PATH = "/place/photo"

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = settings.google_api_key
        self._base_url = settings.places_api_base_url.rstrip("/")
        # The photo endpoint answers with a 302 to the actual image.
        self._client = httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the shared HTTP client."""
        await self._client.aclose()

    def _params(self, params: dict[str, str]) -> dict[str, str]:
        return {**params, "key": self._api_key}

    async def _relay_json(self, path: str, params: dict[str, str]) -> bytes:
        """GET an upstream JSON endpoint and return its raw body.

        The body is parsed only to confirm it is JSON; the caller relays the
        original bytes. Errors are logged by type alone because httpx error
        messages embed the request URL, and the URL carries the key.
        """
        try:
            response = await self._client.get(
                f"{self._base_url}{path}", params=self._params(params)
            )
            response.raise_for_status()
            response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Upstream %s request failed: %s", path, type(exc).__name__)
            raise PlacesError(f"Upstream {path} request failed") from None
        return response.content

    async def geocode(self, address: str) -> bytes:
        """Geocode a free-text address or postal code."""
        return await self._relay_json(self.GEOCODE_PATH, {"address": address})

    async def nearby_search(
        self,
        lat: float,
        lng: float,
        *,
        radius: int = DEFAULT_RADIUS_METERS,
        keyword: str = DEFAULT_KEYWORD,
    ) -> bytes:
        """Search for places around a coordinate."""
        return await self._relay_json(
            self.NEARBY_SEARCH_PATH,
            {
                "location": f"{lat},{lng}",
                "radius": str(radius),
                "keyword": keyword,
            },
        )

    async def place_details(
        self, place_id: str, *, fields: str = DEFAULT_DETAIL_FIELDS
    ) -> bytes:
        """Fetch contact, hours, rating and photo details for one place."""
        return await self._relay_json(
            self.DETAILS_PATH, {"place_id": place_id, "fields": fields}
        )

    async def fetch_photo(
        self, reference: str, *, max_width: int = DEFAULT_PHOTO_MAX_WIDTH
    ) -> PhotoBody:
        """Open the upstream photo and return a relayable body.

        When upstream declares an unencoded Content-Length the bytes are
        streamed through untouched; otherwise the body is buffered so the
        length can still be stated. Callers must ``aclose()`` the result.
        """
        request = self._client.build_request(
            "GET",
            f"{self._base_url}{self.PHOTO_PATH}",
            params=self._params(
                {
                    "photoreference": sanitize_photo_reference(reference),
                    "maxwidth": str(max_width),
                }
            ),
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            logger.warning("Upstream photo request failed: %s", type(exc).__name__)
            raise PlacesError("Upstream photo request failed") from None

        if not response.is_success:
            await response.aclose()
            logger.warning("Upstream photo request returned HTTP %d", response.status_code)
            raise UpstreamStatusError(response.status_code)

        content_type = response.headers.get("content-type") or DEFAULT_PHOTO_CONTENT_TYPE
        length = _declared_length(response)
        if length is not None:
            return StreamedPhoto(response, content_type, length)

        try:
            content = await response.aread()
        except httpx.HTTPError as exc:
            logger.warning("Reading upstream photo failed: %s", type(exc).__name__)
            raise PlacesError("Reading upstream photo failed") from None
        finally:
            await response.aclose()
        return BufferedPhoto(content, content_type)
