"""Security headers applied to every response."""
from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger(__name__)

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self' https://unpkg.com",
        "style-src 'self' 'unsafe-inline' https://unpkg.com https://fonts.googleapis.com",
        "font-src 'self' https://fonts.gstatic.com",
        "img-src 'self' data: https://*.tile.openstreetmap.org https://unpkg.com",
        "connect-src 'self' https://maps.googleapis.com",
        "frame-src 'none'",
        "frame-ancestors 'none'",
    ]
)

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(self)",
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp the fixed security headers onto every response.

    Exceptions that escape a route are logged and turned into a plain 500
    here, so even crash responses carry the headers and the server keeps
    handling other requests.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error serving %s %s", request.method, request.url.path)
            response = PlainTextResponse("Internal Server Error", status_code=500)
        response.headers.update(SECURITY_HEADERS)
        return response
