from __future__ import annotations

import os
import warnings
from collections.abc import Callable
from pathlib import Path

# Set test environment BEFORE importing app modules.
# storelocator.main builds a module-level app from get_settings(), so the
# key must be present before any storelocator import.
os.environ.setdefault("GOOGLE_API_KEY", "test-api-key")

import httpx
import pytest
from fastapi.testclient import TestClient

from storelocator.config import Settings
from storelocator.main import create_app

TEST_API_KEY = "test-api-key"

GEOCODE_BODY = (
    b'{"results":[{"geometry":{"location":{"lat":40.7484,"lng":-73.9857}}}],'
    b'"status":"OK"}'
)
NEARBY_BODY = (
    b'{"html_attributions":[],"results":[{"name":"Diamond Row","place_id":"abc",'
    b'"rating":4.6,"vicinity":"47th St"}],"status":"OK"}'
)
DETAILS_BODY = (
    b'{"html_attributions":[],"result":{"formatted_phone_number":"(212) 555-0100",'
    b'"photos":[{"photo_reference":"ref-1"}],"rating":4.6},"status":"OK"}'
)
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(64))


class StubUpstream:
    """Stand-in for the Google Maps web services.

    Records every outbound request; ``responder`` decides the answer.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = self._default

    @staticmethod
    def _default(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/geocode/json"):
            body = GEOCODE_BODY
        elif path.endswith("/place/nearbysearch/json"):
            body = NEARBY_BODY
        elif path.endswith("/place/details/json"):
            body = DETAILS_BODY
        elif path.endswith("/place/photo"):
            return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
        else:
            return httpx.Response(404)
        return httpx.Response(200, content=body, headers={"content-type": "application/json; charset=UTF-8"})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last_params(self) -> httpx.QueryParams:
        return self.requests[-1].url.params

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_settings(**overrides) -> Settings:
    values = {"google_api_key": TEST_API_KEY, **overrides}
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        return Settings(_env_file=None, **values)


# ── Upstream stub ─────────────────────────────────────────────────────


@pytest.fixture(name="upstream")
def upstream_fixture() -> StubUpstream:
    return StubUpstream()


# ── HTTP client fixtures ──────────────────────────────────────────────


@pytest.fixture(name="static_root")
def static_root_fixture(tmp_path: Path) -> Path:
    """Static root with an index page and a secret file just outside it."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<!doctype html><title>Stores</title>")
    (root / "app.js").write_text("console.log('stores');")
    (tmp_path / "secret.txt").write_text("do not serve")
    return root


@pytest.fixture(name="client")
def client_fixture(upstream: StubUpstream, static_root: Path):
    """TestClient with the API key configured and a stubbed upstream."""
    app = create_app(make_settings(static_dir=static_root), transport=upstream.transport())
    with TestClient(app) as client:
        yield client


@pytest.fixture(name="client_no_key")
def client_no_key_fixture(upstream: StubUpstream, static_root: Path):
    """TestClient with NO API key; every proxy call must fail fast."""
    app = create_app(
        make_settings(google_api_key="", static_dir=static_root),
        transport=upstream.transport(),
    )
    with TestClient(app) as client:
        yield client
