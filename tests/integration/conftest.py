"""Integration test fixtures.

Provides a fully wired AppState and ASGI app with an in-memory cache on a fake
clock, a stub translation client (uppercases text) and a stub content handler
standing in for the upstream origin. Component stubs come from
tests/conftest.py.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
from starlette.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from linguaproxy.config import Settings
from linguaproxy.server import create_app
from linguaproxy.state import AppState

if TYPE_CHECKING:
    from starlette.applications import Starlette
    from starlette.requests import Request

    from linguaproxy.cache import TranslationCache
    from linguaproxy.translation import TranslationService

SAMPLE_PAGE = "<p>Hello <b>World</b></p>"
# Encoding declared only in the markup; the response header names no charset.
CP1252_PAGE = '<html><head><meta charset="windows-1252"></head><body><p>Café</p></body></html>'


class StubOrigin:
    """Stand-in for the upstream content handler; records requested paths."""

    def __init__(self) -> None:
        self.requests: list[str] = []

    async def __call__(self, request: Request) -> Response:
        path = request.url.path
        self.requests.append(path)
        if path == "/data.json":
            return JSONResponse({"message": "Hello"})
        if path == "/readme.txt":
            return PlainTextResponse("Hello plain")
        if path == "/app.js":
            return Response("console.log('Hello')", media_type="application/javascript")
        if path == "/missing":
            return HTMLResponse("<p>Not here</p>", status_code=404)
        if path == "/latin1":
            return Response(
                "<p>Café</p>".encode("latin-1"),
                media_type="text/html; charset=iso-8859-1",
            )
        if path == "/cp1252":
            # Explicit header; media_type would append "; charset=utf-8".
            return Response(CP1252_PAGE.encode("cp1252"), headers={"content-type": "text/html"})
        if path == "/versioned":
            return HTMLResponse(
                SAMPLE_PAGE,
                headers={
                    "etag": '"v1"',
                    "last-modified": "Thu, 01 Jan 2026 00:00:00 GMT",
                    "vary": "Cookie",
                },
            )
        return HTMLResponse(SAMPLE_PAGE)


@pytest.fixture()
def origin() -> StubOrigin:
    return StubOrigin()


@pytest.fixture()
def app_state(cache: TranslationCache, translator: TranslationService, stub_fetcher) -> AppState:
    return AppState(
        settings=Settings(),
        cache=cache,
        translator=translator,
        fetcher=stub_fetcher,
    )


@pytest.fixture()
def app(app_state: AppState, origin: StubOrigin) -> Starlette:
    # Bound method so Starlette treats it as a request/response endpoint.
    return create_app(app_state, content_handler=origin.__call__)


@pytest.fixture()
async def client(app: Starlette) -> httpx.AsyncClient:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as http_client:
        yield http_client
