"""Unit tests for the upstream content proxy."""

from __future__ import annotations

import httpx
import respx
from starlette.applications import Starlette
from starlette.routing import Route

from linguaproxy.config import UpstreamSettings
from linguaproxy.upstream import UpstreamProxy

ORIGIN = "https://origin.example.com"


def _app(proxy: UpstreamProxy) -> Starlette:
    return Starlette(routes=[Route("/{path:path}", proxy.handle, methods=["GET"])])


def _client(app: Starlette) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://proxy.local",
    )


class TestTargetUrl:
    def test_joins_path_and_query(self) -> None:
        proxy = UpstreamProxy(httpx.AsyncClient(), UpstreamSettings(url=ORIGIN + "/"))
        assert proxy.target_url("/docs/page", "a=1") == f"{ORIGIN}/docs/page?a=1"

    def test_without_query(self) -> None:
        proxy = UpstreamProxy(httpx.AsyncClient(), UpstreamSettings(url=ORIGIN))
        assert proxy.target_url("/", "") == f"{ORIGIN}/"


class TestUpstreamProxy:
    async def test_not_configured_returns_404(self) -> None:
        async with httpx.AsyncClient() as upstream_client:
            proxy = UpstreamProxy(upstream_client, UpstreamSettings())
            async with _client(_app(proxy)) as client:
                response = await client.get("/anything")
        assert response.status_code == 404

    async def test_relays_status_body_and_headers(self) -> None:
        with respx.mock:
            route = respx.get(f"{ORIGIN}/page?lang=es").mock(
                return_value=httpx.Response(
                    201,
                    content=b"<p>Hi</p>",
                    headers={"content-type": "text/html", "x-origin": "yes"},
                )
            )
            async with httpx.AsyncClient() as upstream_client:
                proxy = UpstreamProxy(upstream_client, UpstreamSettings(url=ORIGIN))
                async with _client(_app(proxy)) as client:
                    response = await client.get(
                        "/page?lang=es", headers={"Accept-Language": "es", "X-Secret": "no"}
                    )

        assert response.status_code == 201
        assert response.content == b"<p>Hi</p>"
        assert response.headers["content-type"] == "text/html"
        assert response.headers["x-origin"] == "yes"
        assert response.headers["content-length"] == "9"
        forwarded = route.calls.last.request.headers
        assert forwarded["accept-language"] == "es"
        assert "x-secret" not in forwarded

    async def test_unreachable_origin_returns_502(self) -> None:
        with respx.mock:
            respx.get(f"{ORIGIN}/page").mock(side_effect=httpx.ConnectError("refused"))
            async with httpx.AsyncClient() as upstream_client:
                proxy = UpstreamProxy(upstream_client, UpstreamSettings(url=ORIGIN))
                async with _client(_app(proxy)) as client:
                    response = await client.get("/page")
        assert response.status_code == 502
