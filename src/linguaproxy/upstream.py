"""Upstream content handler.

A minimal reverse proxy: ``GET`` requests are replayed against the configured
origin through the shared httpx client and the response is relayed back.
This is the handler the translation middleware wraps.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.requests import Request

    from linguaproxy.config import UpstreamSettings

log = structlog.get_logger()

# Not relayed in either direction. The body is re-sent decoded and in full,
# so encoding and length headers from the origin no longer apply.
_HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-encoding",
        "content-length",
    }
)

_FORWARDED_REQUEST_HEADERS = ("accept", "accept-language", "cookie", "user-agent")


class UpstreamProxy:
    """Forwards requests to ``settings.url`` and relays the response."""

    def __init__(self, client: httpx.AsyncClient, settings: UpstreamSettings) -> None:
        self._client = client
        self._settings = settings

    @property
    def enabled(self) -> bool:
        return bool(self._settings.url)

    def target_url(self, path: str, query: str) -> str:
        url = self._settings.url.rstrip("/") + path
        return f"{url}?{query}" if query else url

    async def handle(self, request: Request) -> Response:
        if not self.enabled:
            return Response("Not Found", status_code=404, media_type="text/plain")

        url = self.target_url(request.url.path, request.url.query)
        headers = {
            name: request.headers[name]
            for name in _FORWARDED_REQUEST_HEADERS
            if name in request.headers
        }

        try:
            upstream = await self._client.get(
                url,
                headers=headers,
                timeout=self._settings.timeout_seconds,
                follow_redirects=False,
            )
        except httpx.HTTPError as exc:
            log.warning("upstream_request_failed", url=url, error=str(exc))
            return Response("Bad Gateway", status_code=502, media_type="text/plain")

        response = Response(upstream.content, status_code=upstream.status_code)
        response.raw_headers = [
            (b"content-length", str(len(upstream.content)).encode("latin-1")),
            *(
                (name, value)
                for name, value in upstream.headers.raw
                if name.decode("latin-1").lower() not in _HOP_BY_HOP_HEADERS
            ),
        ]
        return response
