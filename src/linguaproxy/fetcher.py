"""HTTP page fetcher for the translate-by-URL API.

All network I/O for fetching pages goes through a single Fetcher instance
shared across requests. The Fetcher receives an httpx.AsyncClient via
constructor injection; the lifespan owns the client lifecycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlparse

import httpx
import structlog

from linguaproxy.errors import UpstreamFetchError

if TYPE_CHECKING:
    from linguaproxy.config import FetcherSettings

log = structlog.get_logger()


def build_http_client() -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(30.0),
        headers={"User-Agent": "linguaproxy/1.0"},
        limits=httpx.Limits(
            max_connections=100,
            max_keepalive_connections=20,
        ),
    )


def _check_scheme(url: str) -> None:
    if urlparse(url).scheme not in ("http", "https"):
        raise UpstreamFetchError(f"Unsupported URL scheme: {url}")


class Fetcher:
    """HTTP page fetcher with manual, bounded redirect handling."""

    def __init__(self, client: httpx.AsyncClient, settings: FetcherSettings) -> None:
        self._client = client
        self._settings = settings

    async def fetch(self, url: str) -> bytes:
        """Fetch a URL, following at most ``max_redirects`` redirects.

        Returns the raw response body. Raises UpstreamFetchError on invalid
        URLs, network errors, redirect overflow and non-2xx responses.
        """
        max_redirects = self._settings.max_redirects
        current_url = url

        try:
            for hop in range(max_redirects + 1):
                _check_scheme(current_url)
                response = await self._client.get(
                    current_url, timeout=self._settings.timeout_seconds
                )

                if response.is_redirect and "location" in response.headers:
                    if hop == max_redirects:
                        raise UpstreamFetchError(f"Too many redirects fetching {url}")
                    current_url = urljoin(current_url, response.headers["location"])
                    continue

                if not response.is_success:
                    raise UpstreamFetchError(f"HTTP {response.status_code} fetching {url}")

                log.info(
                    "fetch_complete",
                    url=url,
                    status_code=response.status_code,
                    content_length=len(response.content),
                )
                return response.content

        except UpstreamFetchError:
            raise
        except httpx.HTTPError as exc:
            raise UpstreamFetchError(f"Network error fetching {url}: {exc}") from exc

        # Unreachable but satisfies the type checker
        raise UpstreamFetchError(f"Redirect loop fetching {url}")
