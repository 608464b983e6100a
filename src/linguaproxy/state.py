"""Application state container.

AppState is created once at server startup (inside the Starlette lifespan
context manager) and shared by the API handlers and the translation
middleware. Tests build it directly with stub components.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from linguaproxy.config import Settings
    from linguaproxy.protocols import CacheProtocol, FetcherProtocol
    from linguaproxy.translation import TranslationService


@dataclass
class AppState:
    """Holds all shared runtime state."""

    settings: Settings
    cache: CacheProtocol
    translator: TranslationService
    fetcher: FetcherProtocol
    http_client: httpx.AsyncClient | None = None
