"""HTTP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Build AppState and close its resources via the Starlette lifespan
- Register routes and the translation middleware
- Start uvicorn
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog
import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import JSONResponse
from starlette.routing import Route

import linguaproxy.handlers.translate_url as h_translate_url
from linguaproxy import __version__
from linguaproxy.cache import TranslationCache
from linguaproxy.config import Settings
from linguaproxy.errors import LinguaProxyError
from linguaproxy.fetcher import Fetcher, build_http_client
from linguaproxy.middleware import TranslationMiddleware
from linguaproxy.provider import TranslationClient
from linguaproxy.state import AppState
from linguaproxy.translation import TranslationService
from linguaproxy.upstream import UpstreamProxy

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response

    ContentHandler = Callable[[Request], Awaitable[Response]]

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


def build_state(settings: Settings) -> AppState:
    """Wire the shared HTTP client, cache, provider adapter and fetcher."""
    http_client = build_http_client()
    cache = TranslationCache(ttl=timedelta(hours=settings.cache.ttl_hours))
    client = TranslationClient(http_client, settings.provider)
    if not client.configured:
        log.warning("provider_api_key_missing")

    return AppState(
        settings=settings,
        cache=cache,
        translator=TranslationService(client, cache),
        fetcher=Fetcher(http_client, settings.fetcher),
        http_client=http_client,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _error_response(error: LinguaProxyError) -> JSONResponse:
    return JSONResponse(error.to_dict(), status_code=error.status_code)


def create_app(state: AppState, content_handler: ContentHandler | None = None) -> Starlette:
    """Build the ASGI app.

    ``content_handler`` serves every path not matched by the API routes; it
    defaults to the upstream proxy.
    """
    if content_handler is None:
        if state.http_client is None:
            raise RuntimeError("An HTTP client is required for the upstream proxy")
        content_handler = UpstreamProxy(state.http_client, state.settings.upstream).handle

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "version": __version__})

    async def translate_url(request: Request) -> JSONResponse:
        try:
            result = await h_translate_url.handle(
                request.query_params.get("url"),
                request.query_params.get("lang"),
                request.headers.get("accept-language", ""),
                state,
            )
        except LinguaProxyError as exc:
            log.warning(
                "api_error",
                handler="translate_url",
                code=exc.code,
                message=exc.message,
                status_code=exc.status_code,
            )
            return _error_response(exc)
        except Exception:
            log.error("api_unexpected_error", handler="translate_url", exc_info=True)
            raise
        return JSONResponse(result)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
        log.info(
            "server_started",
            version=__version__,
            upstream=state.settings.upstream.url or None,
        )
        try:
            yield
        finally:
            if state.http_client is not None:
                await state.http_client.aclose()
            log.info("server_stopping")

    return Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/api/translate", translate_url, methods=["GET"]),
            Route("/{path:path}", content_handler, methods=["GET"]),
        ],
        middleware=[Middleware(TranslationMiddleware, state=state)],
        lifespan=lifespan,
    )


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()
    _setup_logging(settings)

    log.info("server_starting", version=__version__, port=settings.server.port)
    app = create_app(build_state(settings))

    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )


if __name__ == "__main__":
    main()
