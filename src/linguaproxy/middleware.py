"""Passthrough translation middleware.

Wraps the content handler and rewrites HTML responses into the requested
language:

1. API paths and static assets are passed through untouched.
2. Requests resolved to the default language are passed through untouched.
3. A cached translation for (request target, language) is served directly,
   without invoking the wrapped app.
4. Otherwise the wrapped app runs, its response is buffered, and HTML bodies
   are translated node by node and cached. Anything else is relayed as-is.

The client never sees a translation error from this layer: on failure the
original body is returned and the error is logged.

Implemented as pure ASGI (not BaseHTTPMiddleware) so passthrough responses are
relayed without an extra request/response wrapper.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from starlette.datastructures import Headers, QueryParams
from starlette.responses import HTMLResponse

from linguaproxy.document import translate_document
from linguaproxy.errors import LinguaProxyError
from linguaproxy.language import DEFAULT_LANGUAGE, resolve_language

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

    from linguaproxy.state import AppState

log = structlog.get_logger()

API_PREFIX = "/api/"

STATIC_EXTENSIONS: tuple[str, ...] = (
    ".css",
    ".js",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".ico",
    ".woff",
    ".woff2",
)

CACHE_STATUS_HEADER = "x-translation-cache"


def is_static_path(path: str) -> bool:
    """True for paths ending in a static-asset extension (query string excluded)."""
    return path.lower().endswith(STATIC_EXTENSIONS)


def should_bypass(path: str) -> bool:
    return path.startswith(API_PREFIX) or is_static_path(path)


def request_target(scope: Scope) -> str:
    """Path plus query string; the primary cache key for a proxied page."""
    path: str = scope["path"]
    query: bytes = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


# Origin headers that are rewritten for, or do not describe, the translated body.
_DROPPED_HEADERS = frozenset(
    {b"content-length", b"content-type", b"etag", b"last-modified", b"vary"}
)


def _charset(content_type: str) -> str | None:
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return None


def _vary(existing: str | None) -> bytes:
    values = [v.strip() for v in (existing or "").split(",") if v.strip()]
    if "accept-language" not in (v.lower() for v in values):
        values.append("accept-language")
    return ", ".join(values).encode("latin-1")


class _BufferedResponse:
    """Collects the ASGI messages of a wrapped app into one response."""

    def __init__(self) -> None:
        self.status = 500
        self.raw_headers: list[tuple[bytes, bytes]] = []
        self.body = bytearray()
        self.started = False

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.started = True
            self.status = message["status"]
            self.raw_headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            self.body.extend(message.get("body", b""))

    @property
    def headers(self) -> Headers:
        return Headers(raw=self.raw_headers)

    async def replay(self, send: Send) -> None:
        await send(
            {"type": "http.response.start", "status": self.status, "headers": self.raw_headers}
        )
        await send({"type": "http.response.body", "body": bytes(self.body)})


class TranslationMiddleware:
    """Pure ASGI middleware translating HTML responses of the wrapped app."""

    def __init__(self, app: ASGIApp, *, state: AppState) -> None:
        self.app = app
        self.state = state

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "GET":
            await self.app(scope, receive, send)
            return

        path: str = scope["path"]
        if should_bypass(path):
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        query = QueryParams(scope.get("query_string", b""))
        language = resolve_language(query.get("lang"), headers.get("accept-language"))

        if language == DEFAULT_LANGUAGE:
            await self.app(scope, receive, send)
            return

        target = request_target(scope)
        req_log = log.bind(path=target, language=language)

        cached = self.state.cache.get(target, language)
        if cached is not None:
            req_log.info("page_cache_hit")
            response = HTMLResponse(
                cached, headers={CACHE_STATUS_HEADER: "hit", "vary": "accept-language"}
            )
            await response(scope, receive, send)
            return

        buffered = _BufferedResponse()
        await self.app(scope, receive, buffered.send)
        if not buffered.started:
            raise RuntimeError("Wrapped app returned without starting a response")

        content_type = buffered.headers.get("content-type", "")
        if buffered.status != 200 or "text/html" not in content_type.lower():
            await buffered.replay(send)
            return

        try:
            translated = await translate_document(
                bytes(buffered.body),
                language,
                self.state.translator.translate_text,
                encoding=_charset(content_type),
            )
        except LinguaProxyError as exc:
            req_log.warning("document_translation_failed", error=exc.message)
            await buffered.replay(send)
            return
        except Exception:
            req_log.error("document_translation_unexpected_error", exc_info=True)
            await buffered.replay(send)
            return

        self.state.cache.put(target, language, translated)
        req_log.info("page_translated", content_length=len(translated))

        await self._send_translated(buffered, translated, send)

    async def _send_translated(
        self, buffered: _BufferedResponse, translated: str, send: Send
    ) -> None:
        body = translated.encode("utf-8")
        raw_headers = [
            (name, value)
            for name, value in buffered.raw_headers
            if name.lower() not in _DROPPED_HEADERS
        ]
        raw_headers += [
            (b"content-type", b"text/html; charset=utf-8"),
            (b"content-length", str(len(body)).encode("latin-1")),
            (b"vary", _vary(buffered.headers.get("vary"))),
            (CACHE_STATUS_HEADER.encode("latin-1"), b"miss"),
        ]
        await send({"type": "http.response.start", "status": 200, "headers": raw_headers})
        await send({"type": "http.response.body", "body": body})
