"""Handler for the translate-by-URL API.

Receives AppState, orchestrates cache lookup / page fetch / text extraction /
translation / write-through, and returns a structured dict. No Starlette
imports; server.py handles the HTTP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from linguaproxy.document import extract_text
from linguaproxy.errors import BadRequestError, ParseError, UpstreamFetchError
from linguaproxy.language import resolve_language
from linguaproxy.models.api import TranslateUrlInput, TranslateUrlOutput

if TYPE_CHECKING:
    from linguaproxy.state import AppState


async def handle(url: str | None, lang: str | None, accept_language: str, state: AppState) -> dict:
    """Handle a ``GET /api/translate`` call."""
    log = structlog.get_logger().bind(handler="translate_url", url=url)
    log.info("handler_called")

    try:
        validated = TranslateUrlInput(url=url or "", lang=lang or "")
    except ValidationError as exc:
        raise BadRequestError("URL is required") from exc

    language = resolve_language(validated.lang, accept_language)

    cached = state.cache.get(validated.url, language)
    if cached is not None:
        log.info("cache_hit", language=language)
        return TranslateUrlOutput(
            cached=True,
            original=cached,
            translated=cached,
            language=language,
        ).model_dump(mode="json")

    log.info("cache_miss", language=language)

    body = await state.fetcher.fetch(validated.url)
    try:
        original = extract_text(body)
    except ParseError as exc:
        raise UpstreamFetchError(f"Failed to extract content: {exc.message}") from exc

    # Provider errors (NotConfiguredError, TranslationUnavailableError) propagate.
    translated = await state.translator.translate_text(original, language)

    state.cache.put(validated.url, language, translated)
    log.info("translate_complete", language=language, content_length=len(original))

    return TranslateUrlOutput(
        cached=False,
        original=original,
        translated=translated,
        language=language,
    ).model_dump(mode="json")
