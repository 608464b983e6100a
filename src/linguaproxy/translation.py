"""Cache-first translation of raw text.

Raw text is cached under a content-hash key (``text_<lang>_<sha256>``) so a
phrase repeated within one document, or across documents, reaches the
provider at most once per TTL window.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from linguaproxy.protocols import CacheProtocol, TranslationClientProtocol

log = structlog.get_logger()


def text_cache_key(text: str, target_language: str) -> str:
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return f"text_{target_language}_{digest}"


class TranslationService:
    """Translates text through the provider adapter, short-circuiting on cache hits."""

    def __init__(self, client: TranslationClientProtocol, cache: CacheProtocol) -> None:
        self._client = client
        self._cache = cache

    async def translate_text(self, text: str, target_language: str) -> str:
        if not text.strip():
            return text

        key = text_cache_key(text, target_language)
        cached = self._cache.get(key)
        if cached is not None:
            log.debug("text_cache_hit", target_language=target_language)
            return cached

        # Provider errors propagate; nothing is cached on failure.
        translated = await self._client.translate(text, target_language)
        self._cache.put(key, "", translated)
        return translated
