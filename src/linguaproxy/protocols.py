"""Protocol interfaces for swappable components.

Handlers, the middleware and AppState reference these protocols, not the
concrete implementations. This allows:
- Tests to use lightweight stub translators and fetchers
- Future backends (e.g. a shared cache) to be swapped without changing callers
"""

from __future__ import annotations

from typing import Protocol


class CacheProtocol(Protocol):
    """Interface for the translation cache."""

    def get(self, primary_key: str, language: str = "") -> str | None: ...

    def put(self, primary_key: str, language: str, content: str) -> None: ...


class TranslationClientProtocol(Protocol):
    """Interface for the outbound translation provider adapter."""

    async def translate(self, text: str, target_language: str) -> str: ...


class TextTranslator(Protocol):
    """Callable used by the HTML pipeline to translate one text node."""

    async def __call__(self, text: str, target_language: str) -> str: ...


class FetcherProtocol(Protocol):
    """Interface for fetching a page to translate."""

    async def fetch(self, url: str) -> bytes: ...
