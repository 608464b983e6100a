"""Translation provider adapter.

Wraps the outbound call to the translation API: blank-input short-circuit,
prefix truncation, bounded retries, and mapping of every provider failure to
``TranslationUnavailableError``. Caching is the caller's job.

The adapter receives an ``httpx.AsyncClient`` via constructor injection; the
lifespan owns the client lifecycle.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import structlog

from linguaproxy.errors import NotConfiguredError, TranslationUnavailableError

if TYPE_CHECKING:
    from linguaproxy.config import ProviderSettings

log = structlog.get_logger()

# Longer input is truncated (prefix kept) before submission. Lossy.
MAX_TEXT_LENGTH = 5000

_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class _RetryableError(Exception):
    """Internal marker wrapping a failure that may succeed on another attempt."""

    def __init__(self, error: TranslationUnavailableError) -> None:
        super().__init__(str(error))
        self.error = error


def truncate_text(text: str, limit: int = MAX_TEXT_LENGTH) -> str:
    return text[:limit] if len(text) > limit else text


def _parse_translation(response: httpx.Response) -> str:
    """Extract ``data.translations[0].text`` from a provider response."""
    try:
        payload = response.json()
        translations = payload["data"]["translations"]
    except (ValueError, KeyError, TypeError) as exc:
        raise TranslationUnavailableError(
            f"Malformed response from translation provider: {exc}",
            provider_reported=True,
        ) from exc

    if not isinstance(translations, list) or not translations:
        raise TranslationUnavailableError(
            "Translation provider returned no translations",
            provider_reported=True,
        )

    first = translations[0]
    text = first.get("text") if isinstance(first, dict) else None
    if not isinstance(text, str):
        raise TranslationUnavailableError(
            "Malformed response from translation provider: missing translation text",
            provider_reported=True,
        )
    return text


class TranslationClient:
    """HTTP adapter for the translation provider implementing TranslationClientProtocol."""

    def __init__(self, client: httpx.AsyncClient, settings: ProviderSettings) -> None:
        self._client = client
        self._settings = settings

    @property
    def configured(self) -> bool:
        return bool(self._settings.api_key.strip())

    async def translate(self, text: str, target_language: str) -> str:
        """Translate ``text`` into ``target_language``.

        Blank text is returned unchanged without a provider call. Raises
        NotConfiguredError without touching the network when no API key is set,
        and TranslationUnavailableError for every provider failure.
        """
        if not text.strip():
            return text

        if not self.configured:
            raise NotConfiguredError("Translation provider API key not configured")

        original_length = len(text)
        text = truncate_text(text)
        if len(text) < original_length:
            log.warning(
                "provider_text_truncated",
                original_length=original_length,
                max_length=MAX_TEXT_LENGTH,
            )

        attempts = self._settings.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._call(text, target_language)
            except _RetryableError as exc:
                if attempt == attempts:
                    log.warning(
                        "provider_retries_exhausted",
                        attempts=attempts,
                        error=exc.error.message,
                    )
                    raise exc.error from exc.error.__cause__
                log.info(
                    "provider_retry",
                    attempt=attempt,
                    max_attempts=attempts,
                    error=exc.error.message,
                )
                await asyncio.sleep(self._settings.retry_delay_seconds)

        # Unreachable but satisfies the type checker
        raise TranslationUnavailableError("Translation failed", provider_reported=False)

    async def _call(self, text: str, target_language: str) -> str:
        try:
            response = await self._client.post(
                self._settings.url,
                json={"text": text, "target_lang": target_language},
                headers={
                    "Authorization": f"Bearer {self._settings.api_key}",
                    "Accept": "application/json",
                },
                timeout=self._settings.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            error = TranslationUnavailableError(
                f"Translation provider timed out: {exc}", provider_reported=False
            )
            error.__cause__ = exc
            raise _RetryableError(error) from exc
        except httpx.HTTPError as exc:
            error = TranslationUnavailableError(
                f"Network error calling translation provider: {exc}", provider_reported=False
            )
            error.__cause__ = exc
            raise _RetryableError(error) from exc
        except Exception as exc:
            # e.g. UnicodeEncodeError for an API key that is not valid in a header
            log.error("provider_request_error", exc_info=True)
            raise TranslationUnavailableError(
                f"Could not call translation provider: {exc}", provider_reported=False
            ) from exc

        if not response.is_success:
            error = TranslationUnavailableError(
                f"Translation provider returned HTTP {response.status_code}: {response.text[:200]}",
                provider_reported=True,
            )
            if response.status_code in _RETRYABLE_STATUS_CODES:
                raise _RetryableError(error)
            log.warning("provider_error", status_code=response.status_code)
            raise error

        translated = _parse_translation(response)
        log.debug(
            "provider_translation_complete",
            target_language=target_language,
            input_length=len(text),
            output_length=len(translated),
        )
        return translated
