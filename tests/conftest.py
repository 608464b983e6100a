"""Shared test fixtures for the linguaproxy test suite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from linguaproxy.cache import TranslationCache
from linguaproxy.errors import TranslationUnavailableError, UpstreamFetchError
from linguaproxy.translation import TranslationService


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class StubTranslationClient:
    """Uppercases its input and records every call.

    Texts listed in ``failing`` raise TranslationUnavailableError instead.
    """

    def __init__(self, failing: set[str] | None = None) -> None:
        self.calls: list[tuple[str, str]] = []
        self.failing = failing or set()

    async def translate(self, text: str, target_language: str) -> str:
        self.calls.append((text, target_language))
        if text in self.failing:
            raise TranslationUnavailableError("provider down", provider_reported=False)
        return text.upper()


class StubFetcher:
    """Serves canned bodies by URL; unknown URLs fail like an unreachable host."""

    def __init__(self, pages: dict[str, bytes] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if url not in self.pages:
            raise UpstreamFetchError(f"Network error fetching {url}: unreachable")
        return self.pages[url]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> TranslationCache:
    return TranslationCache(clock=clock)


@pytest.fixture()
def stub_client() -> StubTranslationClient:
    return StubTranslationClient()


@pytest.fixture()
def translator(stub_client: StubTranslationClient, cache: TranslationCache) -> TranslationService:
    return TranslationService(stub_client, cache)


@pytest.fixture()
def stub_fetcher() -> StubFetcher:
    return StubFetcher()
