"""In-memory translation cache with lazy TTL expiration.

Keys are composed from a primary key (request URL/path, or a content-hash key
for raw text) and an optional language suffix. Entries expire ``ttl`` after
they were written; expired entries are treated as absent by ``get`` but are
only ever replaced by a later ``put``, never swept.

There is no eviction beyond TTL, so the cache grows with the number of
distinct keys for the lifetime of the process. Persistence is out of scope.

One readers-writer lock guards the whole store. It is held only around the
dict access itself; callers must never hold it across I/O.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from linguaproxy.models.cache import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

log = structlog.get_logger()

DEFAULT_TTL = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def build_cache_key(primary_key: str, language: str) -> str:
    """``primary_key`` plus ``"|<language>"`` when a language is given."""
    if language:
        return f"{primary_key}|{language}"
    return primary_key


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve a write.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class TranslationCache:
    """Concurrent key → translated-content store implementing CacheProtocol."""

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, primary_key: str, language: str = "") -> str | None:
        """Return cached content, or ``None`` if absent or expired."""
        key = build_cache_key(primary_key, language)
        with self._lock.read():
            entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            log.debug("cache_entry_expired", key=key)
            return None
        return entry.content

    def put(self, primary_key: str, language: str, content: str) -> None:
        """Store ``content``, replacing any previous entry for the same key."""
        key = build_cache_key(primary_key, language)
        entry = CacheEntry(content=content, expires_at=self._clock() + self._ttl)
        with self._lock.write():
            self._entries[key] = entry

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)
