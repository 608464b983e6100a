from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    """A cached translation. Replaced wholesale on re-insertion, never mutated."""

    model_config = ConfigDict(frozen=True)

    content: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
