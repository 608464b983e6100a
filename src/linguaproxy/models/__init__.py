from __future__ import annotations

from linguaproxy.models.api import TranslateUrlInput, TranslateUrlOutput
from linguaproxy.models.cache import CacheEntry

__all__ = [
    # cache
    "CacheEntry",
    # api
    "TranslateUrlInput",
    "TranslateUrlOutput",
]
