"""Target language negotiation.

A language is taken from an explicit override (the ``lang`` query parameter)
when present, otherwise from the first supported entry of an
``Accept-Language`` header. Header q-weights are ignored: candidates are tried
in header order.
"""

from __future__ import annotations

DEFAULT_LANGUAGE = "en"

SUPPORTED_LANGUAGES: frozenset[str] = frozenset(
    {"en", "pt", "es", "fr", "de", "it", "ja", "zh", "ru"}
)


def is_supported(lang: str) -> bool:
    return lang in SUPPORTED_LANGUAGES


def resolve_language(override: str | None, accept_language: str | None) -> str:
    """Return the target language for a request.

    A non-empty override is returned verbatim, without checking it against
    the supported set. Never raises; falls back to ``DEFAULT_LANGUAGE``.
    """
    if override:
        return override

    for part in (accept_language or "").split(","):
        lang = part.split(";", 1)[0].strip().lower()[:2]
        if lang in SUPPORTED_LANGUAGES:
            return lang

    return DEFAULT_LANGUAGE
