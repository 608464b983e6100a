from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    BAD_REQUEST = "BAD_REQUEST"
    UPSTREAM_FETCH_FAILED = "UPSTREAM_FETCH_FAILED"
    NOT_CONFIGURED = "NOT_CONFIGURED"
    TRANSLATION_UNAVAILABLE = "TRANSLATION_UNAVAILABLE"
    PARSE_ERROR = "PARSE_ERROR"


class LinguaProxyError(Exception):
    """Base class for all expected failure conditions.

    Caught by the HTTP layer and serialised into a JSON error response with
    ``status_code``. The passthrough middleware catches it too, but only to
    fall back to the untranslated body.
    """

    code: ErrorCode
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class BadRequestError(LinguaProxyError):
    """Missing or invalid required request input."""

    code = ErrorCode.BAD_REQUEST
    status_code = 400


class UpstreamFetchError(LinguaProxyError):
    """Target URL unreachable, non-success status, or unreadable content."""

    code = ErrorCode.UPSTREAM_FETCH_FAILED
    status_code = 500


class NotConfiguredError(LinguaProxyError):
    """No provider API key is configured."""

    code = ErrorCode.NOT_CONFIGURED
    status_code = 503


class TranslationUnavailableError(LinguaProxyError):
    """The translation provider could not produce a translation.

    ``provider_reported`` is True when the provider answered but the answer was
    unusable (non-success status, malformed body, empty translation list) and
    False for transport failures (network error, timeout).
    """

    code = ErrorCode.TRANSLATION_UNAVAILABLE
    status_code = 503

    def __init__(self, message: str, *, provider_reported: bool) -> None:
        super().__init__(message)
        self.provider_reported = provider_reported

    def to_dict(self) -> dict:
        return {**super().to_dict(), "provider_reported": self.provider_reported}


class ParseError(LinguaProxyError):
    """HTML could not be parsed or serialised."""

    code = ErrorCode.PARSE_ERROR
    status_code = 500
