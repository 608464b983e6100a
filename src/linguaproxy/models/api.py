from __future__ import annotations

from pydantic import BaseModel, field_validator


class TranslateUrlInput(BaseModel):
    """Query parameters of ``GET /api/translate``."""

    url: str
    lang: str = ""

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        return v


class TranslateUrlOutput(BaseModel):
    cached: bool
    original: str
    translated: str
    language: str
