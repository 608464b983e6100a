"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (LINGUAPROXY__PROVIDER__API_KEY=sk-...)
  2. linguaproxy.yaml       (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults. Translation
needs ``provider.api_key``; without it every translate call fails fast.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


def _find_config_file() -> str | None:
    """Return the path of the first linguaproxy.yaml found, or None."""
    candidates = [
        Path("linguaproxy.yaml"),
        Path(platformdirs.user_config_dir("linguaproxy")) / "linguaproxy.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3080


class ProviderSettings(BaseModel):
    api_key: str = ""
    url: str = "https://api.deepseek.com/v1/translate"
    timeout_seconds: float = Field(default=15.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=2.0, ge=0)


class CacheSettings(BaseModel):
    ttl_hours: int = Field(default=24, ge=0)


class UpstreamSettings(BaseModel):
    # Origin whose HTML responses are translated. Empty disables the proxy.
    url: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0)


class FetcherSettings(BaseModel):
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_redirects: int = Field(default=3, ge=0)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: LINGUAPROXY__SERVER__PORT=9090
        env_prefix="LINGUAPROXY__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    provider: ProviderSettings = ProviderSettings()
    cache: CacheSettings = CacheSettings()
    upstream: UpstreamSettings = UpstreamSettings()
    fetcher: FetcherSettings = FetcherSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
