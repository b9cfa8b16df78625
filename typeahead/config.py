"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseModel):
    kind: Literal["mock", "http"] = "mock"
    mock_latency_ms: int = Field(default=500, ge=0, description="Simulated network delay.")
    base_url: HttpUrl | None = Field(
        default=None,
        description="Root of the HTTP search endpoint; `/search` is appended.",
    )
    api_key: SecretStr | None = None
    request_timeout_seconds: int = Field(default=10, ge=1, le=60)
    max_attempts: int = Field(default=3, ge=1, le=10)
    retry_base_delay: float = Field(default=0.5, ge=0)

    @field_validator("base_url", "api_key", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PipelineSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TYPEAHEAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: str = "INFO"
    debounce_ms: int = Field(default=300, ge=0)
    cancel_superseded: bool = True

    provider: ProviderSettings = Field(default_factory=ProviderSettings)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


@lru_cache
def get_settings() -> PipelineSettings:
    """Return cached settings instance."""

    return PipelineSettings()


__all__ = [
    "PipelineSettings",
    "ProviderSettings",
    "get_settings",
]
