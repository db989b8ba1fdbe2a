from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RELAY_", env_file=".env", extra="ignore", populate_by_name=True,
    )

    # Service
    service_name: str = "supra-ai-optimized"
    service_version: str = "2.0.0"

    # Server
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("RELAY_ENVIRONMENT", "NODE_ENV"),
    )
    port: int = Field(default=3000, validation_alias=AliasChoices("RELAY_PORT", "PORT"))
    log_level: str = "info"
    log_format: str = "json"
    allow_cors_origins: List[str] = ["*"]

    # Usage quota
    free_tier_limit: int = Field(default=50, ge=0)
    pro_tier_limit: int = 100
    usage_window_days: int = Field(default=30, ge=0)  # 0 disables the lazy window
    usage_reset_interval_seconds: float = Field(default=24 * 60 * 60, gt=0)

    # Rate limiting
    generate_rate_limit: str = "20/hour"

    # Provider
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("RELAY_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4"
    openai_max_tokens: int = 2000
    openai_temperature: float = 0.3
    provider_timeout_seconds: float = Field(default=60.0, gt=0)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"json", "text"}:
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def usage_window(self) -> Optional[timedelta]:
        """Per-record reset window, or None when the lazy reset is disabled."""
        if self.usage_window_days <= 0:
            return None
        return timedelta(days=self.usage_window_days)


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Module-level singleton for convenience
settings = get_settings()
