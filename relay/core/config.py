"""
Core configuration and settings for the AI relay.
"""

import json
from functools import lru_cache
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "DTempire AI v2.0"
    app_version: str = "2.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 25586
    cors_origins: list[str] = Field(default=["*"])

    # Logging
    log_level: str = "INFO"
    json_logs: bool | None = None  # None -> JSON unless debug

    # Default provider (the one guaranteed-available text backend)
    default_api_url: str = Field(
        default="http://158.69.214.8:9853/dtempire-ai",
        validation_alias=AliasChoices("EXTERNAL_API_URL", "DEFAULT_API_URL"),
    )
    external_api_token: str | None = None

    # Pooled gateway (multi-model, model id as path segment)
    pooled_api_base: str = "https://raqkidapiendpoint.vercel.app"
    pooled_api_key: str = "Raqkid3Y0mT_free"

    # Image generation
    image_api_url: str = "https://imggen-api.ankitgupta.com.np/api/ai-text/"

    # Timeouts
    api_timeout_ms: int | None = Field(
        default=None,
        validation_alias=AliasChoices("API_TIMEOUT", "API_TIMEOUT_MS"),
    )  # overrides every adapter's own timeout when set
    request_timeout: float = 30.0  # budget for a whole dispatch incl. fallback

    # Batch
    batch_concurrency: int = 4

    @property
    def upstream_timeout_override(self) -> float | None:
        """Adapter timeout override in seconds, if configured."""
        if self.api_timeout_ms and self.api_timeout_ms > 0:
            return self.api_timeout_ms / 1000.0
        return None

    @property
    def use_json_logs(self) -> bool:
        if self.json_logs is None:
            return not self.debug
        return self.json_logs

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from JSON string if needed."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, treat as comma-separated
                return [s.strip() for s in v.split(",")]
        return v

    @field_validator("batch_concurrency")
    @classmethod
    def validate_batch_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("batch_concurrency must be at least 1")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
