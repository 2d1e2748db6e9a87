"""Application settings.

All configuration is sourced from environment variables (and optionally `.env`).
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Typed environment-backed settings for FlowSketch."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    # Completion provider
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("FLOWSKETCH_API_KEY", "ANTHROPIC_API_KEY"),
    )
    model: str = Field(
        default="claude-3-5-haiku-latest",
        validation_alias=AliasChoices("FLOWSKETCH_MODEL", "ANTHROPIC_MODEL"),
    )
    max_tokens: int = Field(default=2200, alias="FLOWSKETCH_MAX_TOKENS")
    temperature: float = Field(default=0.2, alias="FLOWSKETCH_TEMPERATURE")
    debug_completions: bool = Field(default=False, alias="FLOWSKETCH_DEBUG_COMPLETIONS")

    # HTTP surface
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        alias="FLOWSKETCH_CORS_ORIGINS",
    )
    port: int = Field(default=3001, validation_alias=AliasChoices("FLOWSKETCH_PORT", "PORT"))

    # Logging
    log_level: str = Field(default="INFO", alias="FLOWSKETCH_LOG_LEVEL")
    json_logs: bool = Field(default=False, alias="FLOWSKETCH_JSON_LOGS")

    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(
            "Invalid FlowSketch configuration",
            context={"errors": [".".join(map(str, err["loc"])) for err in exc.errors()]},
        ) from exc
