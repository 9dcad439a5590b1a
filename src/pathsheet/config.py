"""Configuration management for Pathsheet using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="PATHSHEET_",
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    # Persistence
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/pathsheet.db",
        description="Database connection URL for stored character records",
        alias="DATABASE_URL",
    )

    # Rules
    catalog_dir: Path | None = Field(
        default=None,
        description="Directory holding the rule catalog YAML files (bundled data if unset)",
    )
    focus_point_cap: int = Field(
        default=3, ge=1, description="Maximum size of a focus pool"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level", alias="LOG_LEVEL")
    log_format: str = Field(
        default="console", description="Log format (console or json)", alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
