"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str
    db_echo: bool = False
    # Creates missing tables at startup (no migration tooling is shipped)
    create_schema: bool = True

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Pagination default for GET /bookmarks
    items_per_page: int = Field(default=5, ge=1)

    # oEmbed provider registry
    oembed_providers_url: str = "https://oembed.com/providers.json"
    oembed_timeout: float = 10.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
