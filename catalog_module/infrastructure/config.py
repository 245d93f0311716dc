"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"

    # Authentication
    catalog_api_key: str = "dev-api-key-change-in-production"

    # Caching
    cache_enabled: bool = True
    cache_ttl_seconds: int = 300
    cache_max_size: int = 10_000

    # Catalog
    default_response_group: str = "ItemMedium"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


settings = Settings()
