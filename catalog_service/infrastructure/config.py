"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./catalog.db"
    create_tables_on_startup: bool = True
    storage_timeout_seconds: float = 10.0

    # Upstream WooCommerce store
    woocommerce_base_url: str = "http://localhost:8080"
    woocommerce_consumer_key: str = ""
    woocommerce_consumer_secret: str = ""
    woocommerce_page_size: int = 100
    upstream_timeout_seconds: float = 10.0

    # Ingestion
    ingestion_enabled: bool = True
    ingestion_interval_seconds: float = 300.0
    ingestion_concurrency: int = 8

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
