"""Tests for application settings."""

from catalog_service.infrastructure.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("INGESTION_INTERVAL_SECONDS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.database_url.startswith("sqlite+aiosqlite://")
        assert settings.ingestion_interval_seconds == 300.0
        assert settings.storage_timeout_seconds == 10.0
        assert settings.upstream_timeout_seconds == 10.0

    def test_environment_overrides(self, monkeypatch) -> None:
        """Settings are read from environment variables."""
        monkeypatch.setenv("WOOCOMMERCE_BASE_URL", "https://shop.test")
        monkeypatch.setenv("INGESTION_CONCURRENCY", "3")
        monkeypatch.setenv("INGESTION_ENABLED", "false")

        settings = Settings(_env_file=None)

        assert settings.woocommerce_base_url == "https://shop.test"
        assert settings.ingestion_concurrency == 3
        assert settings.ingestion_enabled is False
