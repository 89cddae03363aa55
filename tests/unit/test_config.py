"""Unit tests for settings loading and backend selection."""

import pytest

from splitsmart.services.config import Settings, get_settings, reset_settings
from splitsmart.services.data import create_data_service
from splitsmart.services.data.memory import MemoryDataService
from splitsmart.services.data.sql import SqlDataService


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate tests from the developer's .env and SPLITSMART_* variables."""
    for name in (
        "SPLITSMART_DATA_BACKEND",
        "SPLITSMART_DATABASE_URL",
        "SPLITSMART_SEED_DEMO_DATA",
        "SPLITSMART_LOCALE",
        "SPLITSMART_LOG_LEVEL",
        "SPLITSMART_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_defaults(self):
        settings = Settings()

        assert settings.data_backend == "memory"
        assert settings.seed_demo_data is True
        assert settings.locale == "en_US"
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        """Test SPLITSMART_ prefixed variables are picked up."""
        monkeypatch.setenv("SPLITSMART_DATA_BACKEND", "sql")
        monkeypatch.setenv("SPLITSMART_DATABASE_URL", "sqlite:///:memory:")
        monkeypatch.setenv("SPLITSMART_SEED_DEMO_DATA", "false")

        settings = Settings()

        assert settings.data_backend == "sql"
        assert settings.database_url == "sqlite:///:memory:"
        assert settings.seed_demo_data is False

    def test_env_file_is_read(self, tmp_path):
        (tmp_path / ".env").write_text("SPLITSMART_LOCALE=de_DE\n")

        assert Settings().locale == "de_DE"

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("SPLITSMART_DATA_BACKEND", "redis")

        with pytest.raises(ValueError):
            Settings()

    def test_get_settings_is_cached_until_reset(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("SPLITSMART_LOCALE", "fr_FR")

        assert get_settings() is first

        reset_settings()
        assert get_settings().locale == "fr_FR"


class TestCreateDataService:
    """Tests for storage backend selection."""

    def test_memory_backend_seeded(self):
        service = create_data_service(Settings(data_backend="memory"))

        assert isinstance(service, MemoryDataService)
        assert service.mode == "memory"
        assert len(service.get_all_users()) == 4

    def test_memory_backend_empty(self):
        service = create_data_service(Settings(data_backend="memory", seed_demo_data=False))

        assert service.get_all_users() == []

    def test_sql_backend(self):
        service = create_data_service(
            Settings(data_backend="sql", database_url="sqlite:///:memory:")
        )

        assert isinstance(service, SqlDataService)
        assert service.mode == "sql"
        assert service.get_all_users() == []

    def test_defaults_to_global_settings(self, monkeypatch):
        monkeypatch.setenv("SPLITSMART_SEED_DEMO_DATA", "0")

        service = create_data_service()

        assert isinstance(service, MemoryDataService)
        assert service.get_all_users() == []
