"""
Unit tests for AppSettings.

Tests cover:
- Defaults
- Environment variable overrides
- Timezone validation
- CORS origin parsing
"""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from backend.src.config.settings import AppSettings, DEFAULT_CORS_ORIGINS


ENV_VARS = [
    "EVENTS_DB_URL",
    "EVENTS_DB_SSLMODE",
    "EVENTS_TIMEZONE",
    "EVENTS_SERIES_LOCK",
    "EVENTS_SUGGESTION_LIMIT",
    "EVENTS_CORS_ORIGINS",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every EVENTS_* setting so defaults apply."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self, clean_env):
        settings = AppSettings(_env_file=None)

        assert settings.database_url.startswith("postgresql://")
        assert settings.db_sslmode == ""
        assert settings.timezone == "UTC"
        assert settings.series_lock is True
        assert settings.suggestion_limit == 10
        assert settings.cors_origins == DEFAULT_CORS_ORIGINS
        assert settings.is_sqlite is False


class TestEnvironmentOverrides:
    """Tests for EVENTS_* environment variables."""

    def test_overrides(self, clean_env):
        clean_env.setenv("EVENTS_DB_URL", "sqlite:///events.db")
        clean_env.setenv("EVENTS_TIMEZONE", "Europe/London")
        clean_env.setenv("EVENTS_SERIES_LOCK", "false")
        clean_env.setenv("EVENTS_SUGGESTION_LIMIT", "25")

        settings = AppSettings(_env_file=None)

        assert settings.is_sqlite is True
        assert settings.tzinfo == ZoneInfo("Europe/London")
        assert settings.series_lock is False
        assert settings.suggestion_limit == 25

    def test_unknown_timezone_rejected(self, clean_env):
        clean_env.setenv("EVENTS_TIMEZONE", "Mars/Olympus_Mons")

        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)

    @pytest.mark.parametrize("value", ["0", "101"])
    def test_suggestion_limit_bounds(self, clean_env, value):
        clean_env.setenv("EVENTS_SUGGESTION_LIMIT", value)

        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)


class TestModelConfig:
    """Tests for the settings source configuration."""

    def test_reads_dotenv_and_ignores_unknown_keys(self):
        assert AppSettings.model_config["env_file"] == ".env"
        assert AppSettings.model_config["extra"] == "ignore"


class TestCorsOrigins:
    """Tests for cors_origins_list."""

    def test_comma_separated(self, clean_env):
        clean_env.setenv("EVENTS_CORS_ORIGINS", " https://a.example , https://b.example,, ")

        settings = AppSettings(_env_file=None)

        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]
