"""
Unit tests for the application configuration (Settings).

Tests cover:
- Default values
- DATABASE_URL property for SQLite and PostgreSQL mode
- PostgreSQL credential validation
"""

import os

import pytest

from investpro.core.config import Settings, settings


class TestSettingsDefaults:
    def test_project_name(self):
        assert settings.PROJECT_NAME == "InvestPro Dashboard API"

    def test_api_version_prefix(self):
        assert settings.API_V1_STR == "/api/v1"

    def test_tests_run_against_sqlite(self):
        assert settings.USE_SQLITE is True

    def test_cache_settings_have_defaults(self):
        assert settings.CACHE_TTL > 0
        assert settings.CACHE_MAX_SIZE > 0
        assert isinstance(settings.CACHE_ENABLED, bool)

    def test_circuit_breaker_settings_have_defaults(self):
        assert settings.CB_FAILURE_THRESHOLD > 0
        assert settings.CB_RECOVERY_TIMEOUT > 0

    def test_performance_series_defaults(self):
        s = Settings(USE_SQLITE=True, _env_file=None)  # type: ignore[call-arg]
        assert s.PERFORMANCE_DAYS == 90
        assert s.PERFORMANCE_NOISE == pytest.approx(0.1)
        assert s.SEED_DEMO_DATA is False


class TestDatabaseURL:
    def test_sqlite_url(self):
        assert settings.DATABASE_URL == "sqlite+aiosqlite://"

    def test_postgres_url(self):
        s = Settings(
            USE_SQLITE=False,
            POSTGRES_USER="u",
            POSTGRES_PASSWORD="p",
            POSTGRES_SERVER="localhost",
            POSTGRES_DB="db",
            POSTGRES_PORT=5432,
        )
        assert s.DATABASE_URL == "postgresql+asyncpg://u:p@localhost:5432/db"

    def test_pg_missing_credentials_raises(self):
        """The validator names every missing PostgreSQL variable."""
        saved = {}
        for key in (
            "USE_SQLITE",
            "POSTGRES_USER",
            "POSTGRES_PASSWORD",
            "POSTGRES_SERVER",
            "POSTGRES_DB",
        ):
            saved[key] = os.environ.pop(key, None)
        try:
            with pytest.raises(Exception, match="POSTGRES_USER"):
                Settings(USE_SQLITE=False, _env_file=None)  # type: ignore[call-arg]
        finally:
            for key, val in saved.items():
                if val is not None:
                    os.environ[key] = val
