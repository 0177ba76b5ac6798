"""
Application configuration module.

Loads settings from environment variables (or a .env file) using
pydantic-settings. Database credentials are only ever read from the
environment.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the InvestPro dashboard API.

    Values are read from the process environment first and from ``.env``
    when present. In a container deployment they are injected by the
    orchestrator.
    """

    PROJECT_NAME: str = "InvestPro Dashboard API"
    API_V1_STR: str = "/api/v1"

    # ── SQLite mode (no external DB required) ──
    USE_SQLITE: bool = False

    # ── PostgreSQL connection parameters ──
    # Empty defaults keep USE_SQLITE=true usable without dummy PG vars; the
    # validator below enforces them when PostgreSQL mode is selected.
    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_SERVER: str = ""
    POSTGRES_DB: str = ""
    POSTGRES_PORT: int = 5432

    @model_validator(mode="after")
    def _require_pg_credentials_unless_sqlite(self) -> "Settings":
        """Fail fast if PostgreSQL credentials are missing in production mode."""
        if not self.USE_SQLITE:
            missing = [
                name
                for name in (
                    "POSTGRES_USER",
                    "POSTGRES_PASSWORD",
                    "POSTGRES_SERVER",
                    "POSTGRES_DB",
                )
                if not getattr(self, name)
            ]
            if missing:
                vars_list = ", ".join(missing)
                raise ValueError(
                    f"PostgreSQL mode requires these environment variables: "
                    f"{vars_list}.\n\n"
                    f"Either set them (or put them in a .env file), e.g.\n"
                    f"       POSTGRES_USER=investpro\n"
                    f"       POSTGRES_PASSWORD=investpro\n"
                    f"       POSTGRES_SERVER=127.0.0.1\n"
                    f"       POSTGRES_DB=investpro\n\n"
                    f"or run against in-memory SQLite:\n"
                    f"       USE_SQLITE=true uvicorn investpro.main:app"
                )
        return self

    # ── Connection pool tuning ──
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a pooled connection
    DB_POOL_RECYCLE: int = 1800  # seconds before a connection is recycled

    # ── CORS ──
    # Comma-separated list of allowed origins (the dashboard front-end).
    CORS_ORIGINS: str = "*"

    # ── Logging ──
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_FILE_BACKUP_COUNT: int = 5

    # ── Read cache ──
    CACHE_ENABLED: bool = True
    CACHE_TTL: float = 30.0  # seconds
    CACHE_MAX_SIZE: int = 1000

    # ── Circuit breaker (database) ──
    CB_FAILURE_THRESHOLD: int = 5
    CB_RECOVERY_TIMEOUT: float = 30.0  # seconds

    # ── Analytics ──
    # Length of synthesized performance series and the width of the random
    # band applied around the trend (0.1 means ±5 %).
    PERFORMANCE_DAYS: int = 90
    PERFORMANCE_NOISE: float = 0.1

    # ── Demo mode ──
    # Insert the static demo dataset on startup; existing records are skipped.
    SEED_DEMO_DATA: bool = False

    @property
    def DATABASE_URL(self) -> str:
        """Async database DSN: in-memory SQLite or PostgreSQL via asyncpg."""
        if self.USE_SQLITE:
            return "sqlite+aiosqlite://"
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
