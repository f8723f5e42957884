"""Environment-based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy.engine import URL


def resolve_database_url() -> str:
    """Resolve DB connection string.

    Priority:
      1) DATABASE_URL (explicit)
      2) Build from PG* env vars (common Postgres convention)
      3) Fallback to local sqlite
    """

    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    host = os.getenv("PGHOST")
    user = os.getenv("PGUSER")
    database = os.getenv("PGDATABASE")
    port_raw = os.getenv("PGPORT")

    if host and user and database:
        password = os.getenv("PGPASSWORD")
        sslmode = os.getenv("PGSSLMODE", "prefer")

        try:
            port = int(port_raw) if port_raw else 5432
        except ValueError:
            port = 5432

        query = {"sslmode": sslmode} if sslmode else {}
        url = URL.create(
            drivername="postgresql+psycopg2",
            username=user,
            password=password,
            host=host,
            port=port,
            database=database,
            query=query,
        )
        return url.render_as_string(hide_password=False)

    return "sqlite:///./drawroom.db"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class BaseConfig:
    """Base configuration shared by all environments."""

    APP_ENV: str = os.getenv("APP_ENV", "development")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret")
    DATABASE_URL: str = resolve_database_url()
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Draw room
    DEFAULT_REVEAL_DELAY_MS: int = _int_env("DEFAULT_REVEAL_DELAY_MS", 5000)
    MAX_REVEAL_DELAY_MS: int = _int_env("MAX_REVEAL_DELAY_MS", 60_000)

    # Socket.IO; None lets Flask-SocketIO pick the async mode.
    SOCKETIO_ASYNC_MODE: str | None = os.getenv("SOCKETIO_ASYNC_MODE") or None
    SOCKETIO_CORS_ORIGINS: str | None = os.getenv("SOCKETIO_CORS_ORIGINS") or None


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    """Production configuration."""

    DEBUG: bool = False


@dataclass(frozen=True)
class TestingConfig(BaseConfig):
    """Test configuration (in-process, no reveal delay)."""

    TESTING: bool = True
    DEBUG: bool = False
    DATABASE_URL: str = "sqlite:///:memory:"
    DEFAULT_REVEAL_DELAY_MS: int = 0
    SOCKETIO_ASYNC_MODE: str | None = "threading"


def get_config() -> type[BaseConfig]:
    """Resolve configuration class based on APP_ENV."""

    env = os.getenv("APP_ENV", "development").lower().strip()
    if env == "production":
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
