"""
Settings for the finance service.

Values come from the process environment, with a .env file in
the working directory loaded first for local development.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Environment-driven settings, read once per process."""

    APP_NAME: str = os.getenv("APP_NAME", "Family Finance")
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = _env_bool("DEBUG", "false")

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Any SQLAlchemy URL; PostgreSQL in production
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/family_finance",
    )
    DB_POOL_PRE_PING: bool = _env_bool("DB_POOL_PRE_PING", "true")

    # LOG_FORMAT is "standard" or "json"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "standard")


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide Settings instance."""
    return Settings()
