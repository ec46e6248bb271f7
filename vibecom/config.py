from __future__ import annotations

from pathlib import Path
import os

from dotenv import load_dotenv

load_dotenv()

# Repository root
REPO_ROOT = Path(__file__).resolve().parent.parent
# Default database location
DB_FILE = REPO_ROOT / "vibecom.db"
# Default location for uploaded images
MEDIA_ROOT = REPO_ROOT / "static" / "media"


class BaseConfig:
    """Base settings shared across environments."""

    DB_USER = os.getenv("DB_USER", "vibecom")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_NAME: str | None = None
    LOG_LEVEL = "INFO"


class ProductionConfig(BaseConfig):
    DB_NAME = "vibecom_prod"
    LOG_LEVEL = "WARNING"


class DevelopmentConfig(BaseConfig):
    # sqlite file under the repository root
    DB_NAME = None
    LOG_LEVEL = "DEBUG"


class TestConfig(BaseConfig):
    DB_NAME = None
    LOG_LEVEL = "WARNING"


_CONFIGS = {
    "production": ProductionConfig,
    "development": DevelopmentConfig,
    "test": TestConfig,
}

# Current active configuration determined by the ``APP_ENV`` environment
# variable. Defaults to development.
APP_ENV = os.getenv("APP_ENV", "development")
ActiveConfig = _CONFIGS.get(APP_ENV, DevelopmentConfig)


def get_database_url() -> str:
    """Return the configured database connection string.

    ``DATABASE_URL`` wins when set. Otherwise configs with a ``DB_NAME`` use
    PostgreSQL and the rest fall back to the sqlite file at ``DB_FILE``.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if ActiveConfig.DB_NAME:
        return (
            f"postgresql://{ActiveConfig.DB_USER}:{ActiveConfig.DB_PASSWORD}"
            f"@{ActiveConfig.DB_HOST}/{ActiveConfig.DB_NAME}"
        )
    return f"sqlite:///{DB_FILE}"


def get_redis_url() -> str | None:
    """Return the Redis connection string if set."""
    return os.getenv("REDIS_URL")


def get_cache_ttl() -> int:
    """Return the cache TTL in seconds."""
    return int(os.getenv("CACHE_TTL", "300"))


def get_media_root() -> Path:
    """Return the directory uploaded images are written to."""
    root = os.getenv("MEDIA_ROOT")
    return Path(root) if root else MEDIA_ROOT


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", ActiveConfig.LOG_LEVEL).upper()


__all__ = [
    "DB_FILE",
    "get_database_url",
    "get_redis_url",
    "get_cache_ttl",
    "get_media_root",
    "get_log_level",
]
