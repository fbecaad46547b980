from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Naapbook"
    app_version: str = "0.1.0"
    app_env: str = "development"

    # Persistence adapter selection
    storage_backend: Literal["sqlite", "file", "memory"] = "sqlite"
    database_url: str = "sqlite:///data/naapbook.db"
    file_store_dir: str = "data/kv"

    # Root document location inside the key-value store
    store_namespace: str = "naapbook"
    root_document_key: str = "naapbook_data"
    legacy_clients_key: str = "clients"
    data_version: str = "1.0"

    default_page_size: int = 20

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"           # Root / app-wide
    log_level_sql: str = "WARNING"    # sqlalchemy.engine
    log_level_store: str = "INFO"     # record store services

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance, reads .env once."""
    return Settings()
