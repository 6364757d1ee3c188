"""
Localbase - Configuration and settings.

LocalbaseSettings decides whether the app talks to the hosted Supabase
project or to the local SQLite file, and carries the Row Codec column rules.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Value shipped in .env.example; treated the same as "not configured"
PLACEHOLDER_SUPABASE_URL = "your_supabase_url"


class LocalbaseSettings(BaseSettings):
    """
    Settings for the local database adapter.

    Read from the environment and an optional .env file. Hosted Supabase
    fields are optional: when they are missing the local store is used.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase (hosted). Empty or placeholder -> local mode
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    # Local SQLite store
    local_db_path: str = "local.db"
    local_db_foreign_keys: bool = True

    # Row Codec rules. Entries may be "column" or "table.column"
    boolean_columns: set[str] = {"is_admin", "is_featured"}
    array_columns: set[str] = {"tags"}

    # Table backing auth.get_user()
    users_table: str = "users"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> LocalbaseSettings:
    """Get cached settings instance."""
    return LocalbaseSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: LocalbaseSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()


def should_use_local_db(config: LocalbaseSettings | None = None) -> bool:
    """
    True when no hosted Supabase URL is configured.

    A missing, empty or placeholder URL all select the local store.
    """
    config = config or get_settings()
    url = (config.supabase_url or "").strip()
    return not url or url == PLACEHOLDER_SUPABASE_URL
