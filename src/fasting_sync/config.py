"""Client configuration loaded from environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class SyncSettings(BaseSettings):
    """Settings for the session sync client."""

    # Remote session store
    api_base_url: str = "http://127.0.0.1:8083"
    request_timeout: float = 10.0

    # Synchronizer timing
    debounce_seconds: float = 2.0
    poll_interval_seconds: float = 30.0

    # Local cache
    local_db_path: str = "~/.fasting_sync/local.db"

    class Config:
        env_prefix = "FASTING_SYNC_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_sync_settings() -> SyncSettings:
    return SyncSettings()
