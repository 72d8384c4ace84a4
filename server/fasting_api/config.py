"""Application configuration loaded from environment variables."""
import os
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Key-value store
    data_path: str = os.getenv("DATA_PATH", os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
    kv_db_name: str = "sessions.db"
    session_ttl_seconds: int = 90 * 24 * 60 * 60
    scan_batch_size: int = 100

    @property
    def kv_db_path(self) -> str:
        return os.path.join(self.data_path, self.kv_db_name)

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8083
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Links in outgoing email
    base_url: str = "http://localhost:3000"

    # SendGrid
    sendgrid_api_key: str = ""
    from_email: str = "noreply@example.com"
    from_name: str = "Fast Track"

    class Config:
        env_prefix = "FASTING_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
