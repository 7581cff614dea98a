"""Application configuration via pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage
    database_path: Path = Path.home() / ".schedule-hub" / "schedule_hub.sqlite"

    # Parsing
    timezone: str = "Asia/Seoul"

    # Sync
    sync_interval_seconds: float = 10.0
    sync_lookback_days: int = 14
    slack_history_limit: int = 100

    # Notifications
    scheduler_interval_seconds: float = 60.0
    advance_notice_minutes: int = 5
    notify_slack_token: str = ""
    notify_channel: str = ""

    # Scheduler endpoints
    scheduler_secret: str = ""

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.database_path.expanduser()}"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
