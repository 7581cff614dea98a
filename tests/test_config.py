"""Tests for application settings."""

from pathlib import Path
from zoneinfo import ZoneInfo

from schedule_hub.config import Settings, get_settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.timezone == "Asia/Seoul"
    assert settings.sync_interval_seconds == 10.0
    assert settings.sync_lookback_days == 14
    assert settings.slack_history_limit == 100
    assert settings.scheduler_interval_seconds == 60.0
    assert settings.advance_notice_minutes == 5


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TIMEZONE", "UTC")
    monkeypatch.setenv("ADVANCE_NOTICE_MINUTES", "10")

    settings = Settings(_env_file=None)

    assert settings.tzinfo == ZoneInfo("UTC")
    assert settings.advance_notice_minutes == 10


def test_database_url(tmp_path: Path):
    settings = Settings(_env_file=None, database_path=tmp_path / "db.sqlite")
    assert settings.database_url == f"sqlite:///{tmp_path / 'db.sqlite'}"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
