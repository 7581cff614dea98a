"""Shared test fixtures."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from schedule_hub.app import app
from schedule_hub.config import Settings
from schedule_hub.models.workspace import WorkspaceConfiguration
from schedule_hub.store.database import ScheduleStore

KST = ZoneInfo("Asia/Seoul")


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a TestClient for the FastAPI app (lifespan not started)."""
    return TestClient(app)


@pytest.fixture
def kst_now() -> datetime:
    """A fixed reference instant: 2025-11-19 10:00 in Seoul."""
    return datetime(2025, 11, 19, 10, 0, tzinfo=KST)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway database, ignoring any local .env."""
    return Settings(_env_file=None, database_path=tmp_path / "schedule_hub.sqlite")


@pytest.fixture
def store(settings: Settings):
    """An initialized store on a temp-file SQLite database."""
    store = ScheduleStore(settings.database_url)
    store.initialize()
    yield store
    store.dispose()


@pytest.fixture
def workspace() -> WorkspaceConfiguration:
    return WorkspaceConfiguration(
        id="WS-1",
        name="Acme",
        channel_id="C123",
        channel_name="general",
        token="xoxb-test",
        user_id="U999",
        team_id="T1",
        color="#112233",
    )
