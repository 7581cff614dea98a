"""Tests for the schedule-hub CLI (sync and wipe)."""

from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from schedule_hub.cli import app, database_files
from schedule_hub.config import Settings
from schedule_hub.ingestion.pipeline import SyncResult
from schedule_hub.store.database import ScheduleStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def _settings(settings: Settings):
    """Point the CLI at the per-test database and keep log config untouched."""
    with (
        patch("schedule_hub.cli.get_settings", return_value=settings),
        patch("schedule_hub.cli.configure_logging"),
    ):
        yield


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "sync" in result.stdout
    assert "wipe" in result.stdout


# -- wipe --


def test_wipe_missing_database(settings: Settings):
    result = runner.invoke(app, ["wipe", "--yes"])
    assert result.exit_code == 0
    assert "not found" in result.stdout


def test_wipe_deletes_database_and_sidecars(settings: Settings):
    store = ScheduleStore(settings.database_url)
    store.initialize()
    store.dispose()
    assert settings.database_path.exists()

    result = runner.invoke(app, ["wipe", "--yes"])

    assert result.exit_code == 0
    assert not any(path.exists() for path in database_files(settings.database_path))


def test_wipe_aborts_without_confirmation(settings: Settings):
    settings.database_path.write_text("")

    result = runner.invoke(app, ["wipe"], input="n\n")

    assert result.exit_code == 1
    assert settings.database_path.exists()


def test_database_files_include_wal_sidecars(tmp_path):
    names = [p.name for p in database_files(tmp_path / "db.sqlite")]
    assert names == ["db.sqlite", "db.sqlite-wal", "db.sqlite-shm"]


# -- sync --


def test_sync_without_workspaces(settings: Settings):
    result = runner.invoke(app, ["sync"])
    assert result.exit_code == 0
    assert "No workspace configured" in result.stdout


def test_sync_prints_summary(settings: Settings, workspace):
    store = ScheduleStore(settings.database_url)
    store.initialize()
    store.upsert_workspace(workspace)
    store.dispose()

    summary = SyncResult(fetched_messages=4, schedules=2, saved=1, skipped_existing=1)
    with patch(
        "schedule_hub.ingestion.pipeline.SyncPipeline.sync",
        new_callable=AsyncMock,
        return_value=summary,
    ):
        result = runner.invoke(app, ["sync"])

    assert result.exit_code == 0
    assert "Sync summary" in result.stdout
    assert "Messages fetched" in result.stdout
