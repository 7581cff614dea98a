"""One ingestion pass: fetch every enabled workspace, convert, dedup, persist.

A pass never stops because one workspace failed; source errors are logged
and counted in ``SyncResult.failed_workspaces``. Store errors propagate.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from pydantic import BaseModel

from schedule_hub.config import Settings
from schedule_hub.ingestion.converter import convert_message
from schedule_hub.models.schedule import Schedule
from schedule_hub.models.slack import SlackMessage
from schedule_hub.models.tag import DEFAULT_MEETING_TAG, DEFAULT_MENTION_TAG
from schedule_hub.models.workspace import WorkspaceConfiguration
from schedule_hub.slack.errors import WorkspaceSourceError
from schedule_hub.slack.source import fetch_messages
from schedule_hub.store.database import ScheduleStore

logger = logging.getLogger(__name__)

FetchMessages = Callable[..., Awaitable[list[SlackMessage]]]


class SyncResult(BaseModel):
    """Outcome of one sync pass."""

    skipped: bool = False  # Another pass was already running
    fetched_messages: int = 0
    schedules: int = 0  # Synthesized before dedup
    saved: int = 0
    skipped_existing: int = 0
    skipped_deleted: int = 0
    failed_workspaces: list[str] = []


class SyncPipeline:
    """Pulls schedules from every enabled workspace configuration into the store.

    Args:
        store: Persistence store.
        settings: Lookback window, history limit and timezone.
        fetch: Message source, replaceable in tests.
    """

    def __init__(
        self,
        store: ScheduleStore,
        settings: Settings,
        fetch: FetchMessages = fetch_messages,
    ):
        self._store = store
        self._settings = settings
        self._fetch = fetch
        self._syncing = False
        self._stop_event = asyncio.Event()

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    async def sync(self, now: datetime | None = None) -> SyncResult:
        """Run one pass. Returns ``SyncResult(skipped=True)`` if a pass is in flight."""
        if self._syncing:
            logger.debug("Sync already in progress, skipping")
            return SyncResult(skipped=True)

        self._syncing = True
        try:
            return await self._run(now)
        finally:
            self._syncing = False

    async def _run(self, now: datetime | None) -> SyncResult:
        tz = self._settings.tzinfo
        now = now.astimezone(tz) if now is not None else datetime.now(tz)
        oldest = now - timedelta(days=self._settings.sync_lookback_days)

        configs = self._store.list_enabled_workspaces()
        result = SyncResult()
        if not configs:
            logger.debug("No enabled workspace configurations")
            return result

        meeting_tag = self._store.find_tag_by_name(DEFAULT_MEETING_TAG.name)
        mention_tag = self._store.find_tag_by_name(DEFAULT_MENTION_TAG.name)
        meeting_tag_id = meeting_tag.id if meeting_tag else None
        mention_tag_id = mention_tag.id if mention_tag else None

        outcomes = await asyncio.gather(
            *(
                self._fetch(config, oldest, limit=self._settings.slack_history_limit)
                for config in configs
            ),
            return_exceptions=True,
        )

        candidates: list[Schedule] = []
        for config, outcome in zip(configs, outcomes):
            if isinstance(outcome, WorkspaceSourceError):
                logger.warning(
                    "Sync failed for workspace %s (%s): %s",
                    config.name,
                    outcome.kind,
                    outcome,
                )
                result.failed_workspaces.append(config.id)
                continue
            if isinstance(outcome, BaseException):
                raise outcome

            result.fetched_messages += len(outcome)
            candidates.extend(
                self._convert_all(outcome, config, now, meeting_tag_id, mention_tag_id)
            )

        result.schedules = len(candidates)
        fresh = self._dedup(candidates, result)
        if fresh:
            self._store.upsert_schedules(fresh)
        result.saved = len(fresh)

        logger.info(
            "Sync complete: %d new schedule(s) from %d message(s)",
            result.saved,
            result.fetched_messages,
            extra={
                "saved": result.saved,
                "skipped_existing": result.skipped_existing,
                "skipped_deleted": result.skipped_deleted,
                "failed_workspaces": len(result.failed_workspaces),
            },
        )
        return result

    @staticmethod
    def _convert_all(
        messages: list[SlackMessage],
        config: WorkspaceConfiguration,
        now: datetime,
        meeting_tag_id: str | None,
        mention_tag_id: str | None,
    ) -> list[Schedule]:
        schedules = []
        for message in messages:
            schedule = convert_message(message, config, now, meeting_tag_id, mention_tag_id)
            if schedule is not None:
                schedules.append(schedule)
        return schedules

    def _dedup(self, candidates: list[Schedule], result: SyncResult) -> list[Schedule]:
        """Drop schedules already stored, tombstoned, or repeated within the batch."""
        existing = self._store.existing_ids(s.id for s in candidates)
        deleted = self._store.deleted_message_ids(
            s.source_message_id for s in candidates if s.source_message_id
        )

        fresh: list[Schedule] = []
        seen: set[str] = set()
        for schedule in candidates:
            if schedule.id in seen:
                continue
            seen.add(schedule.id)
            if schedule.id in existing:
                result.skipped_existing += 1
                continue
            if schedule.source_message_id in deleted:
                result.skipped_deleted += 1
                continue
            fresh.append(schedule)
        return fresh

    async def run_periodic(self, interval: float | None = None) -> None:
        """Sync immediately, then every ``interval`` seconds until ``stop()``.

        Store errors end the pass but not the loop; they are logged and the
        next pass runs on schedule.
        """
        interval = interval if interval is not None else self._settings.sync_interval_seconds
        self._stop_event.clear()
        while not self._stop_event.is_set():
            try:
                await self.sync()
            except Exception:
                logger.error("Sync pass failed", exc_info=True)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

    def stop(self) -> None:
        self._stop_event.set()
