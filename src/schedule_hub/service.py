"""User-facing schedule operations that touch both the store and the scheduler."""

import logging
from datetime import datetime

from schedule_hub.models.schedule import Schedule, ScheduleSource, ScheduleType
from schedule_hub.models.tag import Tag
from schedule_hub.notifications.scheduler import NotificationScheduler
from schedule_hub.store.database import ScheduleStore

logger = logging.getLogger(__name__)


class ScheduleService:
    def __init__(self, store: ScheduleStore, scheduler: NotificationScheduler):
        self._store = store
        self._scheduler = scheduler

    async def create_manual(
        self,
        title: str,
        start_datetime: datetime,
        end_datetime: datetime | None = None,
        note: str = "",
        type: ScheduleType = ScheduleType.TASK,
        location: str | None = None,
        links: list[str] | None = None,
        tag_id: str | None = None,
    ) -> Schedule:
        """Save a new manual schedule and register its start notification."""
        schedule = Schedule(
            title=title,
            start_datetime=start_datetime,
            end_datetime=end_datetime,
            note=note,
            type=type,
            source=ScheduleSource.MANUAL,
            location=location,
            links=links or [],
            tag_id=tag_id,
        )
        saved = self._store.upsert_schedule(schedule)
        await self._scheduler.schedule_one_shot(saved)
        logger.info("Created schedule %s", saved.id)
        return saved

    async def update(self, schedule: Schedule) -> Schedule:
        """Overwrite a schedule and re-register its one-shot for the new start.

        Moving the start clears ``notification_sent`` so the new time is notified.
        """
        existing = self._store.get_schedule(schedule.id)
        if existing is not None and existing.start_datetime != schedule.start_datetime:
            schedule = schedule.model_copy(update={"notification_sent": False})
        saved = self._store.upsert_schedule(schedule)
        await self._scheduler.cancel(saved.id)
        if not saved.is_done:
            await self._scheduler.schedule_one_shot(saved)
        return saved

    async def delete(self, schedule_id: str) -> Schedule:
        """Delete a schedule (tombstoning Slack messages) and cancel its notifications.

        Raises:
            StoreError(NOT_FOUND): no schedule with that id.
        """
        deleted = self._store.delete_schedule(schedule_id)
        await self._scheduler.cancel(schedule_id)
        return deleted

    async def toggle_done(self, schedule_id: str) -> Schedule:
        schedule = self._store.require_schedule(schedule_id)
        updated = self._store.set_done(schedule_id, not schedule.is_done)
        if updated.is_done:
            await self._scheduler.cancel(schedule_id)
        else:
            await self._scheduler.schedule_one_shot(updated)
        return updated

    def update_note(self, schedule_id: str, note: str) -> Schedule:
        return self._store.update_note(schedule_id, note)

    def tag_for(self, schedule: Schedule) -> Tag | None:
        """The schedule's tag, or None if it has none or the tag was deleted."""
        return self._store.resolve_tag(schedule.tag_id)
