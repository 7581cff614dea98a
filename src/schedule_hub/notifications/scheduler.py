"""Polling notification scheduler.

Every ``interval_seconds`` it asks the store for schedules about to start and
requests an advance reminder or a start notification for each. A start is
delivered at most once per schedule: the in-memory registry guards the
current process and ``notification_sent`` guards restarts.
"""

import asyncio
import logging
import math
from datetime import datetime, timedelta, timezone

from schedule_hub.models.schedule import Schedule
from schedule_hub.notifications.delivery import NotificationDelivery, ScheduleStartListener
from schedule_hub.notifications.registry import Clock, NotifiedRegistry
from schedule_hub.store.database import ScheduleStore
from schedule_hub.store.errors import StoreError

logger = logging.getLogger(__name__)

START_TITLE = "회의 시작!"
ONE_SHOT_TITLE = "회의 시작"


def start_key(schedule_id: str) -> str:
    return f"meeting-start-{schedule_id}"


def advance_key(schedule_id: str, minutes: int) -> str:
    return f"advance-{schedule_id}-{minutes}"


def one_shot_key(schedule_id: str) -> str:
    return f"scheduled-{schedule_id}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NotificationScheduler:
    """Turns upcoming schedules into delivery requests.

    Args:
        store: Source of upcoming schedules and sink for ``mark_notified``.
        delivery: Where notifications go.
        interval_seconds: Polling period.
        advance_minutes: How far ahead advance reminders start.
        clock: Returns the current aware datetime. Defaults to UTC wall clock.
    """

    def __init__(
        self,
        store: ScheduleStore,
        delivery: NotificationDelivery,
        interval_seconds: float = 60.0,
        advance_minutes: int = 5,
        clock: Clock | None = None,
    ):
        self._store = store
        self._delivery = delivery
        self.interval_seconds = interval_seconds
        self.advance_minutes = advance_minutes
        self._clock = clock or _utc_now
        self._registry = NotifiedRegistry(clock=self._clock)
        self._listeners: list[ScheduleStartListener] = []
        # Schedule ids whose notification_sent write failed; retried next tick
        self._pending_marks: set[str] = set()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def grace_minutes(self) -> int:
        """How long after its start a missed schedule is still picked up.

        Two polling periods, so a start falling between ticks is never lost.
        """
        return max(1, math.ceil(2 * self.interval_seconds / 60))

    @property
    def registry(self) -> NotifiedRegistry:
        return self._registry

    @property
    def pending_marks(self) -> frozenset[str]:
        return frozenset(self._pending_marks)

    def add_listener(self, listener: ScheduleStartListener) -> None:
        self._listeners.append(listener)

    # -- Polling --

    async def tick(self) -> None:
        """Run one polling pass to completion."""
        now = self._clock()
        self._retry_pending_marks()

        try:
            schedules = self._store.upcoming(
                self.advance_minutes, now=now, grace_minutes=self.grace_minutes
            )
        except StoreError:
            logger.error("Could not load upcoming schedules", exc_info=True)
            return

        for schedule in schedules:
            if schedule.id in self._registry:
                continue
            until = (schedule.start_datetime - now).total_seconds()
            if until <= 0:
                await self._deliver_start(schedule)
            elif until <= self.advance_minutes * 60:
                await self._deliver_advance(schedule, until)

    async def _deliver_start(self, schedule: Schedule) -> None:
        logger.info("Schedule starting: %s", schedule.title)
        await self._delivery.request_notification(
            start_key(schedule.id), START_TITLE, schedule.title
        )
        for listener in self._listeners:
            try:
                await listener.on_schedule_start(schedule)
            except Exception:
                logger.error("Start listener failed for %s", schedule.id, exc_info=True)

        self._registry.add(schedule.id, schedule.id, self._expiry(schedule))
        self._mark_notified(schedule.id)

    async def _deliver_advance(self, schedule: Schedule, until: float) -> None:
        minutes = int(until // 60)
        key = advance_key(schedule.id, minutes)
        if key in self._registry:
            return
        await self._delivery.request_notification(
            key, f"{minutes}분 후 회의", schedule.title
        )
        self._registry.add(key, schedule.id, self._expiry(schedule))

    def _expiry(self, schedule: Schedule) -> datetime:
        return schedule.start_datetime + timedelta(minutes=self.grace_minutes)

    def _mark_notified(self, schedule_id: str) -> None:
        try:
            self._store.mark_notified(schedule_id)
        except StoreError:
            logger.warning(
                "Failed to persist notification_sent for %s, will retry",
                schedule_id,
                exc_info=True,
            )
            self._pending_marks.add(schedule_id)
            return
        self._pending_marks.discard(schedule_id)

    def _retry_pending_marks(self) -> None:
        for schedule_id in list(self._pending_marks):
            self._mark_notified(schedule_id)

    # -- Lifecycle --

    async def run(self) -> None:
        """Tick immediately, then every interval until ``stop()``."""
        self._stop_event.clear()
        logger.info("Notification scheduler started (every %ss)", self.interval_seconds)
        while not self._stop_event.is_set():
            try:
                await self.tick()
            except Exception:
                logger.error("Scheduler tick failed", exc_info=True)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue
        logger.info("Notification scheduler stopped")

    def start(self) -> asyncio.Task:
        """Start polling in a background task. Calling again while running is a no-op."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Stop polling. A tick already in progress runs to completion."""
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None

    # -- One-shot registration --

    async def schedule_one_shot(self, schedule: Schedule) -> bool:
        """Ask the delivery layer to fire at the schedule's start.

        Only future, un-notified schedules are registered. Returns whether a
        request was made.
        """
        if schedule.notification_sent or schedule.start_datetime <= self._clock():
            return False
        await self._delivery.request_notification(
            one_shot_key(schedule.id),
            ONE_SHOT_TITLE,
            schedule.title,
            trigger_at=schedule.start_datetime,
        )
        return True

    async def cancel(self, schedule_id: str) -> None:
        """Withdraw pending deliveries for a schedule and forget it was notified."""
        await self._delivery.cancel_notification(one_shot_key(schedule_id))
        await self._delivery.cancel_notification(start_key(schedule_id))
        self._registry.discard_for(schedule_id)
        self._pending_marks.discard(schedule_id)

    def reset(self) -> None:
        """Forget every delivered notification in this process."""
        self._registry.clear()
