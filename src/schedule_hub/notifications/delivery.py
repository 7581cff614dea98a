"""Interfaces the scheduler talks to: notification delivery and start listeners.

Rendering a notification is outside this package. The scheduler only decides
when and what to request; an implementation of ``NotificationDelivery`` puts it
on screen (or in Slack, or in a log).
"""

import logging
from datetime import datetime
from typing import Protocol, runtime_checkable

from schedule_hub.models.schedule import Schedule

logger = logging.getLogger(__name__)


@runtime_checkable
class NotificationDelivery(Protocol):
    """External capability that shows (or schedules) a notification."""

    async def request_notification(
        self,
        key: str,
        title: str,
        body: str,
        trigger_at: datetime | None = None,
    ) -> None:
        """Show now when ``trigger_at`` is None, otherwise schedule for that instant."""
        ...

    async def cancel_notification(self, key: str) -> None:
        """Withdraw a pending scheduled notification. Unknown keys are ignored."""
        ...


@runtime_checkable
class ScheduleStartListener(Protocol):
    """Implemented by the presentation layer to open a schedule's note window on start."""

    async def on_schedule_start(self, schedule: Schedule) -> None: ...


class LoggingDelivery:
    """Delivery that only logs. Default when no Slack notify channel is configured."""

    async def request_notification(
        self,
        key: str,
        title: str,
        body: str,
        trigger_at: datetime | None = None,
    ) -> None:
        if trigger_at is None:
            logger.info("Notification %s: %s - %s", key, title, body)
        else:
            logger.info(
                "Notification %s scheduled for %s: %s - %s",
                key,
                trigger_at.isoformat(),
                title,
                body,
            )

    async def cancel_notification(self, key: str) -> None:
        logger.info("Notification %s cancelled", key)
