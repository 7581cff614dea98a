"""Reminders for schedules that are about to start."""

from schedule_hub.notifications.delivery import (
    LoggingDelivery,
    NotificationDelivery,
    ScheduleStartListener,
)
from schedule_hub.notifications.registry import NotifiedRegistry
from schedule_hub.notifications.scheduler import NotificationScheduler

__all__ = [
    "LoggingDelivery",
    "NotificationDelivery",
    "NotificationScheduler",
    "NotifiedRegistry",
    "ScheduleStartListener",
]
