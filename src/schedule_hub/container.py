"""Explicit wiring of the long-lived service objects."""

import logging
from dataclasses import dataclass

from schedule_hub.config import Settings
from schedule_hub.ingestion.pipeline import SyncPipeline
from schedule_hub.notifications.delivery import LoggingDelivery, NotificationDelivery
from schedule_hub.notifications.scheduler import NotificationScheduler
from schedule_hub.service import ScheduleService
from schedule_hub.slack.notifier import SlackDMDelivery
from schedule_hub.store.database import ScheduleStore

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    settings: Settings
    store: ScheduleStore
    pipeline: SyncPipeline
    scheduler: NotificationScheduler
    service: ScheduleService


def build_delivery(settings: Settings) -> NotificationDelivery:
    """Slack DMs when a notify token and channel are configured, logging otherwise."""
    if settings.notify_slack_token and settings.notify_channel:
        return SlackDMDelivery(settings.notify_slack_token, settings.notify_channel)
    logger.info("No notify channel configured, notifications will only be logged")
    return LoggingDelivery()


def build_services(settings: Settings, delivery: NotificationDelivery | None = None) -> AppServices:
    """Open and initialize the store, then build everything that depends on it.

    Raises:
        StoreError(OPEN): the database cannot be opened.
    """
    store = ScheduleStore(settings.database_url)
    store.initialize()

    scheduler = NotificationScheduler(
        store,
        delivery or build_delivery(settings),
        interval_seconds=settings.scheduler_interval_seconds,
        advance_minutes=settings.advance_notice_minutes,
    )
    return AppServices(
        settings=settings,
        store=store,
        pipeline=SyncPipeline(store, settings),
        scheduler=scheduler,
        service=ScheduleService(store, scheduler),
    )
