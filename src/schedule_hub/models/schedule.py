"""Schedule model, schedule type and source enums."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from schedule_hub.config import get_settings

# Schedules without an end time count as ongoing for this long after start
DEFAULT_ONGOING_DURATION = timedelta(hours=2)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def assume_local(value: datetime | None) -> datetime | None:
    """Attach the configured timezone to a naive datetime."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=get_settings().tzinfo)


def new_schedule_id() -> str:
    """Random identifier for manually created schedules."""
    return str(uuid4()).upper()


class ScheduleType(str, Enum):
    """What kind of entry a schedule is."""

    MEETING = "meeting"
    MENTION = "mention"
    TASK = "task"


class ScheduleSource(str, Enum):
    """Where a schedule came from."""

    MANUAL = "manual"
    SLACK = "slack"


class Schedule(BaseModel):
    """A titled, timed event created manually or synthesized from a Slack message.

    Slack-sourced schedules use the message ``ts`` as their id, so re-ingesting
    the same message always targets the same row.
    """

    id: str = Field(default_factory=new_schedule_id)
    title: str
    start_datetime: datetime
    end_datetime: datetime | None = None
    note: str = ""
    type: ScheduleType = ScheduleType.TASK
    source: ScheduleSource = ScheduleSource.MANUAL

    # Slack-only fields
    workspace_id: str | None = None
    channel_id: str | None = None
    channel_name: str | None = None
    source_message_id: str | None = None  # Slack message ts
    source_deep_link: str | None = None  # slack://channel?... link to the message
    source_raw_text: str | None = None  # Original text, kept for mentions
    workspace_color: str | None = None  # Hex copied from the workspace configuration

    location: str | None = None
    links: list[str] = []  # Deep link (if any) always first
    tag_id: str | None = None  # Weak reference; the tag may no longer exist
    notification_sent: bool = False
    is_done: bool = False
    created_at: datetime = Field(default_factory=_utc_now)

    @field_validator("start_datetime", "end_datetime", "created_at")
    @classmethod
    def _naive_is_local(cls, value: datetime | None) -> datetime | None:
        return assume_local(value)

    @property
    def is_from_workspace(self) -> bool:
        return self.source == ScheduleSource.SLACK

    @property
    def has_note(self) -> bool:
        return bool(self.note.strip())

    def is_upcoming(self, within_minutes: int = 5, now: datetime | None = None) -> bool:
        """True if the schedule starts within the next ``within_minutes``."""
        now = now or _utc_now()
        remaining = (self.start_datetime - now).total_seconds()
        return 0 < remaining <= within_minutes * 60

    def is_past(self, now: datetime | None = None) -> bool:
        now = now or _utc_now()
        return (self.end_datetime or self.start_datetime) < now

    def is_ongoing(
        self,
        now: datetime | None = None,
        duration: timedelta = DEFAULT_ONGOING_DURATION,
    ) -> bool:
        """True between start and end, or start + ``duration`` when no end is set."""
        now = now or _utc_now()
        effective_end = self.end_datetime or self.start_datetime + duration
        return self.start_datetime <= now <= effective_end
