"""Data models and enums for the Schedule Hub pipeline."""

from schedule_hub.models.extracted import ExtractedFields
from schedule_hub.models.schedule import Schedule, ScheduleSource, ScheduleType
from schedule_hub.models.slack import SlackHistoryResponse, SlackMessage
from schedule_hub.models.tag import DEFAULT_MEETING_TAG, DEFAULT_MENTION_TAG, Tag
from schedule_hub.models.workspace import WorkspaceConfiguration

__all__ = [
    "DEFAULT_MEETING_TAG",
    "DEFAULT_MENTION_TAG",
    "ExtractedFields",
    "Schedule",
    "ScheduleSource",
    "ScheduleType",
    "SlackHistoryResponse",
    "SlackMessage",
    "Tag",
    "WorkspaceConfiguration",
]
