"""Turn one Slack message into a schedule, or decide to drop it."""

import logging
from datetime import datetime

from schedule_hub.extraction import extract_links, extract_schedule_fields
from schedule_hub.models.schedule import Schedule, ScheduleSource, ScheduleType
from schedule_hub.models.slack import SlackMessage
from schedule_hub.models.workspace import WorkspaceConfiguration

logger = logging.getLogger(__name__)

MENTION_TITLE_FALLBACK = "Slack"


def build_deep_link(config: WorkspaceConfiguration, ts: str) -> str:
    """Return the ``slack://`` link that opens the message in the desktop app.

    The ``team`` parameter is omitted when the configuration has no team id.
    """
    params = []
    if config.team_id:
        params.append(f"team={config.team_id}")
    params.append(f"id={config.channel_id}")
    params.append(f"message={ts}")
    return "slack://channel?" + "&".join(params)


def convert_message(
    message: SlackMessage,
    config: WorkspaceConfiguration,
    now: datetime,
    meeting_tag_id: str | None = None,
    mention_tag_id: str | None = None,
) -> Schedule | None:
    """Apply the per-message rules in order.

    1. Mentions the configured user -> mention schedule starting ``now``
    2. Fails the keyword filter -> drop
    3. Parses as a meeting notice -> meeting schedule
    4. Anything else -> drop

    The schedule id is the message ``ts`` so re-ingesting the same message
    targets the same row.
    """
    text = message.text
    deep_link = build_deep_link(config, message.ts)
    common = {
        "id": message.ts,
        "source": ScheduleSource.SLACK,
        "workspace_id": config.id,
        "channel_id": config.channel_id,
        "channel_name": config.channel_name or None,
        "source_message_id": message.ts,
        "source_deep_link": deep_link,
        "workspace_color": config.color,
    }

    # Rule 1: Mentions win over keywords and parsing
    if config.mentions_user(text):
        channel = config.channel_name or MENTION_TITLE_FALLBACK
        return Schedule(
            title=f"Mentioned in {channel}",
            start_datetime=now,
            type=ScheduleType.MENTION,
            source_raw_text=text,
            links=[deep_link] + [link for link in extract_links(text) if link != deep_link],
            tag_id=mention_tag_id,
            **common,
        )

    # Rule 2: Keyword filter
    if not config.matches_keywords(text):
        return None

    # Rule 3: Meeting notice
    fields = extract_schedule_fields(text, now=now)
    if fields is None:
        logger.debug("Message %s in %s is not a meeting notice", message.ts, config.name)
        return None

    links = [deep_link] + [link for link in fields.links if link != deep_link]
    return Schedule(
        title=fields.title,
        start_datetime=fields.start_datetime,
        end_datetime=fields.end_datetime,
        type=ScheduleType.MEETING,
        location=fields.location,
        links=links,
        tag_id=meeting_tag_id,
        **common,
    )
