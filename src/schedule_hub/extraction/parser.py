"""Korean meeting-notice parsing: title, time phrase, location and links."""

import re
from datetime import datetime, tzinfo

from schedule_hub.config import get_settings
from schedule_hub.extraction.links import extract_links
from schedule_hub.extraction.rules import resolve_datetime
from schedule_hub.models.extracted import ExtractedFields

TITLE_PATTERN = re.compile(r"\[([^\]]+)\]")
TIME_PATTERN = re.compile(r"(?:시간|일시):[ \t]*([^\n]+)")
LOCATION_PATTERN = re.compile(r"장소:[ \t]*([^\n]+)")

# Slack mrkdwn emphasis that often wraps notice titles, e.g. *[주간 회의]*
_EMPHASIS_MARKERS = ("*", "_")
_RANGE_SEPARATOR = "~"


def extract_title(text: str) -> str | None:
    """Return the first ``[...]`` segment with emphasis markers removed."""
    found = TITLE_PATTERN.search(text)
    if found is None:
        return None
    title = found.group(1)
    for marker in _EMPHASIS_MARKERS:
        title = title.replace(marker, "")
    title = title.strip()
    return title or None


def extract_time_phrase(text: str) -> str | None:
    """Return the text after ``시간:`` or ``일시:`` up to the end of that line."""
    found = TIME_PATTERN.search(text)
    if found is None:
        return None
    phrase = found.group(1).strip()
    return phrase or None


def extract_location(text: str) -> str | None:
    """Return the text after ``장소:`` up to the end of that line."""
    found = LOCATION_PATTERN.search(text)
    if found is None:
        return None
    location = found.group(1).strip()
    return location or None


def parse_time_phrase(
    phrase: str, now: datetime
) -> tuple[datetime, datetime | None] | None:
    """Resolve a time phrase to (start, end).

    ``오후 2시 ~ 오후 4시`` and ``14:00~15:00`` give both ends. The end is
    resolved against the start's date and dropped if it is not after the start.
    """
    start_part, _, end_part = phrase.partition(_RANGE_SEPARATOR)
    start = resolve_datetime(start_part, now)
    if start is None:
        return None

    end = None
    if end_part.strip():
        end = resolve_datetime(end_part, now, base=start)
        if end is not None and end <= start:
            end = None
    return start, end


def extract_schedule_fields(
    text: str, now: datetime | None = None, tz: tzinfo | None = None
) -> ExtractedFields | None:
    """Parse a free-form notice into structured fields.

    Returns None unless both a ``[title]`` and a resolvable time phrase are
    present. Location and links are optional.

    Args:
        text: Raw message text.
        now: Reference time; wall-clock values are read in its timezone.
            Defaults to the current time in ``Settings.timezone``.
        tz: Timezone to read wall-clock values in, overriding ``now``'s.
    """
    title = extract_title(text)
    if title is None:
        return None

    phrase = extract_time_phrase(text)
    if phrase is None:
        return None

    if now is None:
        now = datetime.now(tz or get_settings().tzinfo)
    elif tz is not None:
        now = now.astimezone(tz)

    resolved = parse_time_phrase(phrase, now)
    if resolved is None:
        return None
    start, end = resolved

    return ExtractedFields(
        title=title,
        start_datetime=start,
        end_datetime=end,
        location=extract_location(text),
        links=extract_links(text),
    )
