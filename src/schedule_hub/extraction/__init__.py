"""Schedule extraction from Korean meeting notices.

Public API:
    extract_schedule_fields(text, now=None) -> ExtractedFields | None
        Pure function: finds the [title], the 시간:/일시: phrase, 장소: and
        links. Returns None unless both title and start time resolve.
"""

from schedule_hub.extraction.links import extract_links
from schedule_hub.extraction.parser import extract_schedule_fields
from schedule_hub.extraction.rules import DATE_TIME_RULES, DateTimeRule, resolve_datetime

__all__ = [
    "DATE_TIME_RULES",
    "DateTimeRule",
    "extract_links",
    "extract_schedule_fields",
    "resolve_datetime",
]
