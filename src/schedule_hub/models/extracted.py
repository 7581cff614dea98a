"""Fields extracted from a free-form meeting notice."""

from datetime import datetime

from pydantic import BaseModel


class ExtractedFields(BaseModel):
    """Structured result of parsing one message. Title and start are always present."""

    title: str
    start_datetime: datetime
    end_datetime: datetime | None = None
    location: str | None = None
    links: list[str] = []  # URLs found in the text, in order of appearance
