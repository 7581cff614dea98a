"""Tag model and the two well-known tags seeded on first run."""

from uuid import uuid4

from pydantic import BaseModel, Field


class Tag(BaseModel):
    """A colored label a schedule can point at by id."""

    id: str = Field(default_factory=lambda: str(uuid4()).upper())
    name: str
    color: str  # Hex, e.g. "#FF0000"


# Default assignments for Slack-sourced schedules. Looked up by name.
DEFAULT_MEETING_TAG = Tag(name="회의", color="#007AFF")
DEFAULT_MENTION_TAG = Tag(name="언급됨", color="#FF9500")
