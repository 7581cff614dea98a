"""Slack workspace/channel configuration model."""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field


class WorkspaceConfiguration(BaseModel):
    """One Slack channel to pull schedules from, with its credentials and filters."""

    id: str = Field(default_factory=lambda: str(uuid4()).upper())
    name: str  # Workspace display name
    channel_id: str
    channel_name: str = ""
    token: str
    user_id: str | None = None  # Mentions of this user become mention schedules
    team_id: str | None = None  # Needed for team-qualified deep links
    keywords: list[str] = []  # Empty means every message is considered
    is_enabled: bool = True
    color: str = "#4A90E2"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def should_filter_by_keywords(self) -> bool:
        return bool(self.keywords)

    def matches_keywords(self, text: str) -> bool:
        """Case-insensitive substring match against any keyword. No keywords matches all."""
        if not self.should_filter_by_keywords:
            return True
        lowered = text.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)

    def mentions_user(self, text: str) -> bool:
        """True if the text contains a literal ``<@user_id>`` mention of the configured user."""
        if not self.user_id:
            return False
        return f"<@{self.user_id}>" in text
