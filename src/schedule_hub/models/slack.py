"""Slack conversations.history envelope and message models."""

from pydantic import BaseModel


class SlackMessage(BaseModel):
    """A single message item from conversations.history (no raw payload kept)."""

    type: str
    user: str | None = None
    text: str = ""
    ts: str  # Slack message ts, e.g., "1234567890.123456"
    subtype: str | None = None  # bot_message, channel_join, message_changed, ...
    bot_id: str | None = None

    @property
    def is_user_message(self) -> bool:
        """Plain message authored by a person: no subtype, no bot, has a user."""
        return (
            self.type == "message"
            and self.user is not None
            and self.subtype is None
            and not self.bot_id
        )


class SlackHistoryResponse(BaseModel):
    """Response envelope: ``{ok, messages?, error?}``."""

    ok: bool
    messages: list[dict] | None = None  # Items validated one by one; malformed ones are skipped
    error: str | None = None
