"""Schedule reminders delivered as Slack messages.

Implements the ``NotificationDelivery`` interface on top of chat.postMessage
(immediate), chat.scheduleMessage (one-shot at a given time) and
chat.deleteScheduledMessage (cancel).

All methods are fire-and-forget: they catch and log Slack errors but never
raise, so a failed reminder cannot crash a scheduler tick.
"""

import logging
from datetime import datetime, timezone

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from schedule_hub.slack.client import get_slack_client

logger = logging.getLogger(__name__)


class SlackDMDelivery:
    """Post reminders to one channel (usually the user's DM with the bot).

    Args:
        token: Bot token with chat:write.
        channel: Channel or user id to post to.
        client: Optional pre-built client (tests).
    """

    def __init__(self, token: str, channel: str, client: AsyncWebClient | None = None):
        self._client = client or get_slack_client(token)
        self._channel = channel
        # notification key -> scheduled_message_id, needed to cancel
        self._scheduled: dict[str, str] = {}

    async def request_notification(
        self,
        key: str,
        title: str,
        body: str,
        trigger_at: datetime | None = None,
    ) -> None:
        """Post now, or schedule for ``trigger_at`` (Slack only accepts future times)."""
        text = f"*{title}*\n{body}"
        try:
            if trigger_at is None or trigger_at <= datetime.now(timezone.utc):
                await self._client.chat_postMessage(channel=self._channel, text=text)
                return

            response = await self._client.chat_scheduleMessage(
                channel=self._channel,
                text=text,
                post_at=int(trigger_at.timestamp()),
            )
            scheduled_id = response.get("scheduled_message_id")
            if scheduled_id:
                self._scheduled[key] = scheduled_id
        except SlackApiError:
            logger.warning("Failed to deliver notification %s", key, exc_info=True)

    async def cancel_notification(self, key: str) -> None:
        """Delete a scheduled message created for ``key``, if any.

        Handles common non-error conditions gracefully:
        - invalid_scheduled_message_id: already posted or already deleted
        """
        scheduled_id = self._scheduled.pop(key, None)
        if scheduled_id is None:
            return
        try:
            await self._client.chat_deleteScheduledMessage(
                channel=self._channel,
                scheduled_message_id=scheduled_id,
            )
        except SlackApiError as exc:
            error_code = exc.response.get("error", "") if exc.response else ""
            if error_code == "invalid_scheduled_message_id":
                logger.warning("Scheduled message for %s already gone", key)
            else:
                logger.error(
                    "Failed to cancel scheduled message for %s: %s",
                    key,
                    error_code,
                    exc_info=True,
                )
