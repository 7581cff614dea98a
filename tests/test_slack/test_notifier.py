"""Tests for Slack reminder delivery.

SlackDMDelivery must be fire-and-forget: it catches SlackApiError and logs,
never allowing a delivery failure to propagate into the scheduler.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from slack_sdk.errors import SlackApiError

from schedule_hub.notifications.delivery import NotificationDelivery
from schedule_hub.slack.notifier import SlackDMDelivery

CHANNEL = "D0AFQJHAVS6"


def _make_slack_api_error(error_code: str) -> SlackApiError:
    """Build a SlackApiError with a mock response carrying the given error code."""
    resp = MagicMock()
    resp.get = MagicMock(
        side_effect=lambda key, default="": error_code if key == "error" else default,
    )
    resp.__getitem__ = MagicMock(
        side_effect=lambda key: error_code if key == "error" else None,
    )
    return SlackApiError(message=f"slack error: {error_code}", response=resp)


@pytest.fixture()
def mock_client() -> AsyncMock:
    client = AsyncMock()
    client.chat_scheduleMessage.return_value = {"ok": True, "scheduled_message_id": "Q123"}
    return client


@pytest.fixture()
def delivery(mock_client: AsyncMock) -> SlackDMDelivery:
    return SlackDMDelivery("xoxb-notify", CHANNEL, client=mock_client)


def test_implements_delivery_protocol(delivery: SlackDMDelivery):
    assert isinstance(delivery, NotificationDelivery)


# -- request_notification --


async def test_immediate_notification_posts_message(delivery, mock_client: AsyncMock):
    await delivery.request_notification("meeting-start-1", "회의 시작!", "Standup")

    mock_client.chat_postMessage.assert_called_once()
    call_kwargs = mock_client.chat_postMessage.call_args.kwargs
    assert call_kwargs["channel"] == CHANNEL
    assert "회의 시작!" in call_kwargs["text"]
    assert "Standup" in call_kwargs["text"]
    mock_client.chat_scheduleMessage.assert_not_called()


async def test_past_trigger_posts_immediately(delivery, mock_client: AsyncMock):
    past = datetime.now(timezone.utc) - timedelta(minutes=1)

    await delivery.request_notification("scheduled-1", "회의 시작", "Standup", trigger_at=past)

    mock_client.chat_postMessage.assert_called_once()
    mock_client.chat_scheduleMessage.assert_not_called()


async def test_future_trigger_schedules_message(delivery, mock_client: AsyncMock):
    future = datetime.now(timezone.utc) + timedelta(hours=1)

    await delivery.request_notification("scheduled-1", "회의 시작", "Standup", trigger_at=future)

    call_kwargs = mock_client.chat_scheduleMessage.call_args.kwargs
    assert call_kwargs["channel"] == CHANNEL
    assert call_kwargs["post_at"] == int(future.timestamp())
    mock_client.chat_postMessage.assert_not_called()


async def test_request_swallows_slack_error(delivery, mock_client: AsyncMock):
    mock_client.chat_postMessage.side_effect = _make_slack_api_error("not_in_channel")

    # Must not raise
    await delivery.request_notification("meeting-start-1", "회의 시작!", "Standup")


# -- cancel_notification --


async def test_cancel_deletes_scheduled_message(delivery, mock_client: AsyncMock):
    future = datetime.now(timezone.utc) + timedelta(hours=1)
    await delivery.request_notification("scheduled-1", "회의 시작", "Standup", trigger_at=future)

    await delivery.cancel_notification("scheduled-1")

    mock_client.chat_deleteScheduledMessage.assert_called_once_with(
        channel=CHANNEL, scheduled_message_id="Q123"
    )


async def test_cancel_unknown_key_is_noop(delivery, mock_client: AsyncMock):
    await delivery.cancel_notification("scheduled-unknown")

    mock_client.chat_deleteScheduledMessage.assert_not_called()


async def test_cancel_already_gone_is_swallowed(delivery, mock_client: AsyncMock):
    future = datetime.now(timezone.utc) + timedelta(hours=1)
    await delivery.request_notification("scheduled-1", "회의 시작", "Standup", trigger_at=future)
    mock_client.chat_deleteScheduledMessage.side_effect = _make_slack_api_error(
        "invalid_scheduled_message_id"
    )

    # Must not raise
    await delivery.cancel_notification("scheduled-1")


async def test_cancel_other_error_is_swallowed(delivery, mock_client: AsyncMock):
    future = datetime.now(timezone.utc) + timedelta(hours=1)
    await delivery.request_notification("scheduled-1", "회의 시작", "Standup", trigger_at=future)
    mock_client.chat_deleteScheduledMessage.side_effect = _make_slack_api_error("ratelimited")

    # Must not raise
    await delivery.cancel_notification("scheduled-1")
