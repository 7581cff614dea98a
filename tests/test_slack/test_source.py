"""Tests for fetching channel history and classifying fetch failures."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from slack_sdk.errors import SlackApiError

from schedule_hub.models.workspace import WorkspaceConfiguration
from schedule_hub.slack.errors import ApiError, DecodeError, TransportError
from schedule_hub.slack.source import fetch_messages

OLDEST = datetime(2025, 11, 5, 0, 0, tzinfo=timezone.utc)
CUTOFF = OLDEST.timestamp()


def _ts(offset_seconds: float) -> str:
    return f"{CUTOFF + offset_seconds:.6f}"


def _response(data) -> MagicMock:
    response = MagicMock()
    response.data = data
    return response


def _slack_api_error(error_code: str | None, status_code: int = 200) -> SlackApiError:
    """Build a SlackApiError whose response carries the given error code and status."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.get = MagicMock(
        side_effect=lambda key, default=None: error_code if key == "error" else default,
    )
    return SlackApiError(message=f"slack error: {error_code}", response=resp)


@pytest.fixture()
def config() -> WorkspaceConfiguration:
    return WorkspaceConfiguration(
        name="Acme", channel_id="C123", channel_name="general", token="xoxb-test"
    )


@pytest.fixture()
def mock_client() -> AsyncMock:
    return AsyncMock()


# -- success path --


async def test_fetch_passes_channel_limit_and_oldest(config, mock_client: AsyncMock):
    mock_client.conversations_history.return_value = _response({"ok": True, "messages": []})

    await fetch_messages(config, OLDEST, limit=100, client=mock_client)

    mock_client.conversations_history.assert_called_once_with(
        channel="C123", limit=100, oldest=f"{CUTOFF:.6f}"
    )


async def test_fetch_keeps_only_user_messages(config, mock_client: AsyncMock):
    mock_client.conversations_history.return_value = _response(
        {
            "ok": True,
            "messages": [
                {"type": "message", "user": "U1", "text": "[회의]", "ts": _ts(10)},
                {"type": "message", "bot_id": "B1", "text": "bot", "ts": _ts(20)},
                {"type": "message", "subtype": "channel_join", "user": "U2", "ts": _ts(30)},
                {"type": "message", "text": "no user", "ts": _ts(40)},
                {"type": "message", "user": "U3", "text": "too old", "ts": _ts(-10)},
                {"type": "message", "user": "U4", "text": "no ts"},
            ],
        }
    )

    messages = await fetch_messages(config, OLDEST, client=mock_client)

    assert [m.user for m in messages] == ["U1"]
    assert messages[0].text == "[회의]"


async def test_fetch_missing_messages_is_empty(config, mock_client: AsyncMock):
    mock_client.conversations_history.return_value = _response({"ok": True})

    assert await fetch_messages(config, OLDEST, client=mock_client) == []


# -- failures --


async def test_ok_false_body_raises_api_error(config, mock_client: AsyncMock):
    mock_client.conversations_history.return_value = _response(
        {"ok": False, "error": "invalid_auth"}
    )

    with pytest.raises(ApiError) as exc_info:
        await fetch_messages(config, OLDEST, client=mock_client)
    assert exc_info.value.message == "invalid_auth"
    assert exc_info.value.kind == "api"


async def test_slack_api_error_with_code_is_api_error(config, mock_client: AsyncMock):
    mock_client.conversations_history.side_effect = _slack_api_error("channel_not_found")

    with pytest.raises(ApiError) as exc_info:
        await fetch_messages(config, OLDEST, client=mock_client)
    assert exc_info.value.message == "channel_not_found"


async def test_non_200_without_code_is_transport_error(config, mock_client: AsyncMock):
    mock_client.conversations_history.side_effect = _slack_api_error(None, status_code=502)

    with pytest.raises(TransportError):
        await fetch_messages(config, OLDEST, client=mock_client)


async def test_unparseable_body_is_decode_error(config, mock_client: AsyncMock):
    mock_client.conversations_history.side_effect = _slack_api_error(None, status_code=200)

    with pytest.raises(DecodeError):
        await fetch_messages(config, OLDEST, client=mock_client)


@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
)
async def test_network_failures_are_transport_errors(config, mock_client: AsyncMock, error):
    mock_client.conversations_history.side_effect = error

    with pytest.raises(TransportError) as exc_info:
        await fetch_messages(config, OLDEST, client=mock_client)
    assert exc_info.value.kind == "transport"


async def test_envelope_without_ok_is_decode_error(config, mock_client: AsyncMock):
    mock_client.conversations_history.return_value = _response({"messages": []})

    with pytest.raises(DecodeError):
        await fetch_messages(config, OLDEST, client=mock_client)
