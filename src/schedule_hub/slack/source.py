"""Fetch recent channel messages for one workspace configuration."""

import asyncio
import logging
from datetime import datetime

import aiohttp
from pydantic import ValidationError
from slack_sdk.errors import SlackApiError, SlackRequestError
from slack_sdk.web.async_client import AsyncWebClient

from schedule_hub.models.slack import SlackHistoryResponse, SlackMessage
from schedule_hub.models.workspace import WorkspaceConfiguration
from schedule_hub.slack.client import get_slack_client
from schedule_hub.slack.errors import ApiError, DecodeError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100

_TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError, SlackRequestError)


async def fetch_messages(
    config: WorkspaceConfiguration,
    oldest: datetime,
    limit: int = DEFAULT_HISTORY_LIMIT,
    client: AsyncWebClient | None = None,
) -> list[SlackMessage]:
    """Return user-authored messages posted in the configured channel since ``oldest``.

    Bot messages, edits, joins and any item that fails validation are dropped.

    Raises:
        TransportError: network failure, timeout or non-200 response.
        ApiError: Slack returned ``ok: false``.
        DecodeError: the response envelope is not the expected shape.
    """
    client = client or get_slack_client(config.token)
    cutoff = oldest.timestamp()

    try:
        response = await client.conversations_history(
            channel=config.channel_id,
            limit=limit,
            oldest=f"{cutoff:.6f}",
        )
    except SlackApiError as exc:
        raise _classify_api_error(exc) from exc
    except _TRANSPORT_ERRORS as exc:
        raise TransportError(f"conversations.history failed for {config.name}: {exc}") from exc

    try:
        envelope = SlackHistoryResponse.model_validate(response.data)
    except ValidationError as exc:
        raise DecodeError(f"Unexpected conversations.history envelope: {exc}") from exc

    if not envelope.ok:
        raise ApiError(envelope.error or "unknown_error")

    messages: list[SlackMessage] = []
    for item in envelope.messages or []:
        try:
            message = SlackMessage.model_validate(item)
        except ValidationError:
            logger.debug("Skipping malformed message item in %s", config.channel_id)
            continue
        if not message.is_user_message:
            continue
        if _ts_seconds(message.ts) < cutoff:
            continue
        messages.append(message)

    logger.info(
        "Fetched %d user message(s) from %s (#%s)",
        len(messages),
        config.name,
        config.channel_name or config.channel_id,
    )
    return messages


def _classify_api_error(exc: SlackApiError) -> Exception:
    """Map a SlackApiError to ApiError, or to Transport/DecodeError when Slack gave no error code.

    slack_sdk raises SlackApiError for ``ok: false`` bodies, for non-200
    statuses and for bodies that are not JSON at all.
    """
    response = exc.response
    error_code = None
    if response is not None and hasattr(response, "get"):
        error_code = response.get("error")
    if error_code:
        return ApiError(error_code)

    status = getattr(response, "status_code", None)
    if status is not None and status != 200:
        return TransportError(f"HTTP {status} from Slack")
    return DecodeError(str(exc))


def _ts_seconds(ts: str) -> float:
    try:
        return float(ts)
    except ValueError:
        return 0.0
