"""Tests for the per-token Slack client cache."""

import pytest
from slack_sdk.web.async_client import AsyncWebClient

from schedule_hub.slack.client import REQUEST_TIMEOUT, get_slack_client, reset_clients


@pytest.fixture(autouse=True)
def _reset_cache():
    """Ensure a clean client cache for every test."""
    reset_clients()
    yield
    reset_clients()


def test_get_slack_client_creates_client():
    client = get_slack_client("xoxb-a")

    assert isinstance(client, AsyncWebClient)
    assert client.token == "xoxb-a"
    assert client.timeout == REQUEST_TIMEOUT


def test_same_token_returns_cached_client():
    assert get_slack_client("xoxb-a") is get_slack_client("xoxb-a")


def test_different_tokens_get_different_clients():
    assert get_slack_client("xoxb-a") is not get_slack_client("xoxb-b")


def test_reset_clients_clears_cache():
    first = get_slack_client("xoxb-a")
    reset_clients()
    assert get_slack_client("xoxb-a") is not first
