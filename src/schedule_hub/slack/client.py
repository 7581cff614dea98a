"""Async Slack clients, cached per token.

Each workspace configuration carries its own token, so clients are kept in a
dict keyed by token instead of a single module-level instance.
"""

from slack_sdk.web.async_client import AsyncWebClient

_clients: dict[str, AsyncWebClient] = {}

# Seconds; the only timeout applied to a workspace fetch
REQUEST_TIMEOUT = 30


def get_slack_client(token: str) -> AsyncWebClient:
    """Return a cached async Slack client for ``token``.

    Creates the client on first call for a token. Subsequent calls return
    the cached instance.
    """
    client = _clients.get(token)
    if client is None:
        client = AsyncWebClient(token=token, timeout=REQUEST_TIMEOUT)
        _clients[token] = client
    return client


def reset_clients() -> None:
    """Drop all cached clients. Used for testing."""
    _clients.clear()
