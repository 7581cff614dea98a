"""Typed failures of a single workspace fetch.

The ingestion pipeline catches these per workspace and keeps going, so each
kind is distinct enough to log and count separately.
"""


class WorkspaceSourceError(Exception):
    """Base class for errors fetching messages from one workspace."""

    kind = "source"


class TransportError(WorkspaceSourceError):
    """Network failure, timeout or non-200 HTTP response."""

    kind = "transport"


class ApiError(WorkspaceSourceError):
    """Slack answered with ``ok: false`` (bad token, missing scope, unknown channel...)."""

    kind = "api"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DecodeError(WorkspaceSourceError):
    """The response envelope could not be parsed."""

    kind = "decode"
