"""Holocron exception hierarchy.

Provides a structured exception tree so catch blocks can be specific
and callers can distinguish between different failure modes.
"""

from __future__ import annotations


class HolocronError(Exception):
    """Base for all Holocron exceptions."""


class RemoteError(HolocronError):
    """A remote read failed.

    ``status`` is the HTTP status code when the server answered, or None
    when the request never produced a response.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class TransportError(RemoteError):
    """Non-2xx HTTP status or network failure."""


class MalformedResponseError(RemoteError):
    """Response body could not be decoded into the expected shape."""


class ConfigError(HolocronError):
    """Raised when configuration loading or validation fails."""
