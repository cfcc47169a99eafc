"""
Exception hierarchy for the configuration client.

Steady-state watch loops catch NacosWatchError and keep running; direct
get/publish calls and watch registration let these propagate to the caller.
"""

from typing import Optional


class NacosWatchError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthError(NacosWatchError):
    """Login or request signing failed."""


class CredentialsError(AuthError):
    """The selected authentication mode is missing credential material."""


class TransportError(NacosWatchError):
    """Network or IO failure talking to the server."""


class ServerError(NacosWatchError):
    """Non-200 status or non-affirmative application response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class UnauthorizedError(ServerError):
    """Server rejected the request credentials (401/403)."""


class NotFoundError(ServerError):
    """Requested configuration entry does not exist (404)."""


class DecodeError(NacosWatchError):
    """Response body could not be decoded."""

    def __init__(self, message: str, body: Optional[str] = None):
        self.body = body
        super().__init__(message)


class SettingsError(NacosWatchError):
    """Settings file could not be read or parsed."""
