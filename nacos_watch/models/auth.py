"""
Authentication models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AuthMode(Enum):
    """Authentication modes, mutually exclusive per client."""

    NONE = 'none'
    TOKEN = 'token'
    SIGNATURE = 'signature'

    @classmethod
    def from_value(cls, value) -> 'AuthMode':
        """Parse a mode from settings, accepting the enum itself or its name/value."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.NONE
        text = str(value).strip().lower()
        for mode in cls:
            if text in (mode.value, mode.name.lower()):
                return mode
        raise ValueError(f"Unknown auth mode: {value}")


@dataclass
class Credentials:
    """Credential material; which fields matter depends on the auth mode."""

    username: Optional[str] = None
    password: Optional[str] = None
    access_key_id: Optional[str] = None
    access_key_secret: Optional[str] = None

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks
        return (
            f"Credentials(username={self.username!r}, "
            f"access_key_id={self.access_key_id!r})"
        )


@dataclass
class LoginResponse:
    """Payload returned by the login endpoint."""

    access_token: str
    token_ttl: int
    global_admin: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'LoginResponse':
        return cls(
            access_token=data['accessToken'],
            token_ttl=int(data['tokenTtl']),
            global_admin=bool(data.get('globalAdmin', False)),
        )
