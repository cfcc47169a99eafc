"""
Request signing primitives for access-key authentication.
"""

import base64
import hashlib
import hmac
import time


def current_millis() -> str:
    """Current wall clock time in milliseconds, as sent in the Timestamp header."""
    return str(int(time.time() * 1000))


def canonical_string(namespace: str, group: str, timestamp: str) -> str:
    """Build the string that gets signed: namespace+group+timestamp."""
    if group:
        return f"{namespace}+{group}+{timestamp}"
    return f"{namespace}+{timestamp}"


def sign_sha1(text: str, secret: str) -> str:
    """
    HMAC-SHA1 sign a string.

    Args:
        text: Canonical string to sign
        secret: Access key secret

    Returns:
        Base64-encoded signature
    """
    digest = hmac.new(secret.encode('utf-8'), text.encode('utf-8'), hashlib.sha1).digest()
    return base64.b64encode(digest).decode('ascii')
