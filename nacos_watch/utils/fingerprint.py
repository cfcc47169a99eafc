"""
Content fingerprints used to detect configuration changes.
"""

import hashlib

EMPTY_FINGERPRINT = ''


def fingerprint(content: str) -> str:
    """
    Compute the fingerprint of configuration content.

    Args:
        content: Raw configuration content

    Returns:
        Lowercase hex MD5 digest (32 characters)
    """
    return hashlib.md5(content.encode('utf-8')).hexdigest()


def has_changed(old: str, new: str) -> bool:
    """
    Compare a stored fingerprint with a freshly computed one.

    An empty stored fingerprint means nothing was observed yet, so any
    non-empty new fingerprint counts as a change.
    """
    return old != new
