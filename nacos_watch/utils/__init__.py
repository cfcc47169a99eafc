"""
Utils package - Shared utility functions.
"""

from nacos_watch.utils.fingerprint import fingerprint, has_changed
from nacos_watch.utils.logger import setup_logging
from nacos_watch.utils.signing import sign_sha1, current_millis

__all__ = [
    'fingerprint',
    'has_changed',
    'setup_logging',
    'sign_sha1',
    'current_millis',
]
