"""
Subscription model.
"""

from dataclasses import dataclass, field
from typing import Callable

from nacos_watch.utils.fingerprint import EMPTY_FINGERPRINT

ChangeCallback = Callable[[str], None]


@dataclass
class Subscription:
    """A standing registration of interest in one configuration entry."""

    namespace: str
    group: str
    data_id: str
    callback: ChangeCallback = field(repr=False)
    last_fingerprint: str = EMPTY_FINGERPRINT

    def log_context(self) -> dict:
        """Structured logging fields for this subscription."""
        return {
            'namespace': self.namespace,
            'group': self.group,
            'data_id': self.data_id,
            'fingerprint': self.last_fingerprint,
        }
