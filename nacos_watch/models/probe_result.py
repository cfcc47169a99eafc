"""
Probe result model.
"""

from enum import Enum


class ProbeResult(Enum):
    """Outcome of one long-poll probe."""

    CHANGED = 'changed'
    UNCHANGED = 'unchanged'

    @property
    def changed(self) -> bool:
        return self is ProbeResult.CHANGED
