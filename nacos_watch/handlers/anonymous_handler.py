"""
Handler for servers running without authentication.
"""

from typing import Dict

from nacos_watch.models.auth import AuthMode

from .base_handler import BaseAuthHandler


class AnonymousAuthHandler(BaseAuthHandler):
    """Attaches nothing."""

    mode = AuthMode.NONE

    def apply(
        self,
        params: Dict[str, str],
        headers: Dict[str, str],
        namespace: str = '',
        group: str = ''
    ) -> None:
        return None
