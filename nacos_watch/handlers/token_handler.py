"""
Bearer token authentication handler.
Exchanges username/password for an access token sent as a request field.
"""

from typing import Callable, Dict, Optional
import logging

from nacos_watch.exceptions import CredentialsError
from nacos_watch.models.auth import AuthMode, Credentials

from .base_handler import BaseAuthHandler


class TokenAuthHandler(BaseAuthHandler):
    """Handler that attaches the session's current access token."""

    mode = AuthMode.TOKEN

    def __init__(
        self,
        credentials: Credentials,
        token_provider: Callable[[], str],
        logger: Optional[logging.Logger] = None
    ):
        self.token_provider = token_provider
        super().__init__(credentials, logger)

    def validate(self) -> None:
        if not self.credentials.username or not self.credentials.password:
            raise CredentialsError('Token auth requires a username and password')

    def apply(
        self,
        params: Dict[str, str],
        headers: Dict[str, str],
        namespace: str = '',
        group: str = ''
    ) -> None:
        params['accessToken'] = self.token_provider()
