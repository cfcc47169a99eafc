"""
Abstract base handler for all authentication modes.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

from nacos_watch.models.auth import AuthMode, Credentials


class BaseAuthHandler(ABC):
    """Attaches one mode's authentication material to outgoing requests."""

    mode: AuthMode

    def __init__(self, credentials: Credentials, logger: Optional[logging.Logger] = None):
        """
        Initialize handler with credential material.

        Args:
            credentials: Credentials for this mode
            logger: Optional injected logger
        """
        self.credentials = credentials
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.validate()

    def validate(self) -> None:
        """
        Check that the credentials this mode needs are present.

        Raises:
            CredentialsError: If required material is missing
        """

    @abstractmethod
    def apply(
        self,
        params: Dict[str, str],
        headers: Dict[str, str],
        namespace: str = '',
        group: str = ''
    ) -> None:
        """
        Add authentication material to a request in place.

        Args:
            params: Query or form fields of the request
            headers: HTTP headers of the request
            namespace: Namespace the request targets
            group: Group the request targets
        """

    def get_mode_name(self) -> str:
        return self.mode.value
