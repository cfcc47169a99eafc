"""
Access-key signature authentication handler.
Every request is signed on its own; no token is stored.
"""

from typing import Dict

from nacos_watch.exceptions import CredentialsError
from nacos_watch.models.auth import AuthMode
from nacos_watch.utils.signing import canonical_string, current_millis, sign_sha1

from .base_handler import BaseAuthHandler


class SignatureAuthHandler(BaseAuthHandler):
    """Handler that adds Spas-AccessKey / Spas-Signature headers."""

    mode = AuthMode.SIGNATURE

    def validate(self) -> None:
        if not self.credentials.access_key_id or not self.credentials.access_key_secret:
            raise CredentialsError('Signature auth requires an access key id and secret')

    def sign(self, namespace: str, group: str, timestamp: str) -> str:
        """
        Sign the canonical string for a request.

        Args:
            namespace: Target namespace
            group: Target group
            timestamp: Millisecond timestamp sent in the Timestamp header

        Returns:
            Base64 HMAC-SHA1 signature
        """
        return sign_sha1(
            canonical_string(namespace, group, timestamp),
            self.credentials.access_key_secret
        )

    def apply(
        self,
        params: Dict[str, str],
        headers: Dict[str, str],
        namespace: str = '',
        group: str = ''
    ) -> None:
        timestamp = headers.setdefault('Timestamp', current_millis())
        headers['Spas-AccessKey'] = self.credentials.access_key_id
        headers['Spas-Signature'] = self.sign(namespace, group, timestamp)
