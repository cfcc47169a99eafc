"""
Config Endpoint - Fetch and publish configuration entries.

Each call is a single round trip. Errors are raised to the caller and never
retried here; the watch scheduler decides what to do with them.
"""

import json
import logging
from typing import Dict, Optional

import requests

from nacos_watch.core.registry import EndpointResolver
from nacos_watch.core.session import Session
from nacos_watch.core.transport import base_headers, check_status, send
from nacos_watch.exceptions import DecodeError, ServerError, TransportError
from nacos_watch.models.auth import AuthMode
from nacos_watch.models.settings import DEFAULT_CONFIG_PATH
from nacos_watch.utils.signing import current_millis


class ConfigEndpoint:
    """Stateless request/response mapping for configuration entries."""

    def __init__(
        self,
        session: Session,
        resolver: EndpointResolver,
        http: Optional[requests.Session] = None,
        config_path: str = DEFAULT_CONFIG_PATH,
        timeout: float = 30.0,
        logger: Optional[logging.Logger] = None
    ):
        self.session = session
        self.resolver = resolver
        self.http = http or requests.Session()
        self.config_path = config_path
        self.timeout = timeout
        self.logger = logger or logging.getLogger('ConfigEndpoint')

    def fetch(self, namespace: str, group: str, data_id: str) -> str:
        """
        Fetch the content of one configuration entry.

        Args:
            namespace: Namespace (tenant) of the entry
            group: Group of the entry
            data_id: Entry id

        Returns:
            Entry content

        Raises:
            UnauthorizedError: Credentials were rejected
            NotFoundError: The entry does not exist
            ServerError: Any other non-200 status or non-zero response code
            TransportError: Network failure
            DecodeError: Response envelope could not be parsed
        """
        self.logger.debug(
            f"Fetching config {data_id}",
            extra={'namespace': namespace, 'group': group, 'data_id': data_id}
        )

        params = self._entry_fields(namespace, group, data_id)
        headers = self._headers()
        self.session.authorize(params, headers, namespace, group)

        body = self._call('GET', params=params, headers=headers, action=f"Fetch of {data_id}")

        # Signed deployments answer with the raw content
        if self.session.auth_mode is AuthMode.SIGNATURE:
            return body

        envelope = self._decode_envelope(body)
        if envelope.get('code') != 0:
            raise ServerError(
                f"Fetch of {data_id} rejected: {envelope.get('message')}",
                status_code=200,
                body=body
            )
        data = envelope.get('data')
        if data is None:
            return ''
        if not isinstance(data, str):
            raise DecodeError(f"Fetch of {data_id} returned non-text data", body=body)
        return data

    def publish(self, namespace: str, group: str, data_id: str, content: str) -> None:
        """
        Publish new content for a configuration entry.

        Raises:
            ServerError: Non-200 status or a non-affirmative acknowledgment
            TransportError: Network failure
        """
        self.logger.debug(
            f"Publishing config {data_id}",
            extra={'namespace': namespace, 'group': group, 'data_id': data_id}
        )

        data = self._entry_fields(namespace, group, data_id)
        data['content'] = content
        headers = self._headers()
        self.session.authorize(data, headers, namespace, group)

        body = self._call('POST', data=data, headers=headers, action=f"Publish of {data_id}")

        if not self._is_affirmative(body):
            raise ServerError(f"Publish of {data_id} rejected: {body}", status_code=200, body=body)

        self.logger.info(
            f"Published config {data_id}",
            extra={'namespace': namespace, 'group': group, 'data_id': data_id}
        )

    def _call(
        self,
        method: str,
        action: str,
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> str:
        url = f"{self.resolver.current()}{self.config_path}"
        try:
            response = send(
                self.http, method, url, self.timeout,
                params=params, data=data, headers=headers
            )
        except TransportError:
            self.resolver.rotate()
            raise
        return check_status(response, action)

    @staticmethod
    def _entry_fields(namespace: str, group: str, data_id: str) -> Dict[str, str]:
        return {
            'tenant': namespace,
            'namespaceId': namespace,
            'group': group,
            'dataId': data_id,
        }

    @staticmethod
    def _headers() -> Dict[str, str]:
        headers = base_headers()
        headers['Timestamp'] = current_millis()
        return headers

    @staticmethod
    def _decode_envelope(body: str) -> dict:
        try:
            envelope = json.loads(body)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Response is not valid JSON: {e}", body=body) from e
        if not isinstance(envelope, dict):
            raise DecodeError('Response is not a JSON object', body=body)
        return envelope

    @staticmethod
    def _is_affirmative(body: str) -> bool:
        """
        Accept either a plain ``true`` body or a JSON envelope with code 0.

        Anything else, including ``false``, counts as a rejection.
        """
        text = body.strip()
        if text.lower() in ('true', 'ok'):
            return True
        try:
            envelope = json.loads(text)
        except json.JSONDecodeError:
            return False
        if not isinstance(envelope, dict):
            return False
        return envelope.get('code') == 0 and envelope.get('data', True) is not False
