"""
Long-Poll Subscription - Asks the server whether a watched entry changed.

The server holds the listener request for up to the advertised long-poll
timeout and answers early only when the entry's content no longer matches
the fingerprint we sent.
"""

import logging
from typing import Optional

import requests

from nacos_watch.core.registry import EndpointResolver
from nacos_watch.core.session import Session
from nacos_watch.core.transport import base_headers, check_status, send
from nacos_watch.exceptions import TransportError
from nacos_watch.models.auth import AuthMode
from nacos_watch.models.listen_request import ListenRequest, first_changed_data_id
from nacos_watch.models.probe_result import ProbeResult
from nacos_watch.models.settings import DEFAULT_LISTENER_PATH
from nacos_watch.models.subscription import Subscription
from nacos_watch.utils.signing import current_millis

TOKEN_LISTEN_FIELD = 'Listening-Configs'
PROBE_LISTEN_FIELD = 'Probe-Modify-Request'


class LongPollSubscription:
    """Issues held listener requests and decodes the answer."""

    def __init__(
        self,
        session: Session,
        resolver: EndpointResolver,
        http: Optional[requests.Session] = None,
        listener_path: str = DEFAULT_LISTENER_PATH,
        long_poll_timeout_ms: int = 3000,
        request_timeout: float = 30.0,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the subscription prober.

        Args:
            session: Shared authentication session
            resolver: Endpoint strategy
            http: HTTP session for the held requests
            listener_path: Path of the listener endpoint
            long_poll_timeout_ms: How long the server may hold the request
            request_timeout: Extra client-side read allowance on top of the hold
            logger: Optional injected logger
        """
        self.session = session
        self.resolver = resolver
        self.http = http or requests.Session()
        self.listener_path = listener_path
        self.long_poll_timeout_ms = long_poll_timeout_ms
        self.request_timeout = request_timeout
        self.logger = logger or logging.getLogger('LongPollSubscription')

    @property
    def listen_field(self) -> str:
        if self.session.auth_mode is AuthMode.TOKEN:
            return TOKEN_LISTEN_FIELD
        return PROBE_LISTEN_FIELD

    def probe(self, subscription: Subscription) -> ProbeResult:
        """
        Ask whether the subscribed entry changed since its last fingerprint.

        Args:
            subscription: Watched entry and its last known fingerprint

        Returns:
            ProbeResult.CHANGED if the server names this entry, else UNCHANGED

        Raises:
            ServerError: Non-200 status
            TransportError: Network failure
            AuthError: Token renewal failed
        """
        request = ListenRequest.from_subscription(subscription)
        data = {self.listen_field: request.encode()}
        headers = base_headers()
        headers['Long-Pulling-Timeout'] = str(self.long_poll_timeout_ms)
        headers['exConfigInfo'] = 'true'
        headers['Timestamp'] = current_millis()
        self.session.authorize(data, headers, subscription.namespace, subscription.group)

        url = f"{self.resolver.current()}{self.listener_path}"
        timeout = self.long_poll_timeout_ms / 1000.0 + self.request_timeout
        try:
            response = send(self.http, 'POST', url, timeout, data=data, headers=headers)
        except TransportError:
            self.resolver.rotate()
            raise
        body = check_status(response, f"Listen on {subscription.data_id}")

        return self.decode(subscription, body)

    def decode(self, subscription: Subscription, body: str) -> ProbeResult:
        """Map a listener response body to a probe result."""
        if not body.strip():
            # Hold expired with no change; the normal case
            self.logger.debug(
                f"No change for {subscription.data_id}",
                extra=subscription.log_context()
            )
            return ProbeResult.UNCHANGED

        changed_id = first_changed_data_id(body)
        if changed_id != subscription.data_id:
            self.logger.debug(
                f"Listener named {changed_id!r}, not {subscription.data_id!r}; ignoring",
                extra=subscription.log_context()
            )
            return ProbeResult.UNCHANGED

        return ProbeResult.CHANGED
