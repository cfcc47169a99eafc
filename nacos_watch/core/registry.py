"""
Endpoint Registry - Resolves which server base URL requests go to.

Two strategies exist: a single static endpoint, or a server list discovered
from an address server (ACM-style deployments). Both hand out one base URL at
a time and move on to the next server when a request fails at the transport
level.
"""

import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import List, Optional

import requests

from nacos_watch.exceptions import TransportError, ServerError
from nacos_watch.models.settings import ClientSettings


class EndpointResolver(ABC):
    """Hands out the base URL of the server requests should use."""

    @abstractmethod
    def current(self) -> str:
        """Base URL to send the next request to."""

    def rotate(self) -> None:
        """Move to the next server after a transport failure."""


class StaticEndpoint(EndpointResolver):
    """A single fixed server."""

    def __init__(self, endpoint: str):
        if not endpoint:
            raise ValueError('Endpoint must not be empty')
        self.endpoint = endpoint.rstrip('/')

    def current(self) -> str:
        return self.endpoint


class AddressServerEndpoint(EndpointResolver):
    """Server list fetched from an address server and used round-robin."""

    def __init__(
        self,
        address_server: str,
        http: Optional[requests.Session] = None,
        port: int = 8848,
        timeout: float = 10.0,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the resolver.

        Args:
            address_server: Full URL answering with one server per line
            http: HTTP session used for the lookup
            port: Port appended to servers listed without one
            timeout: Lookup timeout in seconds
            logger: Optional injected logger
        """
        self.address_server = address_server
        self.http = http or requests.Session()
        self.port = port
        self.timeout = timeout
        self.logger = logger or logging.getLogger('AddressServerEndpoint')
        self._lock = Lock()
        self._servers: List[str] = []
        self._index = 0

    def refresh(self) -> List[str]:
        """
        Re-read the server list from the address server.

        Raises:
            TransportError: If the address server cannot be reached
            ServerError: If it answers with an error or an empty list
        """
        self.logger.debug(f"Fetching server list from {self.address_server}")
        try:
            response = self.http.get(self.address_server, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Address server lookup failed: {e}") from e

        if response.status_code != 200:
            raise ServerError(
                f"Address server returned {response.status_code}",
                status_code=response.status_code,
                body=response.text
            )

        servers = [self._to_base_url(line) for line in response.text.splitlines() if line.strip()]
        if not servers:
            raise ServerError('Address server returned an empty server list', body=response.text)

        with self._lock:
            self._servers = servers
            self._index = 0
        self.logger.info(f"Resolved {len(servers)} servers from {self.address_server}")
        return servers

    def current(self) -> str:
        with self._lock:
            if self._servers:
                return self._servers[self._index]
        self.refresh()
        with self._lock:
            return self._servers[self._index]

    def rotate(self) -> None:
        with self._lock:
            if self._servers:
                self._index = (self._index + 1) % len(self._servers)

    def _to_base_url(self, line: str) -> str:
        server = line.strip()
        if server.startswith('http://') or server.startswith('https://'):
            return server.rstrip('/')
        if ':' not in server:
            server = f"{server}:{self.port}"
        return f"http://{server}"


def build_resolver(
    settings: ClientSettings,
    http: Optional[requests.Session] = None,
    logger: Optional[logging.Logger] = None
) -> EndpointResolver:
    """
    Pick the endpoint strategy the settings ask for.

    An address server wins over a static endpoint when both are configured.
    """
    if settings.address_server:
        return AddressServerEndpoint(
            settings.address_server,
            http=http,
            port=settings.server_port,
            timeout=settings.request_timeout,
            logger=logger
        )
    return StaticEndpoint(settings.endpoint)
