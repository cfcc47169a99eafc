"""
ConfigClient - Main entry point for fetching, publishing and watching config.
"""

import logging
from threading import Lock
from typing import Callable, List, Optional

import requests

from nacos_watch.core.config_endpoint import ConfigEndpoint
from nacos_watch.core.listener import LongPollSubscription
from nacos_watch.core.registry import EndpointResolver, build_resolver
from nacos_watch.core.session import Session
from nacos_watch.core.settings import load_settings
from nacos_watch.core.watcher import WatchHandle, WatchScheduler
from nacos_watch.models.settings import ClientSettings
from nacos_watch.models.subscription import ChangeCallback, Subscription


class ConfigClient:
    """One client per server and auth mode; shares a single Session across watches."""

    def __init__(
        self,
        settings: ClientSettings,
        http: Optional[requests.Session] = None,
        transport_factory: Callable[[], requests.Session] = requests.Session,
        resolver: Optional[EndpointResolver] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the client.

        Args:
            settings: Endpoint, auth mode, credentials and timing
            http: HTTP session for login, fetch and publish
            transport_factory: Builds the dedicated HTTP session of each watch
            resolver: Endpoint strategy; built from settings when omitted
            logger: Logger injected into every component

        Raises:
            CredentialsError: If the auth mode's credentials are missing
        """
        self.settings = settings
        self.http = http or requests.Session()
        self.transport_factory = transport_factory
        self.logger = logger or logging.getLogger('ConfigClient')
        self._component_logger = logger
        self.resolver = resolver or build_resolver(settings, http=self.http, logger=logger)

        self.session = Session(
            self.resolver,
            auth_mode=settings.auth_mode,
            credentials=settings.credentials,
            http=self.http,
            login_path=settings.login_path,
            timeout=settings.request_timeout,
            safety_margin=settings.token_safety_margin,
            logger=logger
        )
        self.endpoint = ConfigEndpoint(
            self.session,
            self.resolver,
            http=self.http,
            config_path=settings.config_path,
            timeout=settings.request_timeout,
            logger=logger
        )

        self._watches: List[WatchHandle] = []
        self._lock = Lock()

    @classmethod
    def from_settings_file(cls, path: Optional[str] = None, **kwargs) -> 'ConfigClient':
        """Build a client from settings.yaml plus environment credentials."""
        return cls(load_settings(path), **kwargs)

    def get(self, namespace: str, group: str, data_id: str) -> str:
        """Fetch one entry's content. Errors propagate to the caller."""
        return self.endpoint.fetch(namespace, group, data_id)

    def publish(self, namespace: str, group: str, data_id: str, content: str) -> None:
        """Publish content for one entry. Errors propagate to the caller."""
        self.endpoint.publish(namespace, group, data_id, content)

    def watch(
        self,
        namespace: str,
        group: str,
        data_id: str,
        callback: ChangeCallback
    ) -> WatchHandle:
        """
        Register a watch and start its background loop.

        The current content is fetched synchronously first; the callback is
        only invoked for changes after that.

        Args:
            namespace: Namespace of the entry
            group: Group of the entry
            data_id: Entry id
            callback: Called with the new content once per detected change

        Returns:
            Handle that can stop the watch

        Raises:
            NacosWatchError: If the initial fetch fails; nothing is started
        """
        subscription = Subscription(namespace, group, data_id, callback)
        listener = LongPollSubscription(
            self.session,
            self.resolver,
            http=self.transport_factory(),
            listener_path=self.settings.listener_path,
            long_poll_timeout_ms=self.settings.long_poll_timeout_ms,
            request_timeout=self.settings.request_timeout,
            logger=self._component_logger
        )
        scheduler = WatchScheduler(
            subscription,
            self.endpoint,
            listener,
            self.session,
            poll_interval=self.settings.poll_interval,
            logger=self._component_logger
        )

        try:
            scheduler.initialize()
        except Exception:
            listener.http.close()
            raise
        scheduler.start()

        handle = WatchHandle(scheduler)
        with self._lock:
            self._watches.append(handle)
        return handle

    @property
    def watches(self) -> List[WatchHandle]:
        with self._lock:
            return list(self._watches)

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop every watch this client started and release its HTTP session."""
        with self._lock:
            watches, self._watches = self._watches, []
        for handle in watches:
            handle.cancel()
        for handle in watches:
            handle.stop(timeout)
        self.http.close()
        self.logger.debug(f"Closed client, stopped {len(watches)} watches")

    def __enter__(self) -> 'ConfigClient':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def fetch_config(
    namespace: str,
    group: str,
    data_id: str,
    settings_path: Optional[str] = None
) -> str:
    """
    Convenience function to fetch a single entry using settings.yaml.

    Args:
        namespace: Namespace of the entry
        group: Group of the entry
        data_id: Entry id
        settings_path: Optional settings file path

    Returns:
        Entry content
    """
    with ConfigClient.from_settings_file(settings_path) as client:
        return client.get(namespace, group, data_id)
