"""
nacos-watch - Configuration client with long-poll change watching

Fetches and publishes configuration entries and keeps subscribed entries up
to date in the background, calling back once per detected change.
"""

from nacos_watch.core.client import ConfigClient, fetch_config
from nacos_watch.core.settings import load_settings
from nacos_watch.core.watcher import WatchHandle
from nacos_watch.exceptions import (
    NacosWatchError,
    AuthError,
    CredentialsError,
    TransportError,
    ServerError,
    UnauthorizedError,
    NotFoundError,
    DecodeError,
    SettingsError,
)
from nacos_watch.models.auth import AuthMode, Credentials
from nacos_watch.models.settings import ClientSettings

__version__ = "1.0.0"
__all__ = [
    'ConfigClient',
    'fetch_config',
    'load_settings',
    'WatchHandle',
    'NacosWatchError',
    'AuthError',
    'CredentialsError',
    'TransportError',
    'ServerError',
    'UnauthorizedError',
    'NotFoundError',
    'DecodeError',
    'SettingsError',
    'AuthMode',
    'Credentials',
    'ClientSettings',
]
