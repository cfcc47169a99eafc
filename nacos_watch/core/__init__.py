"""
Core package - Contains main business logic.
"""

from nacos_watch.core.client import ConfigClient, fetch_config
from nacos_watch.core.config_endpoint import ConfigEndpoint
from nacos_watch.core.listener import LongPollSubscription
from nacos_watch.core.registry import AddressServerEndpoint, EndpointResolver, StaticEndpoint
from nacos_watch.core.session import Session
from nacos_watch.core.settings import load_settings
from nacos_watch.core.watcher import WatchHandle, WatchScheduler, WatchState

__all__ = [
    'ConfigClient',
    'fetch_config',
    'ConfigEndpoint',
    'LongPollSubscription',
    'AddressServerEndpoint',
    'EndpointResolver',
    'StaticEndpoint',
    'Session',
    'load_settings',
    'WatchHandle',
    'WatchScheduler',
    'WatchState',
]
