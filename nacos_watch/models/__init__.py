"""
Models package - Data classes for the application.
"""

from nacos_watch.models.auth import AuthMode, Credentials, LoginResponse
from nacos_watch.models.listen_request import ListenRequest
from nacos_watch.models.probe_result import ProbeResult
from nacos_watch.models.settings import ClientSettings
from nacos_watch.models.subscription import Subscription

__all__ = [
    'AuthMode',
    'Credentials',
    'LoginResponse',
    'ListenRequest',
    'ProbeResult',
    'ClientSettings',
    'Subscription',
]
