"""
Client settings model.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from nacos_watch.models.auth import AuthMode, Credentials

DEFAULT_LOGIN_PATH = '/nacos/v1/auth/login'
DEFAULT_CONFIG_PATH = '/nacos/v2/cs/config'
DEFAULT_LISTENER_PATH = '/nacos/v1/cs/configs/listener'


@dataclass
class ClientSettings:
    """Everything needed to build a ConfigClient."""

    endpoint: str = ''
    address_server: Optional[str] = None
    server_port: int = 8848
    auth_mode: AuthMode = AuthMode.NONE
    credentials: Credentials = field(default_factory=Credentials)
    poll_interval: float = 10.0
    long_poll_timeout_ms: int = 3000
    request_timeout: float = 30.0
    token_safety_margin: int = 600
    login_path: str = DEFAULT_LOGIN_PATH
    config_path: str = DEFAULT_CONFIG_PATH
    listener_path: str = DEFAULT_LISTENER_PATH
    log_level: str = 'INFO'
    log_format: Optional[str] = None
    watches: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientSettings':
        """Create settings from a parsed settings.yaml document."""
        server = data.get('server', {}) or {}
        auth = data.get('auth', {}) or {}
        watch = data.get('watch', {}) or {}
        paths = data.get('paths', {}) or {}
        logging_settings = data.get('logging', {}) or {}

        return cls(
            endpoint=server.get('endpoint', ''),
            address_server=server.get('address_server'),
            server_port=int(server.get('port', 8848)),
            request_timeout=float(server.get('timeout', 30.0)),
            auth_mode=AuthMode.from_value(auth.get('mode')),
            credentials=Credentials(
                username=auth.get('username'),
                password=auth.get('password'),
                access_key_id=auth.get('access_key_id'),
                access_key_secret=auth.get('access_key_secret'),
            ),
            token_safety_margin=int(auth.get('token_safety_margin', 600)),
            poll_interval=float(watch.get('poll_interval', 10.0)),
            long_poll_timeout_ms=int(watch.get('long_poll_timeout_ms', 3000)),
            login_path=paths.get('login', DEFAULT_LOGIN_PATH),
            config_path=paths.get('config', DEFAULT_CONFIG_PATH),
            listener_path=paths.get('listener', DEFAULT_LISTENER_PATH),
            log_level=logging_settings.get('level', 'INFO'),
            log_format=logging_settings.get('format'),
            watches=list(watch.get('entries', []) or []),
        )
