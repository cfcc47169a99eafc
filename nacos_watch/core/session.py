"""
Session - Owns credentials, the current access token and its expiry.

One Session is shared by every endpoint and watch of a client. Token state is
only ever read or written while holding the session lock.
"""

import json
import logging
import time
from threading import Lock
from typing import Callable, Dict, Optional

import requests

from nacos_watch.core.registry import EndpointResolver
from nacos_watch.core.transport import base_headers, check_status, send
from nacos_watch.exceptions import AuthError, NacosWatchError, TransportError
from nacos_watch.handlers.anonymous_handler import AnonymousAuthHandler
from nacos_watch.handlers.base_handler import BaseAuthHandler
from nacos_watch.handlers.signature_handler import SignatureAuthHandler
from nacos_watch.handlers.token_handler import TokenAuthHandler
from nacos_watch.models.auth import AuthMode, Credentials, LoginResponse
from nacos_watch.models.settings import DEFAULT_LOGIN_PATH

DEFAULT_SAFETY_MARGIN = 600


class Session:
    """Authentication state for one client."""

    def __init__(
        self,
        resolver: EndpointResolver,
        auth_mode: AuthMode = AuthMode.NONE,
        credentials: Optional[Credentials] = None,
        http: Optional[requests.Session] = None,
        login_path: str = DEFAULT_LOGIN_PATH,
        timeout: float = 30.0,
        safety_margin: int = DEFAULT_SAFETY_MARGIN,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the session.

        Args:
            resolver: Endpoint strategy the login request goes to
            auth_mode: Authentication mode for every request
            credentials: Credential material for the mode
            http: HTTP session used for login
            login_path: Path of the login endpoint
            timeout: Login request timeout in seconds
            safety_margin: Seconds subtracted from the server token TTL
            logger: Optional injected logger
            clock: Wall clock, replaceable in tests

        Raises:
            CredentialsError: If the mode's credentials are missing
        """
        self.resolver = resolver
        self.auth_mode = AuthMode.from_value(auth_mode)
        self.credentials = credentials or Credentials()
        self.http = http or requests.Session()
        self.login_path = login_path
        self.timeout = timeout
        self.safety_margin = safety_margin
        self.logger = logger or logging.getLogger('Session')
        self.clock = clock

        self._lock = Lock()
        self._token: Optional[str] = None
        self._token_expiry: Optional[float] = None
        self._handler = self._build_handler()

    def _build_handler(self) -> BaseAuthHandler:
        if self.auth_mode is AuthMode.TOKEN:
            handler = TokenAuthHandler(self.credentials, self.access_token, self.logger)
        elif self.auth_mode is AuthMode.SIGNATURE:
            handler = SignatureAuthHandler(self.credentials, self.logger)
        else:
            handler = AnonymousAuthHandler(self.credentials, self.logger)
        self.logger.debug(f"Using {handler.get_mode_name()} authentication")
        return handler

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._token

    @property
    def token_expiry(self) -> Optional[float]:
        with self._lock:
            return self._token_expiry

    def _token_is_valid(self) -> bool:
        return (
            self._token is not None
            and self._token_expiry is not None
            and self._token_expiry > self.clock()
        )

    def ensure_valid(self) -> None:
        """
        Make sure a usable token is held, logging in again if it expired.

        Raises:
            AuthError: If the login exchange fails
        """
        if self.auth_mode is not AuthMode.TOKEN:
            return
        with self._lock:
            # Another thread may have renewed while we waited for the lock
            if self._token_is_valid():
                return
            self._login()

    def force_renew(self) -> None:
        """
        Repeat the login exchange regardless of the current expiry.

        Raises:
            AuthError: If the login exchange fails
        """
        if self.auth_mode is not AuthMode.TOKEN:
            return
        with self._lock:
            self._login()

    def access_token(self) -> str:
        """Return a token that is valid right now, renewing if needed."""
        self.ensure_valid()
        with self._lock:
            return self._token

    def remaining_lifetime(self) -> Optional[float]:
        """
        Seconds until the token should be renewed.

        Returns:
            None when the mode has no token, otherwise seconds (0 if expired)
        """
        if self.auth_mode is not AuthMode.TOKEN:
            return None
        with self._lock:
            if self._token_expiry is None:
                return 0.0
            return max(0.0, self._token_expiry - self.clock())

    def sign(self, namespace: str, group: str, timestamp: str) -> str:
        """
        Sign a request under signature auth.

        Raises:
            AuthError: If the session is not in signature mode
        """
        if not isinstance(self._handler, SignatureAuthHandler):
            raise AuthError(f"Cannot sign requests in {self.auth_mode.value} mode")
        return self._handler.sign(namespace, group, timestamp)

    def authorize(
        self,
        params: Dict[str, str],
        headers: Dict[str, str],
        namespace: str = '',
        group: str = ''
    ) -> None:
        """Attach the active mode's auth material to a request in place."""
        self._handler.apply(params, headers, namespace, group)

    def _login(self) -> None:
        # Caller holds self._lock
        endpoint = self.resolver.current()
        self.logger.debug(
            f"Logging in to {endpoint} as {self.credentials.username}",
            extra={'endpoint': endpoint}
        )

        try:
            response = send(
                self.http,
                'POST',
                f"{endpoint}{self.login_path}",
                self.timeout,
                data={
                    'username': self.credentials.username,
                    'password': self.credentials.password,
                },
                headers=base_headers()
            )
            body = check_status(response, 'Login')
            login = LoginResponse.from_dict(json.loads(body))
        except (KeyError, TypeError, ValueError) as e:
            raise AuthError(f"Login response could not be decoded: {e}") from e
        except NacosWatchError as e:
            if isinstance(e, TransportError):
                self.resolver.rotate()
            raise AuthError(f"Login failed: {e.message}") from e

        lifetime = login.token_ttl - self.safety_margin
        if lifetime <= 0:
            self.logger.warning(
                f"Token TTL {login.token_ttl}s is below the {self.safety_margin}s "
                f"safety margin; renewing at half the TTL instead"
            )
            lifetime = login.token_ttl / 2

        self._token = login.access_token
        self._token_expiry = self.clock() + lifetime
        self.logger.info(
            f"Login succeeded, token valid for {lifetime:.0f}s",
            extra={'endpoint': endpoint}
        )
