"""
Pytest configuration and fixtures.
"""

import json
import os
import sys
import threading
from unittest.mock import Mock

import pytest
import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nacos_watch.core.config_endpoint import ConfigEndpoint
from nacos_watch.core.listener import LongPollSubscription
from nacos_watch.core.registry import StaticEndpoint
from nacos_watch.core.session import Session
from nacos_watch.models.auth import AuthMode, Credentials

ENDPOINT = 'http://nacos.example.com:8848'


def make_response(status_code=200, text=''):
    """Build a fake requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


def json_response(payload, status_code=200):
    return make_response(status_code, json.dumps(payload))


def login_response(token='token-1', ttl=18000):
    return json_response({'accessToken': token, 'tokenTtl': ttl, 'globalAdmin': False})


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class HeldTransport:
    """Transport whose requests hang like a held long-poll until close() is called."""

    def __init__(self, hold=10.0):
        self.hold = hold
        self.entered = threading.Event()
        self.released = threading.Event()

    def request(self, method, url, **kwargs):
        self.entered.set()
        if self.released.wait(self.hold):
            raise requests.exceptions.ConnectionError('Connection aborted')
        return make_response(200, '')

    def close(self):
        self.released.set()


@pytest.fixture
def resolver():
    return StaticEndpoint(ENDPOINT)


@pytest.fixture
def http():
    """Mock HTTP session; tests set http.request.return_value / side_effect."""
    return Mock()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_credentials():
    return Credentials(username='nacos', password='secret')


@pytest.fixture
def signature_credentials():
    return Credentials(access_key_id='ak-id', access_key_secret='ak-secret')


@pytest.fixture
def anonymous_session(resolver, http):
    return Session(resolver, AuthMode.NONE, http=http)


@pytest.fixture
def token_session(resolver, http, token_credentials, clock):
    return Session(resolver, AuthMode.TOKEN, token_credentials, http=http, clock=clock)


@pytest.fixture
def signature_session(resolver, http, signature_credentials):
    return Session(resolver, AuthMode.SIGNATURE, signature_credentials, http=http)


@pytest.fixture
def endpoint(anonymous_session, resolver, http):
    return ConfigEndpoint(anonymous_session, resolver, http=http)


@pytest.fixture
def listener(anonymous_session, resolver, http):
    return LongPollSubscription(anonymous_session, resolver, http=http)
