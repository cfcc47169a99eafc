"""
Tests for the ConfigClient facade.
"""

import threading
import time
from unittest.mock import Mock

import pytest

from conftest import ENDPOINT, HeldTransport, json_response, make_response
from nacos_watch.core.client import ConfigClient
from nacos_watch.core.registry import AddressServerEndpoint, StaticEndpoint
from nacos_watch.core.watcher import WatchState
from nacos_watch.exceptions import CredentialsError, NotFoundError, ServerError
from nacos_watch.models.auth import AuthMode, Credentials
from nacos_watch.models.settings import ClientSettings
from nacos_watch.utils.fingerprint import fingerprint


@pytest.fixture
def settings():
    return ClientSettings(endpoint=ENDPOINT, poll_interval=0.01)


@pytest.fixture
def watch_http():
    """Dedicated transport handed to each watch."""
    transport = Mock()
    transport.request.return_value = make_response(200, '')
    return transport


@pytest.fixture
def client(settings, http, watch_http):
    client = ConfigClient(settings, http=http, transport_factory=lambda: watch_http)
    yield client
    client.close(5)


class TestClientConstruction:
    """Tests for building clients from settings."""

    def test_static_endpoint_by_default(self, client):
        assert isinstance(client.resolver, StaticEndpoint)
        assert client.session.auth_mode is AuthMode.NONE

    def test_address_server_resolver(self, http):
        settings = ClientSettings(address_server='http://addr.example.com:8080/diamond-server/diamond')
        client = ConfigClient(settings, http=http)
        assert isinstance(client.resolver, AddressServerEndpoint)

    def test_missing_credentials_is_a_typed_error(self, http):
        settings = ClientSettings(endpoint=ENDPOINT, auth_mode=AuthMode.TOKEN, credentials=Credentials())
        with pytest.raises(CredentialsError):
            ConfigClient(settings, http=http)


class TestGetAndPublish:
    """Direct calls propagate errors to the caller."""

    def test_get(self, client, http):
        http.request.return_value = json_response({'code': 0, 'data': 'content'})
        assert client.get('', 'DEFAULT_GROUP', 'app') == 'content'

    def test_get_not_found(self, client, http):
        http.request.return_value = make_response(404, 'config data not exist')
        with pytest.raises(NotFoundError):
            client.get('', 'DEFAULT_GROUP', 'missing')

    def test_publish_rejection_leaves_fingerprints_alone(self, client, http):
        http.request.side_effect = [
            json_response({'code': 0, 'data': '123'}),
            make_response(200, 'false'),
        ]
        handle = client.watch('', 'DEFAULT_GROUP', 'test', Mock())

        with pytest.raises(ServerError):
            client.publish('', 'DEFAULT_GROUP', 'test', '456')

        assert handle.last_fingerprint == fingerprint('123')


class TestWatch:
    """Tests for watch registration."""

    def test_watch_starts_background_loop(self, client, http, watch_http):
        http.request.return_value = json_response({'code': 0, 'data': '123'})

        handle = client.watch('dev', 'DEFAULT_GROUP', 'test', Mock())

        assert handle.is_running
        assert handle.last_fingerprint == fingerprint('123')
        assert client.watches == [handle]

    def test_initial_fetch_failure_prevents_watch(self, client, http, watch_http):
        http.request.return_value = make_response(404, 'config data not exist')

        with pytest.raises(NotFoundError):
            client.watch('', 'DEFAULT_GROUP', 'missing', Mock())

        assert client.watches == []
        watch_http.close.assert_called_once_with()

    def test_change_reaches_callback(self, client, http, watch_http):
        delivered = threading.Event()
        received = []

        def on_change(content):
            received.append(content)
            delivered.set()

        http.request.side_effect = [
            json_response({'code': 0, 'data': '123'}),
            json_response({'code': 0, 'data': '456'}),
        ]
        watch_http.request.side_effect = (
            [make_response(200, '')] * 3
            + [make_response(200, 'test%02DEFAULT_GROUP%02dev%01')]
            + [make_response(200, '')] * 10000
        )

        handle = client.watch('dev', 'DEFAULT_GROUP', 'test', on_change)

        assert delivered.wait(5)
        assert received == ['456']
        assert handle.last_fingerprint == fingerprint('456')

    def test_close_stops_every_watch(self, settings, http, watch_http):
        http.request.return_value = json_response({'code': 0, 'data': '123'})
        client = ConfigClient(settings, http=http, transport_factory=lambda: watch_http)
        first = client.watch('', 'g', 'a', Mock())
        second = client.watch('', 'g', 'b', Mock())

        client.close(5)

        assert not first.is_running
        assert not second.is_running
        assert first.state is WatchState.STOPPED
        assert client.watches == []
        http.close.assert_called_once_with()

    def test_close_releases_held_long_polls_together(self, settings, http):
        http.request.return_value = json_response({'code': 0, 'data': '123'})
        transports = [HeldTransport(hold=3.0), HeldTransport(hold=3.0)]
        factory = iter(transports)
        client = ConfigClient(settings, http=http, transport_factory=lambda: next(factory))
        client.watch('', 'g', 'a', Mock())
        client.watch('', 'g', 'b', Mock())
        for transport in transports:
            assert transport.entered.wait(5)

        started = time.monotonic()
        client.close(5)

        assert time.monotonic() - started < 1.0
        assert all(transport.released.is_set() for transport in transports)

    def test_context_manager_closes(self, settings, http):
        with ConfigClient(settings, http=http) as client:
            assert client.watches == []
        http.close.assert_called_once_with()
