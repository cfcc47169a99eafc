"""
Tests for the Config Endpoint fetch/publish mapping.
"""

from unittest.mock import Mock

import pytest
import requests

from conftest import ENDPOINT, json_response, login_response, make_response
from nacos_watch.core.config_endpoint import ConfigEndpoint
from nacos_watch.core.registry import EndpointResolver
from nacos_watch.exceptions import (
    DecodeError,
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
)


class TestFetch:
    """Tests for ConfigEndpoint.fetch."""

    def test_fetch_returns_data(self, endpoint, http):
        http.request.return_value = json_response({'code': 0, 'message': 'success', 'data': 'a: 1'})

        assert endpoint.fetch('dev', 'DEFAULT_GROUP', 'app.yaml') == 'a: 1'

        method, url = http.request.call_args[0]
        kwargs = http.request.call_args[1]
        assert method == 'GET'
        assert url == f"{ENDPOINT}/nacos/v2/cs/config"
        assert kwargs['params'] == {
            'tenant': 'dev',
            'namespaceId': 'dev',
            'group': 'DEFAULT_GROUP',
            'dataId': 'app.yaml',
        }
        assert kwargs['headers']['Content-Type'].startswith('application/x-www-form-urlencoded')
        assert 'Timestamp' in kwargs['headers']

    def test_fetch_with_token_attaches_access_token(self, token_session, resolver, http):
        http.request.side_effect = [
            login_response('token-1'),
            json_response({'code': 0, 'data': 'content'}),
        ]
        endpoint = ConfigEndpoint(token_session, resolver, http=http)

        assert endpoint.fetch('', 'g', 'id') == 'content'
        assert http.request.call_args[1]['params']['accessToken'] == 'token-1'

    def test_fetch_signed_returns_raw_body(self, signature_session, resolver, http):
        http.request.return_value = make_response(200, 'raw content')
        endpoint = ConfigEndpoint(signature_session, resolver, http=http)

        assert endpoint.fetch('ns', 'g', 'id') == 'raw content'
        headers = http.request.call_args[1]['headers']
        assert headers['Spas-AccessKey'] == 'ak-id'
        assert headers['Spas-Signature'] == signature_session.sign('ns', 'g', headers['Timestamp'])

    @pytest.mark.parametrize('status,error', [
        (401, UnauthorizedError),
        (403, UnauthorizedError),
        (404, NotFoundError),
        (500, ServerError),
        (502, ServerError),
    ])
    def test_fetch_status_errors(self, endpoint, http, status, error):
        http.request.return_value = make_response(status, 'body text')
        with pytest.raises(error) as exc_info:
            endpoint.fetch('', 'g', 'id')
        assert exc_info.value.status_code == status
        assert exc_info.value.body == 'body text'

    def test_non_200_is_error_even_with_success_body(self, endpoint, http):
        http.request.return_value = json_response({'code': 0, 'data': 'x'}, status_code=201)
        with pytest.raises(ServerError):
            endpoint.fetch('', 'g', 'id')

    def test_fetch_nonzero_code(self, endpoint, http):
        http.request.return_value = json_response({'code': 20004, 'message': 'config data not exist'})
        with pytest.raises(ServerError):
            endpoint.fetch('', 'g', 'id')

    def test_fetch_bad_json(self, endpoint, http):
        http.request.return_value = make_response(200, '<html>')
        with pytest.raises(DecodeError):
            endpoint.fetch('', 'g', 'id')

    def test_fetch_transport_error(self, endpoint, http):
        http.request.side_effect = requests.exceptions.Timeout('slow')
        with pytest.raises(TransportError):
            endpoint.fetch('', 'g', 'id')

    def test_fetch_is_not_retried(self, endpoint, http):
        http.request.return_value = make_response(500, 'boom')
        with pytest.raises(ServerError):
            endpoint.fetch('', 'g', 'id')
        assert http.request.call_count == 1

    def test_transport_error_rotates_endpoint(self, anonymous_session, http):
        resolver = Mock(spec=EndpointResolver)
        resolver.current.return_value = ENDPOINT
        http.request.side_effect = requests.exceptions.ConnectionError('refused')
        endpoint = ConfigEndpoint(anonymous_session, resolver, http=http)

        with pytest.raises(TransportError):
            endpoint.fetch('', 'g', 'id')
        resolver.rotate.assert_called_once_with()


class TestPublish:
    """Tests for ConfigEndpoint.publish."""

    def test_publish_json_ack(self, endpoint, http):
        http.request.return_value = json_response({'code': 0, 'message': 'success', 'data': True})

        endpoint.publish('dev', 'g', 'id', 'new content')

        method, url = http.request.call_args[0]
        kwargs = http.request.call_args[1]
        assert method == 'POST'
        assert url == f"{ENDPOINT}/nacos/v2/cs/config"
        assert kwargs['data']['content'] == 'new content'
        assert kwargs['data']['dataId'] == 'id'
        assert kwargs['data']['tenant'] == 'dev'

    def test_publish_plain_true_ack(self, endpoint, http):
        http.request.return_value = make_response(200, 'true')
        endpoint.publish('', 'g', 'id', 'c')

    @pytest.mark.parametrize('body', [
        'false',
        '',
        '{"code": 0, "data": false}',
        '{"code": 500, "message": "error", "data": true}',
        'garbage',
    ])
    def test_publish_rejections(self, endpoint, http, body):
        http.request.return_value = make_response(200, body)
        with pytest.raises(ServerError):
            endpoint.publish('', 'g', 'id', 'c')

    def test_publish_status_error(self, endpoint, http):
        http.request.return_value = make_response(403, 'no permission')
        with pytest.raises(UnauthorizedError):
            endpoint.publish('', 'g', 'id', 'c')

    def test_publish_with_token(self, token_session, resolver, http):
        http.request.side_effect = [login_response('token-7'), make_response(200, 'true')]
        endpoint = ConfigEndpoint(token_session, resolver, http=http)

        endpoint.publish('', 'g', 'id', 'c')

        assert http.request.call_args[1]['data']['accessToken'] == 'token-7'
