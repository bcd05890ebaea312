#!/usr/bin/env python3
"""
Tests for psnapi/client.py: NPSSO login, token refresh, HTTP verbs and the
mapping of HTTP failures onto the error hierarchy.

Run with:
    python -m pytest tests/test_client.py
"""
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from psnapi.client import Client, MultipartPart, _OAuth2Mixin
from psnapi.errors import AuthError, ConfigError, NotFoundError, RemoteError


# ===========================================================================
# Helpers
# ===========================================================================

def _ok_resp(body, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.content = b'{}'
    resp.json.return_value = body
    resp.raise_for_status.return_value = None
    return resp


def _err_resp(status, text='error'):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
    return resp


def _redirect_resp(location):
    resp = MagicMock()
    resp.status_code = 302
    resp.headers = {'Location': location}
    return resp


def _token_resp(access='psn_access_token', refresh='psn_refresh_token'):
    return _ok_resp({'access_token': access, 'refresh_token': refresh, 'expires_in': 3600})


# ===========================================================================
# _OAuth2Mixin
# ===========================================================================

class TestOAuth2Mixin(unittest.TestCase):

    def _mixin(self):
        m = _OAuth2Mixin.__new__(_OAuth2Mixin)
        _OAuth2Mixin.__init__(m)
        return m

    def test_not_authenticated_initially(self):
        self.assertFalse(self._mixin().is_authenticated)

    def test_store_tokens_sets_access_token(self):
        m = self._mixin()
        m._store_tokens({'access_token': 'abc', 'refresh_token': 'xyz', 'expires_in': 3600})
        self.assertTrue(m.is_authenticated)
        self.assertEqual(m._refresh_token, 'xyz')
        self.assertFalse(m._is_token_expired())

    def test_store_tokens_keeps_previous_refresh_token(self):
        m = self._mixin()
        m._store_tokens({'access_token': 'a', 'refresh_token': 'first'})
        m._store_tokens({'access_token': 'b'})
        self.assertEqual(m._refresh_token, 'first')

    def test_auth_header_contains_bearer_token(self):
        m = self._mixin()
        m._store_tokens({'access_token': 'mytoken'})
        self.assertEqual(m._auth_header()['Authorization'], 'Bearer mytoken')

    def test_is_token_expired_when_expiry_zero(self):
        self.assertTrue(self._mixin()._is_token_expired())


# ===========================================================================
# Authentication
# ===========================================================================

@patch('psnapi.client.requests.Session')
class TestClientConnect(unittest.TestCase):

    def test_connect_success(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.get.return_value = _redirect_resp(
            'com.scee.psxandroid.sceabroker://psxbroker?code=AUTH_CODE_123'
        )
        session.post.return_value = _token_resp()
        client = Client()
        self.assertIs(client.connect('good_npsso'), client)
        self.assertTrue(client.is_authenticated)
        self.assertEqual(session.post.call_args[1]['data']['code'], 'AUTH_CODE_123')
        self.assertIn('npsso=good_npsso', session.get.call_args[1]['headers']['Cookie'])

    def test_connect_without_code_raises(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.get.return_value = _redirect_resp('https://example.com/?error=access_denied')
        client = Client()
        with self.assertRaises(AuthError):
            client.connect('bad_npsso')
        self.assertFalse(client.is_authenticated)
        session.post.assert_not_called()

    def test_connect_network_error_raises(self, mock_session_cls):
        mock_session_cls.return_value.get.side_effect = requests.ConnectionError('down')
        with self.assertRaises(AuthError):
            Client().connect('npsso')

    def test_token_exchange_failure_raises(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.get.return_value = _redirect_resp('x://cb?code=C')
        session.post.return_value = _err_resp(400)
        with self.assertRaises(AuthError):
            Client().connect('npsso')

    def test_token_response_without_access_token_raises(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.get.return_value = _redirect_resp('x://cb?code=C')
        session.post.return_value = _ok_resp({'refresh_token': 'r'})
        with self.assertRaises(AuthError):
            Client().connect('npsso')

    def test_refresh_without_refresh_token_raises(self, mock_session_cls):
        with self.assertRaises(AuthError):
            Client(access_token='tok').refresh_tokens()


# ===========================================================================
# HTTP verbs
# ===========================================================================

@patch('psnapi.client.requests.Session')
class TestClientRequests(unittest.TestCase):

    def test_get_sends_bearer_token_and_returns_json(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.request.return_value = _ok_resp({'hello': 'world'})
        client = Client(access_token='tok', timeout=7)
        body = client.get('https://example.com/a', {'limit': 1})
        self.assertEqual(body, {'hello': 'world'})
        args, kwargs = session.request.call_args
        self.assertEqual(args, ('GET', 'https://example.com/a'))
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer tok')
        self.assertEqual(kwargs['params'], {'limit': 1})
        self.assertEqual(kwargs['timeout'], 7)

    def test_unauthenticated_request_raises_without_http(self, mock_session_cls):
        with self.assertRaises(AuthError):
            Client().get('https://example.com/a')
        mock_session_cls.return_value.request.assert_not_called()

    def test_expired_token_is_refreshed_first(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.post.return_value = _token_resp(access='fresh')
        session.request.return_value = _ok_resp({})
        client = Client(access_token='stale', refresh_token='r', expires_in=0)
        client.get('https://example.com/a')
        self.assertEqual(session.post.call_args[1]['data']['grant_type'], 'refresh_token')
        self.assertEqual(session.request.call_args[1]['headers']['Authorization'], 'Bearer fresh')

    def test_404_raises_not_found(self, mock_session_cls):
        mock_session_cls.return_value.request.return_value = _err_resp(404)
        with self.assertRaises(NotFoundError) as ctx:
            Client(access_token='tok').get('https://example.com/missing')
        self.assertEqual(ctx.exception.status_code, 404)

    def test_401_and_403_raise_auth_error(self, mock_session_cls):
        for status in (401, 403):
            mock_session_cls.return_value.request.return_value = _err_resp(status)
            with self.assertRaises(AuthError):
                Client(access_token='tok').get('https://example.com/a')

    def test_500_raises_remote_error(self, mock_session_cls):
        mock_session_cls.return_value.request.return_value = _err_resp(500)
        with self.assertRaises(RemoteError) as ctx:
            Client(access_token='tok').get('https://example.com/a')
        self.assertNotIsInstance(ctx.exception, NotFoundError)
        self.assertEqual(ctx.exception.status_code, 500)

    def test_network_error_raises_remote_error(self, mock_session_cls):
        mock_session_cls.return_value.request.side_effect = requests.ConnectionError('down')
        with self.assertRaises(RemoteError):
            Client(access_token='tok').get('https://example.com/a')

    def test_undecodable_body_raises_remote_error(self, mock_session_cls):
        resp = _ok_resp(None)
        resp.json.side_effect = ValueError('not json')
        mock_session_cls.return_value.request.return_value = resp
        with self.assertRaises(RemoteError):
            Client(access_token='tok').get('https://example.com/a')

    def test_empty_body_returns_empty_dict(self, mock_session_cls):
        resp = _ok_resp(None, status=204)
        resp.content = b''
        mock_session_cls.return_value.request.return_value = resp
        self.assertEqual(Client(access_token='tok').delete('https://example.com/a'), {})

    def test_post_json_without_data_sends_empty_object(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.request.return_value = _ok_resp({})
        Client(access_token='tok').post_json('https://example.com/a')
        self.assertEqual(session.request.call_args[1]['json'], {})

    def test_put_json_sends_payload(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.request.return_value = _ok_resp({})
        Client(access_token='tok').put_json('https://example.com/a', {'name': 'x'})
        args, kwargs = session.request.call_args
        self.assertEqual(args[0], 'PUT')
        self.assertEqual(kwargs['json'], {'name': 'x'})

    def test_post_multipart_builds_files(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.request.return_value = _ok_resp({'url': 'https://cdn/x.jpg'})
        Client(access_token='tok').post_multipart('https://example.com/upload', [
            MultipartPart('purpose', 'communityProfileImage'),
            MultipartPart('file', b'\xff\xd8\xff', 'image/jpeg', filename='f.jpg'),
        ])
        files = session.request.call_args[1]['files']
        self.assertEqual(files[0], ('purpose', (None, 'communityProfileImage', None)))
        self.assertEqual(files[1], ('file', ('f.jpg', b'\xff\xd8\xff', 'image/jpeg')))

    def test_online_id_is_fetched_once(self, mock_session_cls):
        session = mock_session_cls.return_value
        session.request.return_value = _ok_resp({'profile': {'onlineId': 'MyAccount'}})
        client = Client(access_token='tok')
        self.assertEqual(client.online_id(), 'MyAccount')
        self.assertEqual(client.online_id(), 'MyAccount')
        self.assertEqual(session.request.call_count, 1)
        client.online_id(force=True)
        self.assertEqual(session.request.call_count, 2)


# ===========================================================================
# from_config
# ===========================================================================

@patch('psnapi.client.requests.Session')
class TestClientFromConfig(unittest.TestCase):

    def test_uses_configured_access_token(self, mock_session_cls):
        with patch.object(Client, 'connect') as mock_connect:
            client = Client.from_config({'access_token': 'tok', 'api_timeout_seconds': 5})
        mock_connect.assert_not_called()
        self.assertTrue(client.is_authenticated)
        self.assertEqual(client._timeout, 5)

    def test_connects_with_npsso(self, mock_session_cls):
        with patch.object(Client, 'connect', autospec=True) as mock_connect:
            mock_connect.side_effect = lambda self, npsso: self
            Client.from_config({'npsso': 'my_npsso'})
        self.assertEqual(mock_connect.call_args[0][1], 'my_npsso')

    def test_without_credentials_raises(self, mock_session_cls):
        with self.assertRaises(ConfigError):
            Client.from_config({'npsso': '', 'access_token': ''})


if __name__ == '__main__':
    unittest.main()
