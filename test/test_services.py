#!/usr/bin/env python3
import json
import unittest
from datetime import timezone
from unittest import mock

import requests

from serverchan_relay.config import RelayConfig
from serverchan_relay.errors import ResponseReadFailure, UpstreamFailure
from serverchan_relay.formatters import NotificationRequest
from serverchan_relay.services import parse_serverchan_response, send_to_serverchan

SUCCESS_BODY = json.dumps({
    'code': 0,
    'message': '',
    'data': {'pushid': '12345', 'readkey': 'abc', 'error': 'SUCCESS', 'errorcode': 0},
}).encode()


def make_config():
    return RelayConfig(
        port=':8080',
        auth_token='secret',
        server_chan_key='SCTkey123',
        time_zone='UTC',
        time_location=timezone.utc,
        server_chan_base_url='https://sctapi.example',
        timeout_seconds=3.0,
    )


def fake_response(status_code=200, body=SUCCESS_BODY, reason='OK'):
    resp = mock.MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    resp.content = body
    return resp


class TestParseResponse(unittest.TestCase):
    def test_success(self):
        result = parse_serverchan_response(SUCCESS_BODY)
        self.assertTrue(result.ok)
        self.assertEqual(result.pushid, '12345')
        self.assertEqual(result.readkey, 'abc')

    def test_failure_code(self):
        result = parse_serverchan_response(b'{"code": 40001, "message": "bad key", "data": {"error": "x"}}')
        self.assertFalse(result.ok)
        self.assertEqual(result.message, 'bad key')
        self.assertEqual(result.error, 'x')

    def test_unparseable(self):
        for body in (b'', b'<html>', b'[1]', b'{"code": "zero"}', b'{"data": "x"}'):
            with self.subTest(body=body):
                with self.assertRaises(ValueError):
                    parse_serverchan_response(body)


class TestSendToServerChan(unittest.TestCase):
    def setUp(self):
        self.config = make_config()
        self.notification = NotificationRequest(title='web已离线', body='details')

    @mock.patch('serverchan_relay.services.requests.post')
    def test_posts_json_to_key_url_with_timeout(self, post):
        post.return_value = fake_response()
        result = send_to_serverchan(self.config, self.notification)

        post.assert_called_once()
        args, kwargs = post.call_args
        self.assertEqual(args[0], 'https://sctapi.example/SCTkey123.send')
        self.assertEqual(kwargs['json'], {'title': 'web已离线', 'desp': 'details'})
        self.assertEqual(kwargs['timeout'], 3.0)
        self.assertEqual(result.pushid, '12345')

    @mock.patch('serverchan_relay.services.requests.post')
    def test_key_is_masked_in_logs(self, post):
        post.return_value = fake_response()
        with self.assertLogs('serverchan_relay.services', level='INFO') as logs:
            send_to_serverchan(self.config, self.notification)
        joined = '\n'.join(logs.output)
        self.assertNotIn('SCTkey123', joined)
        self.assertIn('SCTk*****.send', joined)

    @mock.patch('serverchan_relay.services.requests.post')
    def test_non_200_is_upstream_failure(self, post):
        post.return_value = fake_response(500, b'{"code": 1, "message": "boom"}', 'Internal Server Error')
        with self.assertRaises(UpstreamFailure) as ctx:
            send_to_serverchan(self.config, self.notification)
        self.assertEqual(ctx.exception.upstream_status, 500)
        self.assertIn('boom', ctx.exception.upstream_body)
        self.assertIn('500', str(ctx.exception))
        self.assertEqual(ctx.exception.public_message, 'Error sending to ServerChan')

    @mock.patch('serverchan_relay.services.requests.post')
    def test_200_with_unparseable_body_is_success(self, post):
        post.return_value = fake_response(200, b'not json')
        with self.assertLogs('serverchan_relay.services', level='WARNING') as logs:
            result = send_to_serverchan(self.config, self.notification)
        self.assertIsNone(result)
        self.assertIn('Failed to parse ServerChan JSON response', logs.output[0])

    @mock.patch('serverchan_relay.services.requests.post')
    def test_200_with_deeply_nested_body_is_success(self, post):
        post.return_value = fake_response(200, b'[' * 100000)
        with self.assertLogs('serverchan_relay.services', level='WARNING') as logs:
            result = send_to_serverchan(self.config, self.notification)
        self.assertIsNone(result)
        self.assertIn('Failed to parse ServerChan JSON response', logs.output[0])

    @mock.patch('serverchan_relay.services.requests.post')
    def test_200_with_failure_code_is_still_success(self, post):
        post.return_value = fake_response(200, b'{"code": 40001, "message": "quota"}')
        result = send_to_serverchan(self.config, self.notification)
        self.assertEqual(result.code, 40001)

    @mock.patch('serverchan_relay.services.requests.post')
    def test_transport_errors(self, post):
        for exc in (requests.exceptions.ConnectionError('refused'), requests.exceptions.Timeout('slow')):
            with self.subTest(exc=exc):
                post.side_effect = exc
                with self.assertRaises(UpstreamFailure):
                    send_to_serverchan(self.config, self.notification)

    @mock.patch('serverchan_relay.services.requests.post')
    def test_body_read_failure(self, post):
        resp = mock.MagicMock()
        resp.status_code = 200
        resp.reason = 'OK'
        type(resp).content = mock.PropertyMock(side_effect=requests.exceptions.ChunkedEncodingError('cut'))
        post.return_value = resp
        with self.assertRaises(ResponseReadFailure) as ctx:
            send_to_serverchan(self.config, self.notification)
        self.assertEqual(ctx.exception.public_message, 'Error sending to ServerChan')


if __name__ == '__main__':
    unittest.main()
