from unittest import TestCase

from tests import TestBase


class TestBaseTest(TestCase):
    def test_get_event(self):
        tb = TestBase()
        event = tb.get_event('dynamodb-stream')
        self.assertIsInstance(event, dict)

    def test_get_proxy_event(self):
        tb = TestBase()
        event = tb.get_proxy_event('POST', path_params={'id': 'foo'},
                                   body={'userId': 'bar'})
        self.assertEqual(event['httpMethod'], 'POST')
        self.assertEqual(event['pathParameters'], {'id': 'foo'})
        self.assertEqual(event['body'], '{"userId": "bar"}')

    def test_get_proxy_event_makes_copy(self):
        tb = TestBase()
        tb.get_proxy_event('DELETE')
        event = tb.get_event('api-gateway-proxy')
        self.assertEqual(event['httpMethod'], 'GET')

    def test_get_configs(self):
        tb = TestBase()
        configs = tb.get_configs('dev')
        keys = {c['ParameterKey'] for c in configs}
        self.assertIn('WebsiteOrigin', keys)
