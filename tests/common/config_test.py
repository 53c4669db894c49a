from unittest.mock import MagicMock, patch

import eventhub.common.config as m

from tests import TestBase


class TestBuildConfig(TestBase):
    def test_main_table_name(self):
        configs = self.get_configs('dev')
        table_name = 'TestTableName'
        env = {'MAIN_TABLE_NAME': table_name}
        conf = m._build_config(env, configs)
        self.assertEqual(conf.main_table, table_name)

    def test_inverse_index_default(self):
        configs = self.get_configs('dev')
        conf = m._build_config({}, configs)
        self.assertEqual(conf.inverse_index, 'InverseIndex')

    def test_notification_limit(self):
        configs = self.get_configs('dev')
        limit_d = next(d for d in configs
                       if d['ParameterKey'] == 'NotificationLimit')
        limit_d['ParameterValue'] = '25'
        conf = m._build_config({}, configs)
        self.assertEqual(conf.notification_limit, 25)

    def test_website_origin_unquoted(self):
        configs = self.get_configs('dev')
        conf = m._build_config({}, configs)
        self.assertEqual(conf.website_origin, 'http://localhost:3000')

    def test_test_env_log_level(self):
        configs = self.get_configs('dev')
        conf = m._build_config({'TOX_TESTENV': 'py38'}, configs)
        self.assertEqual(conf.log_level, 'WARNING')

    def test_all_targets_load(self):
        for target in ('dev', 'staging', 'production'):
            conf = m._build_config({}, self.get_configs(target))
            self.assertGreater(conf.subscriber_page_size, 0)


class TestConfig(TestBase):

    @patch('eventhub.common.config._build_config')
    @patch('eventhub.common.config.os')
    def test_uses_env(self, os_mock, build_config_mock):
        environ_mock = MagicMock()
        os_mock.environ = environ_mock
        environ_mock.get.return_value = 'dev'
        m._config = None
        self.addCleanup(setattr, m, '_config', None)
        m._get_config()
        build_config_mock.assert_called_once()
        self.assertIs(build_config_mock.call_args.args[0], environ_mock)

    def test_unknown_attribute(self):
        with self.assertRaises(AttributeError):
            getattr(m, 'not_a_config')
