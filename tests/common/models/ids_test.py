from unittest.mock import patch

import eventhub.common.models.ids as m
from eventhub.common.models.errors import InvalidIdError, ValidationError

from tests import TestBase


class TestNewId(TestBase):
    def test_native(self):
        self.assertTrue(m.is_native(m.new_id()))

    def test_unique(self):
        self.assertNotEqual(m.new_id(), m.new_id())


class TestNewSortableId(TestBase):
    @patch('eventhub.common.models.ids.time')
    def test_sorts_by_time(self, time_mock):
        time_mock.time_ns.return_value = 1_000_000 * 999
        earlier = m.new_sortable_id()
        time_mock.time_ns.return_value = 1_000_000 * 1000
        later = m.new_sortable_id()
        self.assertLess(earlier, later)

    def test_alphanumeric(self):
        res = m.new_sortable_id()
        self.assertTrue(res.isalnum())
        self.assertEqual(len(res), 26)


class TestValidate(TestBase):
    def test_native(self):
        native = '0b1e5a7cbb3c4c58a4b3c04d6e4bb0d1'
        self.assertEqual(m.validate(native), native)

    def test_external(self):
        self.assertEqual(m.validate('tech-summit-2024'), 'tech-summit-2024')

    def test_missing(self):
        with self.assertRaises(InvalidIdError):
            m.validate(None)

    def test_empty(self):
        with self.assertRaises(InvalidIdError):
            m.validate('')

    def test_key_separator(self):
        with self.assertRaises(InvalidIdError):
            m.validate('USER#foo')

    def test_pipe(self):
        with self.assertRaises(InvalidIdError):
            m.validate('a|b')

    def test_is_validation_error(self):
        with self.assertRaises(ValidationError):
            m.validate('not valid', 'eventId')

    def test_message_has_name(self):
        with self.assertRaises(InvalidIdError) as cm:
            m.validate('', 'eventId')
        self.assertIn('eventId', cm.exception.message)


class TestParseTimestamp(TestBase):
    def test_zulu(self):
        res = m.parse_timestamp('2024-05-01T10:00:00.000Z')
        self.assertEqual(res, '2024-05-01T10:00:00')

    def test_offset(self):
        res = m.parse_timestamp('2024-05-01T12:00:00+02:00')
        self.assertEqual(res, '2024-05-01T10:00:00')

    def test_naive(self):
        res = m.parse_timestamp('2024-05-01T10:00:00')
        self.assertEqual(res, '2024-05-01T10:00:00')

    def test_date(self):
        res = m.parse_timestamp('2024-05-01')
        self.assertEqual(res, '2024-05-01T00:00:00')

    def test_invalid(self):
        self.assertIsNone(m.parse_timestamp('yesterday'))

    def test_not_string(self):
        self.assertIsNone(m.parse_timestamp(None))

    def test_require_timestamp(self):
        with self.assertRaises(ValidationError):
            m.require_timestamp('yesterday', 'since')
