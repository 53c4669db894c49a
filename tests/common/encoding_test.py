from decimal import Decimal

import eventhub.common.encoding as m

from tests import TestBase


class TestDumps(TestBase):
    def test_integral_decimal(self):
        self.assertEqual(m.dumps({'rating': Decimal('4')}), '{"rating": 4}')

    def test_fractional_decimal(self):
        self.assertEqual(m.dumps({'rate': Decimal('0.5')}), '{"rate": 0.5}')

    def test_set(self):
        self.assertEqual(m.dumps({'ids': {'b', 'a'}}), '{"ids": ["a", "b"]}')

    def test_unknown_type(self):
        with self.assertRaises(TypeError):
            m.dumps({'foo': object()})


class TestLoads(TestBase):
    def test_float_as_decimal(self):
        res = m.loads('{"rating": 4.5}')
        self.assertEqual(res['rating'], Decimal('4.5'))

    def test_invalid(self):
        with self.assertRaises(ValueError):
            m.loads('{"foo":')


class TestCamelize(TestBase):
    def test_top_level(self):
        res = m.camelize({'ProfilePicture': 'pic.png'})
        self.assertDictEqual(res, {'profilePicture': 'pic.png'})

    def test_list(self):
        res = m.camelize([{'Id': '1'}, {'Id': '2'}])
        self.assertListEqual(res, [{'id': '1'}, {'id': '2'}])

    def test_shallow_keeps_nested(self):
        res = m.camelize({'FormData': {'TShirtSize': 'M'}})
        self.assertDictEqual(res, {'formData': {'TShirtSize': 'M'}})

    def test_deep(self):
        res = m.camelize({'CheckInStats': {'CheckInRate': 0.5}}, deep=True)
        self.assertDictEqual(res, {'checkInStats': {'checkInRate': 0.5}})

    def test_deep_list(self):
        res = m.camelize({'Items': [{'Count': 1}]}, deep=True)
        self.assertDictEqual(res, {'items': [{'count': 1}]})

    def test_scalar(self):
        self.assertEqual(m.camelize('Foo'), 'Foo')


class TestPascalize(TestBase):
    def test_top_level(self):
        res = m.pascalize({'userId': 'foo', 'formData': {'shirtSize': 'M'}})
        self.assertDictEqual(res, {'UserId': 'foo',
                                   'FormData': {'shirtSize': 'M'}})

    def test_round_trip_name(self):
        self.assertEqual(m.to_camel(m.to_pascal('registrationFormId')),
                         'registrationFormId')
