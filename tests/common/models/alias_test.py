import eventhub.common.models.entities as ent
from eventhub.common.models import alias
from eventhub.common.models.errors import InvalidIdError

from tests.fakes import DatabaseTestBase


class TestResolve(DatabaseTestBase):
    def test_native(self):
        event = self._create_event()
        res = alias.resolve(self._db, ent.Event, event['Id'])
        self.assertEqual(res['Title'], 'Tech Summit')

    def test_external(self):
        event = self._create_event()
        self._db.transact_write_items([
            alias.get_create_op(ent.Event, 'tech-summit-2024', event['Id'])
        ])
        res = alias.resolve(self._db, ent.Event, 'tech-summit-2024')
        self.assertEqual(res['Id'], event['Id'])

    def test_alias_of_other_entity(self):
        user = self._create_user('Ada', external_id='shared-id')
        self.assertIsNotNone(alias.resolve(self._db, ent.User, 'shared-id'))
        self.assertIsNone(alias.resolve(self._db, ent.Event, 'shared-id'))
        self.assertEqual(user['ExternalId'], 'shared-id')

    def test_missing(self):
        self.assertIsNone(alias.resolve(self._db, ent.Event, 'nope'))

    def test_deleted_target(self):
        self._db.transact_write_items([
            alias.get_create_op(ent.Event, 'gone',
                                '0b1e5a7cbb3c4c58a4b3c04d6e4bb0d1')
        ])
        self.assertIsNone(alias.resolve(self._db, ent.Event, 'gone'))

    def test_invalid(self):
        with self.assertRaises(InvalidIdError):
            alias.resolve(self._db, ent.Event, 'a b')


class TestToEntity(DatabaseTestBase):
    def test_replaces_keys(self):
        res = alias.to_entity({'PK': 'abc', 'SK': '#EVENT#', 'Title': 'T'})
        self.assertDictEqual(res, {'Id': 'abc', 'Title': 'T'})
