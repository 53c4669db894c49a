from eventhub.common.models import Organization
from eventhub.common.models.errors import ConflictError, NotFoundError, \
    ValidationError

from tests.fakes import DatabaseTestBase


class TestCreate(DatabaseTestBase):
    def setUp(self):
        super().setUp()
        self._owner = self._create_user('Ada')

    def test_owner_is_member(self):
        org = self._create_org(self._owner)
        self.assertEqual(org['OwnerId'], self._owner['Id'])
        self.assertTrue(Organization.is_member(self._db, org['Id'],
                                               self._owner['Id']))

    def test_owner_by_external_id(self):
        owner = self._create_user('Bob', external_id='bob')
        org = Organization.create(self._db, 'bob', {'Name': 'IEEE'})
        self.assertEqual(org['OwnerId'], owner['Id'])

    def test_unique_name(self):
        self._create_org(self._owner, name='ACM')
        with self.assertRaises(ConflictError) as cm:
            self._create_org(self._owner, name='ACM')
        self.assertEqual(cm.exception.message,
                         'Organization with this name already exists')

    def test_missing_name(self):
        with self.assertRaises(ValidationError):
            Organization.create(self._db, self._owner['Id'], {})

    def test_missing_owner(self):
        with self.assertRaises(NotFoundError):
            Organization.create(self._db, '0b1e5a7cbb3c4c58a4b3c04d6e4bb0d1',
                                {'Name': 'ACM'})

    def test_fetch_by_external_id(self):
        org = self._create_org(self._owner, external_id='acm')
        self.assertEqual(Organization.fetch(self._db, 'acm')['Id'], org['Id'])

    def test_fetch_all(self):
        self._create_org(self._owner, name='ACM')
        self._create_org(self._owner, name='IEEE')
        names = {o['Name'] for o in Organization.fetch_all(self._db)}
        self.assertSetEqual(names, {'ACM', 'IEEE'})


class TestUpdate(DatabaseTestBase):
    def setUp(self):
        super().setUp()
        self._owner = self._create_user('Ada')
        self._org = self._create_org(self._owner, name='ACM')

    def test_update(self):
        res = Organization.update(self._db, self._org['Id'],
                                  {'Website': 'https://acm.org'})
        self.assertEqual(res['Website'], 'https://acm.org')

    def test_rename_frees_old_name(self):
        Organization.update(self._db, self._org['Id'], {'Name': 'ACM SIG'})
        other = self._create_org(self._owner, name='ACM')
        self.assertEqual(other['Name'], 'ACM')

    def test_rename_to_taken_name(self):
        self._create_org(self._owner, name='IEEE')
        with self.assertRaises(ConflictError):
            Organization.update(self._db, self._org['Id'], {'Name': 'IEEE'})
        org = Organization.fetch(self._db, self._org['Id'])
        self.assertEqual(org['Name'], 'ACM')

    def test_same_name(self):
        res = Organization.update(self._db, self._org['Id'],
                                  {'Name': 'ACM', 'Location': 'NYC'})
        self.assertEqual(res['Location'], 'NYC')

    def test_nothing_to_update(self):
        with self.assertRaises(ValidationError):
            Organization.update(self._db, self._org['Id'], {'OwnerId': 'x'})

    def test_not_found(self):
        with self.assertRaises(NotFoundError):
            Organization.update(self._db, 'nope', {'Location': 'NYC'})


class TestTeam(DatabaseTestBase):
    def setUp(self):
        super().setUp()
        self._owner = self._create_user('Ada')
        self._org = self._create_org(self._owner)

    def test_add_member(self):
        user = self._create_user('Bob')
        Organization.add_member(self._db, self._org['Id'], user['Id'])
        team = Organization.fetch_team(self._db, self._org['Id'])
        self.assertSetEqual({u['Name'] for u in team}, {'Ada', 'Bob'})

    def test_add_member_twice(self):
        user = self._create_user('Bob')
        Organization.add_member(self._db, self._org['Id'], user['Id'])
        with self.assertRaises(ConflictError):
            Organization.add_member(self._db, self._org['Id'], user['Id'])

    def test_add_missing_user(self):
        with self.assertRaises(NotFoundError):
            Organization.add_member(self._db, self._org['Id'], 'nobody')

    def test_is_member(self):
        user = self._create_user('Bob')
        self.assertFalse(Organization.is_member(self._db, self._org['Id'],
                                                user['Id']))
