from eventhub.common.models import Badge, BadgeClaim, Registration
from eventhub.common.models.errors import ConflictError, ForbiddenError, \
    NotFoundError, ValidationError

from tests.fakes import DatabaseTestBase


class BadgeTestBase(DatabaseTestBase):
    def setUp(self):
        super().setUp()
        self._owner = self._create_user('Owner')
        self._org = self._create_org(self._owner)
        self._event = self._create_event(self._org)

    def _create_badge(self, badge_type='PARTICIPANT', event=None):
        event = event or self._event
        return Badge.create(self._db, {
            'Name': f'{badge_type.title()} Badge',
            'EventId': event['Id'],
            'OrganizationId': self._org['Id'],
            'Type': badge_type,
        })


class TestCreate(BadgeTestBase):
    def test_create(self):
        badge = self._create_badge()
        self.assertEqual(Badge.fetch(self._db, badge['Id'])['Type'],
                         'PARTICIPANT')

    def test_default_type(self):
        badge = Badge.create(self._db, {
            'Name': 'Badge',
            'EventId': self._event['Id'],
            'OrganizationId': self._org['Id'],
        })
        self.assertEqual(badge['Type'], 'CUSTOM')

    def test_badge_type_alias(self):
        badge = Badge.create(self._db, {
            'Name': 'Badge',
            'EventId': self._event['Id'],
            'OrganizationId': self._org['Id'],
            'BadgeType': 'speaker',
        })
        self.assertEqual(badge['Type'], 'SPEAKER')

    def test_volunteer_type(self):
        badge = self._create_badge(badge_type='VOLUNTEER')
        self.assertEqual(Badge.fetch(self._db, badge['Id'])['Type'],
                         'VOLUNTEER')

    def test_invalid_type(self):
        with self.assertRaises(ValidationError):
            self._create_badge(badge_type='GOLD')

    def test_missing_fields(self):
        with self.assertRaises(ValidationError):
            Badge.create(self._db, {'Name': 'Badge'})

    def test_not_found(self):
        with self.assertRaises(NotFoundError):
            Badge.fetch(self._db, '0' * 32)

    def test_fetch_all_by_event(self):
        other = self._create_event(self._org, title='Other')
        self._create_badge()
        self._create_badge(event=other)
        query = Badge.BadgeQuery(event_id=other['Id'])
        badges = Badge.fetch_all(self._db, query)
        self.assertListEqual([b['EventId'] for b in badges], [other['Id']])
        self.assertEqual(len(Badge.fetch_all(self._db, Badge.BadgeQuery())),
                         2)


class TestClaim(BadgeTestBase):
    def setUp(self):
        super().setUp()
        self._user = self._create_user('Ada')

    def _claim(self, badge):
        return BadgeClaim.create(self._db, badge['Id'], self._user['Id'],
                                 self._event['Id'])

    def _check_in(self):
        self._register(self._event, self._user)
        Registration.check_in(self._db, self._event['Id'], self._user['Id'])

    def test_participant_not_checked_in(self):
        badge = self._create_badge()
        with self.assertRaises(ForbiddenError):
            self._claim(badge)

    def test_participant_registered_only(self):
        badge = self._create_badge()
        self._register(self._event, self._user)
        with self.assertRaises(ForbiddenError):
            self._claim(badge)

    def test_participant_checked_in(self):
        badge = self._create_badge()
        self._check_in()
        claim = self._claim(badge)
        self.assertEqual(claim['BadgeType'], 'PARTICIPANT')
        claimed = BadgeClaim.fetch_claimed_badge_ids(self._db,
                                                     self._user['Id'])
        self.assertSetEqual(claimed, {badge['Id']})

    def test_sponsor_without_check_in(self):
        badge = self._create_badge(badge_type='SPONSOR')
        claim = self._claim(badge)
        self.assertEqual(claim['UserId'], self._user['Id'])

    def test_claim_twice(self):
        badge = self._create_badge(badge_type='SPONSOR')
        self._claim(badge)
        with self.assertRaises(ConflictError):
            self._claim(badge)

    def test_other_event(self):
        other = self._create_event(self._org, title='Other')
        badge = self._create_badge(badge_type='SPONSOR', event=other)
        with self.assertRaises(ValidationError):
            self._claim(badge)

    def test_missing_fields(self):
        badge = self._create_badge()
        with self.assertRaises(ValidationError):
            BadgeClaim.create(self._db, badge['Id'], '', self._event['Id'])

    def test_missing_badge(self):
        with self.assertRaises(NotFoundError):
            BadgeClaim.create(self._db, '0' * 32, self._user['Id'],
                              self._event['Id'])
