from eventhub.common.models import Feedback, Registration, Stats, \
    Subscription, User

from tests.fakes import DatabaseTestBase


class StatsTestBase(DatabaseTestBase):
    def setUp(self):
        super().setUp()
        self._owner = self._create_user('Owner')
        self._org = self._create_org(self._owner, external_id='acm')
        self._event = self._create_event(self._org)
        self._ada = self._create_user('Ada')
        self._bob = self._create_user('Bob')
        User.update(self._db, self._ada['Id'], {'Position': 'Engineer',
                                                'Organization': 'ACME'})
        User.update(self._db, self._bob['Id'], {'Position': 'Engineer',
                                                'Organization': 'ACME'})
        for user in (self._ada, self._bob):
            self._register(self._event, user)
        Registration.check_in(self._db, self._event['Id'], self._ada['Id'])
        Feedback.create(self._db, self._event['Id'], self._ada['Id'], 5,
                        comment='Great')
        Feedback.create(self._db, self._event['Id'], self._bob['Id'], 4)


class TestEventStats(StatsTestBase):
    def setUp(self):
        super().setUp()
        self._stats = Stats.get_event_stats(self._db, self._event['Id'])

    def test_check_in_stats(self):
        self.assertDictEqual(self._stats['CheckInStats'], {
            'TotalRegistrations': 2,
            'CheckedIn': 1,
            'CheckInRate': 0.5,
        })

    def test_registrations_over_time(self):
        over_time = self._stats['RegistrationOverTime']
        self.assertEqual(len(over_time), 1)
        self.assertEqual(over_time[0]['Count'], 2)

    def test_ratings(self):
        self.assertListEqual(self._stats['AttendeeRatings'], [
            {'Rating': 4, 'Count': 1},
            {'Rating': 5, 'Count': 1},
        ])

    def test_demographics(self):
        self.assertListEqual(self._stats['AttendeeDemographics'], [
            {'Position': 'Engineer', 'Organization': 'ACME', 'Count': 2}
        ])

    def test_comments(self):
        comments = [f['Comment'] for f in self._stats['FeedbackComments']]
        self.assertListEqual(comments, ['Great'])

    def test_empty_event(self):
        event = self._create_event(title='Empty')
        stats = Stats.get_event_stats(self._db, event['Id'])
        self.assertEqual(stats['CheckInStats']['CheckInRate'], 0)
        self.assertListEqual(stats['RegistrationOverTime'], [])


class TestOrganizationStats(StatsTestBase):
    def test_totals(self):
        # An event that refers to the organization by its external id.
        self._create_event(title='Second', OrganizationId='acm')
        Subscription.create(self._db, self._org['Id'], self._ada['Id'])
        stats = Stats.get_organization_stats(self._db, self._org)
        self.assertEqual(stats['TotalEvents'], 2)
        self.assertEqual(len(stats['SubscriptionStats']), 1)
        self.assertListEqual(stats['RegistrationStats'], [{
            'EventId': self._event['Id'],
            'EventName': self._event['Title'],
            'TotalRegistrations': 2,
            'CheckedIn': 1,
        }])
        self.assertEqual(len(stats['AttendeeRatings']), 2)

    def test_no_events(self):
        owner = self._create_user('Carol')
        org = self._create_org(owner, name='IEEE')
        stats = Stats.get_organization_stats(self._db, org)
        self.assertEqual(stats['TotalEvents'], 0)
        self.assertListEqual(stats['RegistrationStats'], [])
