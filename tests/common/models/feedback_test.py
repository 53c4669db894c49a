from decimal import Decimal

from eventhub.common.models import Feedback
from eventhub.common.models.errors import ConflictError, ForbiddenError, \
    ValidationError

from tests.fakes import DatabaseTestBase


class FeedbackTestBase(DatabaseTestBase):
    def setUp(self):
        super().setUp()
        self._user = self._create_user('Ada')
        self._event = self._create_event()
        self._register(self._event, self._user)

    def _create(self, rating=5, **kwargs):
        Feedback.create(self._db, self._event['Id'], self._user['Id'],
                        rating, **kwargs)


class TestCreate(FeedbackTestBase):
    def test_stores_user_details(self):
        self._create(comment='Great talks')
        res = Feedback.fetch_all(self._db, self._event['Id'])
        self.assertEqual(len(res), 1)
        self.assertEqual(res[0]['Rating'], 5)
        self.assertEqual(res[0]['Comment'], 'Great talks')
        self.assertEqual(res[0]['UserName'], 'Ada')
        self.assertEqual(res[0]['UserId'], self._user['Id'])

    def test_anonymous(self):
        self._create(anonymous=True)
        res = Feedback.fetch_all(self._db, self._event['Id'])
        self.assertNotIn('UserId', res[0])
        self.assertIsNone(res[0]['UserName'])
        self.assertTrue(res[0]['Anonymous'])

    def test_decimal_rating(self):
        self._create(rating=Decimal('4'))
        res = Feedback.fetch_all(self._db, self._event['Id'])
        self.assertEqual(res[0]['Rating'], 4)

    def test_invalid_ratings(self):
        for rating in (0, 6, 4.5, Decimal('4.5'), '5', True, None):
            with self.subTest(rating=rating):
                with self.assertRaises(ValidationError):
                    self._create(rating=rating)

    def test_not_registered(self):
        other = self._create_user('Bob')
        with self.assertRaises(ForbiddenError):
            Feedback.create(self._db, self._event['Id'], other['Id'], 5)

    def test_twice(self):
        self._create()
        with self.assertRaises(ConflictError):
            self._create(rating=1)
        res = Feedback.fetch_all(self._db, self._event['Id'])
        self.assertEqual(res[0]['Rating'], 5)

    def test_invalid_comment(self):
        with self.assertRaises(ValidationError):
            self._create(comment=5)
