from eventhub.common.models import Notification
from eventhub.handlers.notifications import read

from tests.fakes import HandlerTestBase


class TestRead(HandlerTestBase):
    def setUp(self):
        super().setUp()
        self._user = self._create_user('Ada')
        self._notification_id = Notification.get_notification_id(
            '01718023468123a1b2c3d4e5f6', self._user['Id'])
        Notification.create(self._db, self._notification_id, self._user['Id'],
                            {
                                'Type': 'FRIEND_REQUEST',
                                'Title': 'New Friend Request',
                                'Content': 'Bob sent you a friend request',
                                'SenderId': 'b' * 32,
                            })

    def _fetch(self):
        query = Notification.NotificationQuery(self._user['Id'])
        return Notification.fetch_all(self._db, query)

    def test_mark_read(self):
        status, body = self._call(read._post_handler, 'POST',
                                  path_params={'id': self._notification_id})
        self.assertEqual(status, 200)
        self.assertDictEqual(body, {'success': True})
        self.assertTrue(self._fetch()[0]['IsRead'])

    def test_not_found(self):
        missing = Notification.get_notification_id(
            '01718023468999a1b2c3d4e5f6', self._user['Id'])
        status, body = self._call(read._post_handler, 'POST',
                                  path_params={'id': missing})
        self.assertEqual(status, 404)
        self.assertEqual(body['error'], 'Notification not found')

    def test_malformed_id(self):
        status, _ = self._call(read._post_handler, 'POST',
                               path_params={'id': 'unread'})
        self.assertEqual(status, 400)
