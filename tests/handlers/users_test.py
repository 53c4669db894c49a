from unittest.mock import MagicMock

import eventhub.common.db as db
from eventhub.common.models import Notification, Registration
from eventhub.handlers.users import attended_events, email, notifications, \
    user, users

from tests.fakes import HandlerTestBase


class TestUsers(HandlerTestBase):
    def test_create(self):
        status, body = self._call(users._post_handler, 'POST', body={
            'name': 'Ada',
            'email': 'ada@example.com',
            'profilePicture': 'ada.png',
        })
        self.assertEqual(status, 201)
        self.assertEqual(body['status'], 'success')
        self.assertEqual(body['user']['profilePicture'], 'ada.png')

    def test_create_external_id(self):
        status, body = self._call(users._post_handler, 'POST', body={
            'id': 'ada-lovelace',
            'name': 'Ada',
            'email': 'ada@example.com',
        })
        self.assertEqual(status, 201)
        self.assertEqual(body['user']['externalId'], 'ada-lovelace')

    def test_create_duplicate(self):
        self._create_user('Ada')
        status, body = self._call(users._post_handler, 'POST', body={
            'name': 'Ada',
            'email': 'ada@example.com',
        })
        self.assertEqual(status, 409)
        self.assertEqual(body['error'], 'User already exists')

    def test_create_no_body(self):
        status, _ = self._call(users._post_handler, 'POST')
        self.assertEqual(status, 400)

    def test_list(self):
        self._create_user('Ada')
        status, body = self._call(users._get_handler, 'GET')
        self.assertEqual(status, 200)
        self.assertEqual(body['users'][0]['name'], 'Ada')


class TestUser(HandlerTestBase):
    def setUp(self):
        super().setUp()
        self._user = self._create_user('Ada')

    def test_get_with_organizations(self):
        org = self._create_org(self._user)
        status, body = self._call(user._get_handler, 'GET',
                                  path_params={'id': self._user['Id']})
        self.assertEqual(status, 200)
        self.assertListEqual(body['user']['organizations'], [org['Id']])

    def test_get_not_found(self):
        status, body = self._call(user._get_handler, 'GET',
                                  path_params={'id': 'nobody'})
        self.assertEqual(status, 404)
        self.assertEqual(body['error'], 'User not found')

    def test_get_invalid_id(self):
        status, _ = self._call(user._get_handler, 'GET',
                               path_params={'id': 'no body'})
        self.assertEqual(status, 400)

    def test_patch(self):
        status, body = self._call(user._patch_handler, 'PATCH',
                                  path_params={'id': self._user['Id']},
                                  body={'bio': 'Mathematician'})
        self.assertEqual(status, 200)
        self.assertEqual(body['message'], 'Profile updated successfully')
        self.assertEqual(body['user']['bio'], 'Mathematician')

    def test_by_email(self):
        status, body = self._call(email._get_handler, 'GET',
                                  path_params={'email': 'ada%40example.com'})
        self.assertEqual(status, 200)
        self.assertEqual(body['user']['id'], self._user['Id'])

    def test_by_email_not_found(self):
        status, _ = self._call(email._get_handler, 'GET',
                               path_params={'email': 'bob@example.com'})
        self.assertEqual(status, 404)


class TestNotifications(HandlerTestBase):
    def setUp(self):
        super().setUp()
        self._user = self._create_user('Ada')
        for i in range(3):
            nid = Notification.get_notification_id(f'0{i}', self._user['Id'])
            Notification.create(self._db, nid, self._user['Id'], {
                'Type': 'NEW_EVENT',
                'Title': 'New Event Created by ACM',
                'Content': f'ACM posted a new event: Event {i}',
                'SenderId': 'a' * 32,
                'CreatedAt': f'2024-05-0{i + 1}T00:00:00',
            })

    def test_list(self):
        status, body = self._call(notifications._get_handler, 'GET',
                                  path_params={'id': self._user['Id']})
        self.assertEqual(status, 200)
        self.assertEqual(len(body['notifications']), 3)
        self.assertIn('timestamp', body)
        self.assertIn('isRead', body['notifications'][0])

    def test_since_and_limit(self):
        status, body = self._call(notifications._get_handler, 'GET',
                                  path_params={'id': self._user['Id']},
                                  query={'since': '2024-05-01T00:00:00Z',
                                         'limit': '1'})
        self.assertEqual(status, 200)
        self.assertEqual(len(body['notifications']), 1)
        self.assertEqual(body['notifications'][0]['content'],
                         'ACM posted a new event: Event 2')

    def test_invalid_limit(self):
        status, _ = self._call(notifications._get_handler, 'GET',
                               path_params={'id': self._user['Id']},
                               query={'limit': 'all'})
        self.assertEqual(status, 400)


class TestAttendedEvents(HandlerTestBase):
    def test_list(self):
        ada = self._create_user('Ada', external_id='ada')
        event = self._create_event(title='Past', EndDate='2020-01-01')
        self._register(event, ada)
        Registration.check_in(self._db, event['Id'], ada['Id'])
        status, body = self._call(attended_events._get_handler, 'GET',
                                  path_params={'id': 'ada'})
        self.assertEqual(status, 200)
        self.assertEqual(body['attendedEvents'][0]['eventName'], 'Past')

    def test_unknown_user(self):
        status, _ = self._call(attended_events._get_handler, 'GET',
                               path_params={'id': 'nobody'})
        self.assertEqual(status, 404)


class TestDispatch(HandlerTestBase):
    _to_patch = [
        'eventhub.handlers.users.user._get_handler',
        'eventhub.handlers.users.user._patch_handler',
        'eventhub.handlers.users.user._database',
    ]

    def test_get(self):
        event = self.get_proxy_event('GET')
        res = user.handler(event, MagicMock())
        self._mocks['_get_handler'].assert_called_once_with(
            self._mocks['_database'], event)
        self.assertIs(res, self._mocks['_get_handler'].return_value)

    def test_patch(self):
        event = self.get_proxy_event('PATCH')
        user.handler(event, MagicMock())
        self._mocks['_patch_handler'].assert_called_once()

    def test_method_not_allowed(self):
        with self.assertRaises(RuntimeError):
            user.handler(self.get_proxy_event('DELETE'), MagicMock())


class TestDatabaseError(HandlerTestBase):
    _to_patch = [
        'eventhub.handlers.users.users.User',
        'eventhub.common.http._log',
    ]

    def test_500(self):
        self._mocks['User'].fetch_all.side_effect = db.DatabaseError('boom')
        status, body = self._call(users._get_handler, 'GET')
        self.assertEqual(status, 500)
        self.assertEqual(body['error'], 'Failed to fetch users')
        self._mocks['_log'].error.assert_called_once()
