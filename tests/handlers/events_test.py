from unittest.mock import MagicMock

from eventhub.common.models import Event, Registration
from eventhub.handlers.events import attendees, checkin, event, events, \
    feedback, register, stats

from tests.fakes import HandlerTestBase


class EventsTestBase(HandlerTestBase):
    def setUp(self):
        super().setUp()
        self._owner = self._create_user('Owner')
        self._org = self._create_org(self._owner, external_id='acm')
        self._event = self._create_event(self._org)
        self._ada = self._create_user('Ada')

    def _path(self, **params):
        params.setdefault('id', self._event['Id'])
        return params


class TestEvents(EventsTestBase):
    def test_create(self):
        status, body = self._call(events._post_handler, 'POST', body={
            'title': 'Hackathon',
            'organizationId': self._org['Id'],
            'location': 'Main Hall',
        })
        self.assertEqual(status, 201)
        self.assertEqual(body['status'], 'success')
        self.assertEqual(body['event']['location'], 'Main Hall')
        self.assertIsNotNone(Event.find(self._db, body['event']['id']))

    def test_create_external_id(self):
        status, body = self._call(events._post_handler, 'POST', body={
            'id': 'hackathon-2024',
            'title': 'Hackathon',
        })
        self.assertEqual(status, 201)
        self.assertEqual(body['event']['externalId'], 'hackathon-2024')

    def test_create_without_title(self):
        status, body = self._call(events._post_handler, 'POST',
                                  body={'location': 'Main Hall'})
        self.assertEqual(status, 400)
        self.assertEqual(body['error'], 'Event title is required')

    def test_list_by_organization(self):
        self._create_event(title='Unrelated')
        status, body = self._call(events._get_handler, 'GET',
                                  query={'organizationId': self._org['Id']})
        self.assertEqual(status, 200)
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['events'][0]['id'], self._event['Id'])

    def test_list_by_partner(self):
        self._create_event(title='Joint', PartnerOrganizations=['ieee'])
        _, body = self._call(events._get_handler, 'GET',
                             query={'partnerOrganizations': 'ieee'})
        self.assertListEqual([e['title'] for e in body['events']], ['Joint'])


class TestEvent(EventsTestBase):
    def test_get(self):
        status, body = self._call(event._get_handler, 'GET',
                                  path_params=self._path())
        self.assertEqual(status, 200)
        self.assertEqual(body['title'], 'Tech Summit')

    def test_get_not_found(self):
        status, body = self._call(event._get_handler, 'GET',
                                  path_params=self._path(id='missing'))
        self.assertEqual(status, 404)
        self.assertEqual(body['error'], 'Event not found')

    def test_patch_by_organizer(self):
        status, body = self._call(event._patch_handler, 'PATCH',
                                  path_params=self._path(),
                                  body={'userId': self._owner['Id'],
                                        'location': 'Room 101'})
        self.assertEqual(status, 200)
        self.assertEqual(body['event']['location'], 'Room 101')

    def test_patch_by_other_user(self):
        status, _ = self._call(event._patch_handler, 'PATCH',
                               path_params=self._path(),
                               body={'userId': self._ada['Id'],
                                     'location': 'Room 101'})
        self.assertEqual(status, 403)

    def test_delete(self):
        status, body = self._call(event._delete_handler, 'DELETE',
                                  path_params=self._path(),
                                  query={'userId': self._owner['Id']})
        self.assertEqual(status, 200)
        self.assertEqual(body['message'], 'Event deleted successfully')
        self.assertIsNone(Event.find(self._db, self._event['Id']))

    def test_delete_by_other_user(self):
        status, _ = self._call(event._delete_handler, 'DELETE',
                               path_params=self._path(),
                               query={'userId': self._ada['Id']})
        self.assertEqual(status, 403)
        self.assertIsNotNone(Event.find(self._db, self._event['Id']))


class TestRegister(EventsTestBase):
    def _post(self, **body):
        return self._call(register._post_handler, 'POST',
                          path_params=self._path(), body=body)

    def test_register(self):
        status, body = self._post(userId=self._ada['Id'],
                                  registrationFormId='form-1',
                                  formData={'tShirt': 'M'})
        self.assertEqual(status, 201)
        self.assertTrue(body['success'])
        self.assertTrue(body['registrationId'])
        self.assertEqual(Registration.count(self._db, self._event['Id']), 1)

    def test_register_twice(self):
        self._post(userId=self._ada['Id'], registrationFormId='form-1')
        status, body = self._post(userId=self._ada['Id'],
                                  registrationFormId='form-1')
        self.assertEqual(status, 409)
        self.assertEqual(body['error'],
                         'User already registered for this event')

    def test_missing_fields(self):
        status, body = self._post(userId=self._ada['Id'])
        self.assertEqual(status, 400)
        self.assertEqual(body['error'], 'Missing required fields')


class TestAttendees(EventsTestBase):
    def test_list(self):
        self._register(self._event, self._ada)
        status, body = self._call(attendees._get_handler, 'GET',
                                  path_params=self._path())
        self.assertEqual(status, 200)
        attendee, = body['attendees']
        self.assertEqual(attendee['userName'], 'Ada')
        self.assertFalse(attendee['checkedIn'])


class TestCheckIn(EventsTestBase):
    def _path(self, **params):
        params.setdefault('userId', self._ada['Id'])
        return super()._path(**params)

    def test_status_not_registered(self):
        status, body = self._call(checkin._get_handler, 'GET',
                                  path_params=self._path())
        self.assertEqual(status, 200)
        self.assertDictEqual(body, {
            'registered': False,
            'checkedIn': False,
            'checkedInTime': None,
        })

    def test_check_in(self):
        self._register(self._event, self._ada)
        status, body = self._call(checkin._post_handler, 'POST',
                                  path_params=self._path())
        self.assertEqual(status, 200)
        self.assertEqual(body['message'], 'Attendee checked in successfully')
        _, res = self._call(checkin._get_handler, 'GET',
                            path_params=self._path())
        self.assertTrue(res['checkedIn'])
        self.assertEqual(res['checkedInTime'], body['checkedInTime'])

    def test_check_in_not_registered(self):
        status, body = self._call(checkin._post_handler, 'POST',
                                  path_params=self._path())
        self.assertEqual(status, 404)
        self.assertEqual(body['error'], 'Registration not found')


class TestFeedback(EventsTestBase):
    def test_submit_and_list(self):
        self._register(self._event, self._ada)
        status, _ = self._call(feedback._post_handler, 'POST',
                               path_params=self._path(),
                               query={'userId': self._ada['Id']},
                               body={'rating': 4, 'comment': 'Nice'})
        self.assertEqual(status, 201)
        status, body = self._call(feedback._get_handler, 'GET',
                                  path_params=self._path())
        self.assertEqual(status, 200)
        self.assertEqual(body['feedback'][0]['rating'], 4)
        self.assertEqual(body['feedback'][0]['comment'], 'Nice')

    def test_missing_user_id(self):
        status, body = self._call(feedback._post_handler, 'POST',
                                  path_params=self._path(),
                                  body={'rating': 4})
        self.assertEqual(status, 400)
        self.assertEqual(body['error'], 'userId is required')

    def test_not_registered(self):
        status, _ = self._call(feedback._post_handler, 'POST',
                               path_params=self._path(),
                               query={'userId': self._ada['Id']},
                               body={'rating': 4})
        self.assertEqual(status, 403)


class TestStats(EventsTestBase):
    def test_get(self):
        self._register(self._event, self._ada)
        status, body = self._call(stats._get_handler, 'GET',
                                  path_params=self._path())
        self.assertEqual(status, 200)
        self.assertEqual(body['checkInStats']['totalRegistrations'], 1)
        self.assertEqual(body['checkInStats']['checkInRate'], 0)


class TestDispatch(HandlerTestBase):
    _to_patch = [
        'eventhub.handlers.events.event._delete_handler',
        'eventhub.handlers.events.event._get_handler',
        'eventhub.handlers.events.event._patch_handler',
        'eventhub.handlers.events.event._database',
    ]

    def test_methods(self):
        for method in ('DELETE', 'GET', 'PATCH'):
            with self.subTest(method=method):
                proxy_event = self.get_proxy_event(method)
                event.handler(proxy_event, MagicMock())
                mock = self._mocks[f'_{method.lower()}_handler']
                mock.assert_called_once_with(self._mocks['_database'],
                                             proxy_event)

    def test_method_not_allowed(self):
        with self.assertRaises(RuntimeError):
            event.handler(self.get_proxy_event('POST'), MagicMock())
