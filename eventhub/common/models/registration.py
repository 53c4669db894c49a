"""Registration model.

A user registers for an event and is checked in at the venue:
NOT_REGISTERED -> REGISTERED -> CHECKED_IN. Registrations are stored as
PK=`EVENT#<event id>`, SK=`REGISTRATION#<user id>`, so a user can register for
an event at most once.

"""
from typing import Any, Dict, List, Mapping, Optional, Tuple, TypedDict

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import event as Event
from eventhub.common.models import ids
from eventhub.common.models import outbox as Outbox
from eventhub.common.models import user as User
from eventhub.common.models.errors import ConflictError, NotFoundError, \
    ValidationError

_PROTECTED_ATTRIBUTES = frozenset([
    'CheckedIn',
    'CheckedInTime',
    'CreatedAt',
    'EventId',
    'PK',
    'RegistrationId',
    'SK',
    'UpdatedAt',
    'UserId',
])


class CheckInStatus(TypedDict):
    """Check-in status of a user for an event."""

    Registered: bool
    CheckedIn: bool
    CheckedInTime: Optional[str]


def _get_keys(event_id: str, user_id: str) \
        -> Tuple[db.PartitionKey, db.SortKey]:
    return (db.PartitionKey(ent.Event, event_id),
            db.SortKey(ent.Registration, user_id))


def _to_registration(item: db.ItemResult) -> Dict[str, Any]:
    return {k: v for k, v in item.items() if k not in ('PK', 'SK')}


def create(database: db.Database, event: Mapping[str, Any], user_id: str,
           attributes: Mapping[str, Any]) -> str:
    """Register a user for an event.

    The user's accepted connections are notified asynchronously.

    Args:
        database: The database.
        event: The event.
        user_id: The native id of the user.
        attributes: The registration form answers. `RegistrationFormId` is
            required.

    Returns:
        The registration id.

    Raises:
        `ValidationError` if the user id or the form id is missing.
        `ConflictError` if the user is already registered for the event.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    ids.validate(user_id, 'userId')
    if not attributes.get('RegistrationFormId'):
        raise ValidationError('Missing required fields')

    registration_id = ids.new_id()
    reg_attributes = {k: v for k, v in attributes.items()
                      if k not in _PROTECTED_ATTRIBUTES}
    reg_attributes.update({
        'RegistrationId': registration_id,
        'EventId': event['Id'],
        'UserId': user_id,
        'CheckedIn': False,
    })
    pk, sk = _get_keys(event['Id'], user_id)
    entry: Outbox.Entry = {
        'Trigger': 'REGISTRATION_CREATED',
        'ActorId': user_id,
        'EventId': event['Id'],
        'EventTitle': event.get('Title', ''),
    }
    try:
        database.transact_write_items([
            db.InsertArg(pk, sk, reg_attributes),
            Outbox.get_create_op(entry)
        ])
    except db.ConditionalCheckFailedError:
        raise ConflictError('User already registered for this event')
    return registration_id


def fetch(database: db.Database, event_id: str, user_id: str,
          consistent: bool = False) -> Optional[Dict[str, Any]]:
    """Fetch the registration of a user for an event if it exists.

    Args:
        database: The database.
        event_id: The native id of the event.
        user_id: The native id of the user.
        consistent: Whether the read should be strongly consistent.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    pk, sk = _get_keys(event_id, user_id)
    item = database.get_item(pk, sk, consistent=consistent)
    if item is None:
        return None
    return _to_registration(item)


def fetch_all(database: db.Database, event_id: str) -> List[Dict[str, Any]]:
    """Fetch the registrations for an event."""
    items = database.query_prefix(db.PartitionKey(ent.Event, event_id),
                                  db.PrefixSortKey(ent.Registration))
    return [_to_registration(item) for item in items]


def fetch_for_user(database: db.Database, user_id: str) \
        -> List[Dict[str, Any]]:
    """Fetch the registrations of a user."""
    items = database.query_inverse(db.SortKey(ent.Registration, user_id),
                                   db.PrefixSortKey(ent.Event))
    return [_to_registration(item) for item in items]


def fetch_attendees(database: db.Database, event_id: str) \
        -> List[Dict[str, Any]]:
    """Fetch the registrations for an event with the users' details.

    Registrations of deleted users are left out.

    Returns:
        The attendees, most recent registration first.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    registrations = fetch_all(database, event_id)
    registrations.sort(key=lambda r: r.get('CreatedAt', ''), reverse=True)
    users = User.fetch_many(database, [r['UserId'] for r in registrations])
    res = []
    for r in registrations:
        user = users.get(r['UserId'])
        if user is None:
            continue
        res.append({
            'Id': r['RegistrationId'],
            'UserId': user['Id'],
            'UserName': user.get('Name'),
            'UserEmail': user.get('Email'),
            'RegistrationDate': r.get('CreatedAt'),
            'FormResponses': r.get('FormData', {}),
            'CheckedIn': bool(r.get('CheckedIn', False)),
            'CheckedInTime': r.get('CheckedInTime'),
        })
    return res


def count(database: db.Database, event_id: str) -> int:
    """Count the registrations for an event."""
    return len(fetch_all(database, event_id))


def check_in(database: db.Database, event_id: str, user_id: str) -> str:
    """Check in a registered user.

    Checking in again refreshes the check-in time. A missing registration is
    never created.

    Args:
        database: The database.
        event_id: The native id of the event.
        user_id: The native id of the user.

    Returns:
        The check-in time.

    Raises:
        `NotFoundError` if the user is not registered for the event.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    ids.validate(user_id, 'userId')
    pk, sk = _get_keys(event_id, user_id)
    checked_in_time = db.iso_now()
    attributes = {
        'CheckedIn': True,
        'CheckedInTime': checked_in_time
    }
    try:
        database.update_attributes(pk, sk, attributes, require_exists=True)
    except db.ConditionalCheckFailedError:
        raise NotFoundError('Registration not found')
    return checked_in_time


def get_status(database: db.Database, event_id: str, user_id: str) \
        -> CheckInStatus:
    """Get the check-in status of a user for an event."""
    ids.validate(user_id, 'userId')
    registration = fetch(database, event_id, user_id)
    if registration is None:
        return {
            'Registered': False,
            'CheckedIn': False,
            'CheckedInTime': None
        }
    return {
        'Registered': True,
        'CheckedIn': bool(registration.get('CheckedIn', False)),
        'CheckedInTime': registration.get('CheckedInTime')
    }


def is_checked_in(database: db.Database, event_id: str, user_id: str) -> bool:
    """Check whether a user is checked in for an event."""
    registration = fetch(database, event_id, user_id, consistent=True)
    return registration is not None and bool(registration.get('CheckedIn'))


def fetch_attended_events(database: db.Database, user_id: str,
                          now: Optional[str] = None) -> List[Dict[str, Any]]:
    """Fetch the past events that a user was checked in for.

    Args:
        database: The database.
        user_id: The native id of the user.
        now: ISO timestamp to compare the end dates of the events to. Defaults
            to the current time.

    Returns:
        Summaries of the events whose `EndDate` has passed.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    now = now or db.iso_now()
    res = []
    for r in fetch_for_user(database, user_id):
        if not r.get('CheckedIn'):
            continue
        event = Event.find(database, r['EventId'])
        if event is None:
            continue
        end_date = ids.parse_timestamp(event.get('EndDate'))
        if end_date is None or end_date >= now:
            continue
        res.append({
            'EventId': event['Id'],
            'EventName': event.get('Title'),
            'EventStartDate': event.get('StartDate'),
            'EventEndDate': event.get('EndDate'),
            'EventImage': event.get('ImageUrl'),
        })
    return res
