"""Notification fan-out.

Turns an outbox entry into one notification per recipient:

| Trigger              | Recipients                              | Type           |
|----------------------|-----------------------------------------|----------------|
| EVENT_PUBLISHED      | subscribers of the organization         | NEW_EVENT      |
| REGISTRATION_CREATED | accepted connections of the registrant  | JOINED_EVENT   |
| CONNECTION_REQUESTED | the recipient of the request            | FRIEND_REQUEST |
| CONNECTION_ACCEPTED  | the requester                           | FRIEND_REQUEST |

The actor is never notified about their own action.

"""
from typing import List, Optional

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.logging import get_logger
from eventhub.common.models import Connection, Notification, Outbox, \
    Subscription, User, alias


_log = get_logger(__name__)


def _get_user_name(database: db.Database, user_id: str) -> str:
    user = User.find(database, user_id)
    if user is None or not user.get('Name'):
        return 'Someone'
    return user['Name']


def _resolve_organization_id(database: db.Database,
                             entry: Outbox.OutboxItem) -> Optional[str]:
    # Events may refer to organizations by external id.
    org = alias.resolve(database, ent.Org, entry['OrganizationId'])
    return org['Id'] if org else None


def get_audience(database: db.Database, entry: Outbox.OutboxItem) \
        -> List[str]:
    """Get the ids of the users to notify about an outbox entry.

    Args:
        database: The database.
        entry: The outbox entry.

    Returns:
        The recipient user ids without the actor.

    Raises:
        ValueError if the trigger is unknown.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    trigger = entry['Trigger']
    if trigger == 'EVENT_PUBLISHED':
        organization_id = _resolve_organization_id(database, entry)
        if organization_id is None:
            recipients = []
        else:
            recipients = Subscription.fetch_subscriber_ids(database,
                                                           organization_id)
    elif trigger == 'REGISTRATION_CREATED':
        recipients = Connection.fetch_friend_ids(database, entry['ActorId'])
    elif trigger in ('CONNECTION_REQUESTED', 'CONNECTION_ACCEPTED'):
        recipients = [entry['RecipientId']]
    else:
        raise ValueError(f'Unknown trigger: {trigger}')

    # Deduplicate while keeping the order.
    res = []
    seen = {entry['ActorId']}
    for r in recipients:
        if r not in seen:
            seen.add(r)
            res.append(r)
    return res


def get_content(database: db.Database, entry: Outbox.OutboxItem) \
        -> Notification.Content:
    """Get the notification content of an outbox entry.

    Raises:
        ValueError if the trigger is unknown.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    trigger = entry['Trigger']
    if trigger == 'EVENT_PUBLISHED':
        org = alias.resolve(database, ent.Org, entry['OrganizationId'])
        org_name = org.get('Name', 'An organization') if org \
            else 'An organization'
        return {
            'Type': 'NEW_EVENT',
            'Title': f'New Event Created by {org_name}',
            'Content': f'{org_name} posted a new event: '
                       f'{entry.get("EventTitle", "")}',
            'SenderId': entry['ActorId'],
            'EventId': entry['EventId'],
        }
    elif trigger == 'REGISTRATION_CREATED':
        name = _get_user_name(database, entry['ActorId'])
        return {
            'Type': 'JOINED_EVENT',
            'Title': 'Friend Joined an Event',
            'Content': f'{name} registered for '
                       f'{entry.get("EventTitle", "an event")}',
            'SenderId': entry['ActorId'],
            'EventId': entry['EventId'],
        }
    elif trigger == 'CONNECTION_REQUESTED':
        name = _get_user_name(database, entry['ActorId'])
        return {
            'Type': 'FRIEND_REQUEST',
            'Title': 'New Friend Request',
            'Content': f'{name} sent you a friend request',
            'SenderId': entry['ActorId'],
        }
    elif trigger == 'CONNECTION_ACCEPTED':
        name = _get_user_name(database, entry['ActorId'])
        return {
            'Type': 'FRIEND_REQUEST',
            'Title': 'Friend Request Accepted',
            'Content': f'{name} accepted your friend request',
            'SenderId': entry['ActorId'],
        }
    else:
        raise ValueError(f'Unknown trigger: {trigger}')


def deliver(database: db.Database, entry: Outbox.OutboxItem) -> int:
    """Notify the audience of an outbox entry and delete the entry.

    Delivering the same entry again creates no duplicate notifications.
    Failing to notify a recipient doesn't stop notifying the others.

    Args:
        database: The database.
        entry: The outbox entry.

    Returns:
        The number of notifications created.

    Raises:
        ValueError if the trigger is unknown.
        `db.DatabaseError` if the audience or the content couldn't be fetched.

    """
    recipients = get_audience(database, entry)
    if recipients:
        content = get_content(database, entry)
    created = 0
    for recipient_id in recipients:
        notification_id = Notification.get_notification_id(entry['OutboxId'],
                                                            recipient_id)
        try:
            Notification.create(database, notification_id, recipient_id,
                                content)
        except db.ConditionalCheckFailedError:
            _log.info(f'Notification {notification_id} already delivered')
            continue
        except db.DatabaseError as e:
            _log.error(f'Failed to notify {recipient_id} about '
                       f'{entry["Trigger"]}:\n{e}')
            continue
        created += 1

    Outbox.delete(database, entry['OutboxId'])
    _log.info(f'Delivered {created} notification(s) for {entry["Trigger"]} '
              f'{entry["OutboxId"]}')
    return created
