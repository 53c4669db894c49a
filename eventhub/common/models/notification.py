"""Notification model.

Notifications are stored as PK=`NOTIFICATION#<id>`, SK=`USER#<recipient id>`
and listed per recipient from the inverse index. The notification id is
`<outbox id>.<recipient id>`: ids sort by creation time and delivering the
same outbox entry twice yields the same ids.

"""
from typing import Any, Dict, List, Literal, NamedTuple, Optional, \
    TypedDict

import boto3.dynamodb.conditions as cond

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import ids
from eventhub.common.models.errors import InvalidIdError, NotFoundError, \
    ValidationError


_MAX_LIMIT = 1000

NotificationType = Literal[
    'FRIEND_REQUEST',
    'JOINED_EVENT',
    'NEW_EVENT',
    'UPDATED_EVENT',
]


class _ContentTotal(TypedDict):
    Type: NotificationType
    Title: str
    Content: str
    SenderId: str


class Content(_ContentTotal, total=False):
    """Notification content."""

    EventId: str


class NotificationQuery(NamedTuple):
    """Filter for listing the notifications of a user."""

    user_id: str
    # Only notifications created after this ISO timestamp.
    since: Optional[str] = None
    limit: Optional[int] = None

    def validate(self) -> None:
        """Make sure the user id and the filter values are valid.

        Raises:
            `ValidationError` if a value is malformed.

        """
        ids.validate(self.user_id, 'userId')
        if self.since is not None:
            ids.require_timestamp(self.since, 'since')
        if self.limit is not None and \
                not (0 < self.limit <= _MAX_LIMIT):
            raise ValidationError(f'Invalid limit: {self.limit}')

    def get_filter(self) -> Optional[cond.ConditionBase]:
        """Get the filter condition of the query."""
        if self.since is None:
            return None
        since = ids.require_timestamp(self.since, 'since')
        return cond.Attr('CreatedAt').gt(since)


def get_notification_id(outbox_id: str, recipient_id: str) -> str:
    """Get the id of the notification of an outbox entry to a recipient."""
    return f'{outbox_id}.{recipient_id}'


def _get_recipient_id(notification_id: str) -> str:
    outbox_id, _, recipient_id = notification_id.partition('.')
    if not outbox_id.isalnum() or not recipient_id:
        raise InvalidIdError(f'Invalid notification id: {notification_id}')
    ids.validate(recipient_id, 'notification id')
    return recipient_id


def _to_notification(item: db.ItemResult) -> Dict[str, Any]:
    res = {k: v for k, v in item.items() if k not in ('PK', 'SK')}
    res['Id'] = item['PK']
    res['RecipientId'] = item['SK']
    return res


def create(database: db.Database, notification_id: str, recipient_id: str,
           content: Content) -> None:
    """Create an unread notification.

    Args:
        database: The database.
        notification_id: The notification id from `get_notification_id`.
        recipient_id: The native id of the recipient.
        content: The notification content.

    Raises:
        `db.ConditionalCheckFailedError` if the notification exists already.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    pk = db.PartitionKey(ent.Notification, notification_id)
    sk = db.SortKey(ent.User, recipient_id)
    attributes = dict(content)
    attributes['IsRead'] = False
    database.insert(pk, sk, attributes)


def fetch_all(database: db.Database, query: NotificationQuery) \
        -> List[Dict[str, Any]]:
    """Fetch the notifications of a user, newest first.

    Raises:
        `ValidationError` if the query is invalid.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    query.validate()
    items = database.query_inverse(db.SortKey(ent.User, query.user_id),
                                   db.PrefixSortKey(ent.Notification),
                                   filter_condition=query.get_filter(),
                                   limit=query.limit,
                                   newest_first=True)
    return [_to_notification(item) for item in items]


def mark_read(database: db.Database, notification_id: str) -> None:
    """Mark a notification as read.

    Marking a read notification again is a no-op.

    Raises:
        `InvalidIdError` if the notification id is malformed.
        `NotFoundError` if the notification doesn't exist.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    recipient_id = _get_recipient_id(notification_id)
    pk = db.PartitionKey(ent.Notification, notification_id)
    sk = db.SortKey(ent.User, recipient_id)
    try:
        database.update_attributes(pk, sk, {'IsRead': True},
                                   require_exists=True)
    except db.ConditionalCheckFailedError:
        raise NotFoundError('Notification not found')
