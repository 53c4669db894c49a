"""Connection model.

A connection between two users is stored once per unordered pair as
PK=`CONNECTION#<a>|<b>`, SK=`#CONNECTION#` where `a < b`. Each party also gets
a copy under SK=`USER#<party id>`, so a user's connections can be listed from
the inverse index. All three items are written in one transaction.

"""
from typing import Any, Dict, List, Literal, NamedTuple, Optional, Tuple, \
    cast

import boto3.dynamodb.conditions as cond

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import ids
from eventhub.common.models import outbox as Outbox
from eventhub.common.models.errors import ConflictError, ForbiddenError, \
    InvalidIdError, NotFoundError, ValidationError


ConnectionStatus = Literal['PENDING', 'ACCEPTED', 'REJECTED', 'BLOCKED']

STATUSES = ('PENDING', 'ACCEPTED', 'REJECTED', 'BLOCKED')
# Statuses that a party can set on an existing connection.
UPDATE_STATUSES = ('ACCEPTED', 'REJECTED', 'BLOCKED')

_SEPARATOR = '|'


class ConnectionQuery(NamedTuple):
    """Filter for listing the connections of a user."""

    user_id: str
    status: Optional[str] = None

    def validate(self) -> None:
        """Make sure the user id and the status are valid.

        Raises:
            `ValidationError` if a value is malformed.

        """
        ids.validate(self.user_id, 'userId')
        if self.status is not None and self.status not in STATUSES:
            raise ValidationError(f'Invalid status value: {self.status}')

    def get_filter(self) -> Optional[cond.ConditionBase]:
        """Get the filter condition of the query."""
        if self.status is None:
            return None
        return cond.Attr('Status').eq(self.status)


def get_connection_id(user_id: str, other_id: str) -> str:
    """Get the id of the connection between two users.

    The id doesn't depend on the order of the arguments.

    """
    a, b = sorted((user_id, other_id))
    return f'{a}{_SEPARATOR}{b}'


def parse_connection_id(connection_id: str) -> Tuple[str, str]:
    """Get the user ids from a connection id.

    Raises:
        `InvalidIdError` if the connection id is malformed.

    """
    parts = connection_id.split(_SEPARATOR) if connection_id else []
    if len(parts) != 2 or parts[0] >= parts[1]:
        raise InvalidIdError(f'Invalid connection id: {connection_id}')
    for p in parts:
        ids.validate(p, 'connection id')
    return parts[0], parts[1]


def _get_sort_keys(connection_id: str) -> List[db.FullSortKey]:
    # The connection item and the copies of the parties.
    sks: List[db.FullSortKey] = [db.SingleSortKey(ent.Connection)]
    sks.extend(db.SortKey(ent.User, u)
               for u in parse_connection_id(connection_id))
    return sks


def _get_ops(connection_id: str, attributes: db.Attributes,
             update: bool = False) -> List[db.OpArg]:
    pk = db.PartitionKey(ent.Connection, connection_id)
    sks = _get_sort_keys(connection_id)
    if update:
        return [db.UpdateArg(pk, sk, put_attributes=attributes,
                             require_exists=True) for sk in sks]
    else:
        return [db.InsertArg(pk, sk, attributes) for sk in sks]


def _to_connection(item: db.ItemResult) -> Dict[str, Any]:
    res = {k: v for k, v in item.items() if k not in ('PK', 'SK')}
    res['Id'] = item['PK']
    return res


def create(database: db.Database, requester_id: str, recipient_id: str) \
        -> Dict[str, Any]:
    """Send a connection request.

    The recipient is notified asynchronously.

    Args:
        database: The database.
        requester_id: The native id of the user sending the request.
        recipient_id: The native id of the user receiving the request.

    Returns:
        The pending connection.

    Raises:
        `ValidationError` if an id is missing or the users are the same.
        `ConflictError` if there is a connection between the users already.
            The status of the existing connection is in the
            `connectionStatus` detail.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    if not requester_id or not recipient_id:
        raise ValidationError('Both requester and recipient IDs are required')
    ids.validate(requester_id, 'requesterId')
    ids.validate(recipient_id, 'recipientId')
    if requester_id == recipient_id:
        raise ValidationError('Cannot send a connection request to yourself')

    connection_id = get_connection_id(requester_id, recipient_id)
    attributes = {
        'RequesterId': requester_id,
        'RecipientId': recipient_id,
        'Status': 'PENDING',
        'CreatedAt': db.iso_now(),
    }
    entry: Outbox.Entry = {
        'Trigger': 'CONNECTION_REQUESTED',
        'ActorId': requester_id,
        'RecipientId': recipient_id,
        'ConnectionId': connection_id,
    }
    op_args = _get_ops(connection_id, attributes)
    op_args.append(Outbox.get_create_op(entry))
    try:
        database.transact_write_items(op_args)
    except db.ConditionalCheckFailedError:
        existing = find(database, connection_id, consistent=True)
        status = existing['Status'] if existing else None
        raise ConflictError('A connection already exists between these users',
                            connectionStatus=status)

    res = dict(attributes)
    res['Id'] = connection_id
    return res


def find(database: db.Database, connection_id: str,
         consistent: bool = False) -> Optional[Dict[str, Any]]:
    """Fetch a connection if it exists."""
    parse_connection_id(connection_id)
    pk = db.PartitionKey(ent.Connection, connection_id)
    sk = db.SingleSortKey(ent.Connection)
    item = database.get_item(pk, sk, consistent=consistent)
    if item is None:
        return None
    return _to_connection(item)


def fetch(database: db.Database, connection_id: str) -> Dict[str, Any]:
    """Fetch a connection.

    Raises:
        `NotFoundError` if the connection doesn't exist.
        `InvalidIdError` if the connection id is malformed.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    connection = find(database, connection_id)
    if connection is None:
        raise NotFoundError('Connection not found')
    return connection


def fetch_all(database: db.Database, query: ConnectionQuery) \
        -> List[Dict[str, Any]]:
    """Fetch the connections of a user, either as requester or recipient.

    Raises:
        `ValidationError` if the query is invalid.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    query.validate()
    items = database.query_inverse(db.SortKey(ent.User, query.user_id),
                                   db.PrefixSortKey(ent.Connection),
                                   filter_condition=query.get_filter())
    return [_to_connection(item) for item in items]


def fetch_friend_ids(database: db.Database, user_id: str) -> List[str]:
    """Fetch the ids of the users with an accepted connection to a user."""
    query = ConnectionQuery(user_id=user_id, status='ACCEPTED')
    res = []
    for c in fetch_all(database, query):
        if c['RequesterId'] == user_id:
            res.append(c['RecipientId'])
        else:
            res.append(c['RequesterId'])
    return res


def _check_party(connection: Dict[str, Any], user_id: Optional[str],
                 action: str) -> None:
    if user_id not in (connection['RequesterId'], connection['RecipientId']):
        raise ForbiddenError(f'Not authorized to {action} this connection')


def update_status(database: db.Database, connection_id: str, status: str,
                  user_id: str) -> Dict[str, Any]:
    """Accept, reject or block a connection.

    Only the recipient can accept a request. Accepting notifies the requester
    asynchronously. Setting the current status again is a no-op.

    Args:
        database: The database.
        connection_id: The connection id.
        status: The new status.
        user_id: The native id of the party making the change.

    Returns:
        The updated connection.

    Raises:
        `ValidationError` if the status is invalid.
        `NotFoundError` if the connection doesn't exist.
        `ForbiddenError` if the user is not allowed to make the change.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    if status not in UPDATE_STATUSES:
        raise ValidationError('Invalid status value')
    connection = fetch(database, connection_id)
    _check_party(connection, user_id, 'update')
    if status == 'ACCEPTED' and user_id != connection['RecipientId']:
        raise ForbiddenError('Only the recipient can accept a connection')
    if connection['Status'] == status:
        return connection

    attributes = {'Status': cast(ConnectionStatus, status)}
    op_args = _get_ops(connection['Id'], attributes, update=True)
    if status == 'ACCEPTED':
        entry: Outbox.Entry = {
            'Trigger': 'CONNECTION_ACCEPTED',
            'ActorId': connection['RecipientId'],
            'RecipientId': connection['RequesterId'],
            'ConnectionId': connection['Id'],
        }
        op_args.append(Outbox.get_create_op(entry))
    try:
        database.transact_write_items(op_args)
    except db.ConditionalCheckFailedError:
        raise NotFoundError('Connection not found')

    connection['Status'] = status
    connection['UpdatedAt'] = db.iso_now()
    return connection


def delete(database: db.Database, connection_id: str, user_id: str) -> None:
    """Remove a connection on behalf of either party.

    Raises:
        `NotFoundError` if the connection doesn't exist.
        `ForbiddenError` if the user is not a party of the connection.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    connection = fetch(database, connection_id)
    _check_party(connection, user_id, 'delete')
    pk = db.PartitionKey(ent.Connection, connection['Id'])
    sks = _get_sort_keys(connection['Id'])
    database.transact_write_items([db.DeleteArg(pk, sk) for sk in sks])
