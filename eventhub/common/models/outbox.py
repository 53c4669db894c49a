"""Outbox of pending notification fan-outs.

A write that should notify users adds an outbox item in the same transaction.
The outbox items are delivered from the table stream by
`eventhub.handlers.notifications.fanout`, which deletes them afterwards.
Undelivered items expire after `config.outbox_ttl` seconds.

"""
import time
from typing import Any, Literal, Mapping, Optional, TypedDict, cast

from boto3.dynamodb.types import TypeDeserializer

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.config import config
from eventhub.common.models import ids
from eventhub.common.types.lambd import DynamoImage


Trigger = Literal[
    'CONNECTION_ACCEPTED',
    'CONNECTION_REQUESTED',
    'EVENT_PUBLISHED',
    'REGISTRATION_CREATED',
]


class _EntryTotal(TypedDict):
    Trigger: Trigger
    # The user or organization whose action triggered the notifications.
    ActorId: str


class Entry(_EntryTotal, total=False):
    """Outbox entry."""

    EventId: str
    EventTitle: str
    OrganizationId: str
    ConnectionId: str
    # The single recipient of connection notifications.
    RecipientId: str


class OutboxItem(Entry, total=False):
    """Outbox entry as read from the stream."""

    OutboxId: str
    CreatedAt: str
    ExpiresAt: int


_deserializer = TypeDeserializer()


def get_create_op(entry: Entry) -> db.InsertArg:
    """Get an op that enqueues an outbox entry.

    Args:
        entry: The outbox entry.

    Returns:
        The insert op to add to the transaction of the triggering write.

    """
    pk = db.PartitionKey(ent.Outbox, ids.new_sortable_id())
    sk = db.SingleSortKey(ent.Outbox)
    attributes = dict(entry)
    attributes['ExpiresAt'] = int(time.time()) + config.outbox_ttl
    return db.InsertArg(pk, sk, attributes)


def delete(database: db.Database, outbox_id: str) -> None:
    """Delete a delivered outbox entry.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    pk = db.PartitionKey(ent.Outbox, outbox_id)
    sk = db.SingleSortKey(ent.Outbox)
    database.delete_item(pk, sk)


def from_image(image: DynamoImage) -> Optional[OutboxItem]:
    """Parse an outbox entry from a stream record image.

    Args:
        image: The new image of a stream record in DynamoDB JSON.

    Returns:
        The outbox entry or None if the image is not an outbox item.

    """
    item: Mapping[str, Any] = {k: _deserializer.deserialize(v)
                               for k, v in image.items()}
    pk = item.get('PK', '')
    if not pk.startswith(ent.Outbox.to_prefix()):
        return None
    res = {k: v for k, v in item.items() if k not in ('PK', 'SK')}
    res['OutboxId'] = pk[len(ent.Outbox.to_prefix()):]
    if 'ExpiresAt' in res:
        res['ExpiresAt'] = int(res['ExpiresAt'])
    return cast(OutboxItem, res)
