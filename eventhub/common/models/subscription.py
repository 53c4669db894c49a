"""Subscription model.

A user subscribes to an organization to get notified about its new events.
Subscriptions are stored as PK=`ORG#<organization id>`,
SK=`SUBSCRIBER#<user id>`, so there is at most one per pair.

"""
import math
from typing import Any, Dict, List, NamedTuple, Tuple

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import user as User


class Page(NamedTuple):
    """A page of subscribers."""

    subscribers: List[Dict[str, Any]]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        """Get the number of pages."""
        return math.ceil(self.total / self.limit)


def _get_keys(organization_id: str, user_id: str) \
        -> Tuple[db.PartitionKey, db.SortKey]:
    return (db.PartitionKey(ent.Org, organization_id),
            db.SortKey(ent.Subscriber, user_id))


def create(database: db.Database, organization_id: str, user_id: str) -> bool:
    """Subscribe a user to an organization.

    Subscribing again is a no-op.

    Args:
        database: The database.
        organization_id: The native id of the organization.
        user_id: The native id of the user.

    Returns:
        True if this is a new subscription.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    pk, sk = _get_keys(organization_id, user_id)
    attributes = {
        'OrganizationId': organization_id,
        'UserId': user_id
    }
    try:
        database.insert(pk, sk, attributes)
    except db.ConditionalCheckFailedError:
        return False
    return True


def delete(database: db.Database, organization_id: str, user_id: str) -> bool:
    """Unsubscribe a user from an organization.

    Returns:
        True if the user was subscribed.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    pk, sk = _get_keys(organization_id, user_id)
    try:
        database.delete_item(pk, sk, idempotent=False)
    except db.ConditionalCheckFailedError:
        return False
    return True


def fetch_all(database: db.Database, organization_id: str) \
        -> List[Dict[str, Any]]:
    """Fetch the subscriptions of an organization, newest first."""
    items = database.query_prefix(db.PartitionKey(ent.Org, organization_id),
                                  db.PrefixSortKey(ent.Subscriber))
    subs = [dict(item) for item in items]
    subs.sort(key=lambda s: s['CreatedAt'], reverse=True)
    return subs


def fetch_subscriber_ids(database: db.Database, organization_id: str) \
        -> List[str]:
    """Fetch the user ids of the subscribers of an organization."""
    items = database.query_prefix(db.PartitionKey(ent.Org, organization_id),
                                  db.PrefixSortKey(ent.Subscriber))
    return [item['SK'] for item in items]


def count(database: db.Database, organization_id: str) -> int:
    """Count the subscribers of an organization."""
    return len(fetch_subscriber_ids(database, organization_id))


def fetch_page(database: db.Database, organization_id: str, page: int,
               limit: int) -> Page:
    """Fetch a page of subscribers with their user details.

    Args:
        database: The database.
        organization_id: The native id of the organization.
        page: The page number starting from 1.
        limit: The page size.

    Returns:
        The subscribers' names, emails, profile pictures and subscription
        times, newest subscription first.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    subs = fetch_all(database, organization_id)
    start = (page - 1) * limit
    page_subs = subs[start:start + limit]
    users = User.fetch_many(database, [s['UserId'] for s in page_subs])
    subscribers = []
    for s in page_subs:
        user = users.get(s['UserId'])
        if user is None:
            continue
        subscribers.append({
            'Id': user['Id'],
            'Name': user.get('Name'),
            'Email': user.get('Email'),
            'ProfilePicture': user.get('ProfilePicture'),
            'SubscribedAt': s['CreatedAt'],
        })
    return Page(subscribers=subscribers, total=len(subs), page=page,
                limit=limit)
