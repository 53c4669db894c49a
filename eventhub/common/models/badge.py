"""Badge model.

Badges are stored as PK=`BADGE#<id>`, SK=`#BADGE#`. Claims of a badge are
stored in the badge's partition, see `eventhub.common.models.badge_claim`.

"""
from typing import Any, Dict, List, Literal, Mapping, NamedTuple, Optional

import boto3.dynamodb.conditions as cond

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import alias, ids
from eventhub.common.models.errors import NotFoundError, ValidationError


BadgeType = Literal['PARTICIPANT', 'SPEAKER', 'SPONSOR', 'VOLUNTEER',
                    'CUSTOM']

BADGE_TYPES = ('PARTICIPANT', 'SPEAKER', 'SPONSOR', 'VOLUNTEER', 'CUSTOM')

_PROTECTED_ATTRIBUTES = frozenset([
    'BadgeType',
    'CreatedAt',
    'Id',
    'PK',
    'SK',
    'UpdatedAt',
    '_id',
])


class BadgeQuery(NamedTuple):
    """Filter for listing badges."""

    event_id: Optional[str] = None

    def validate(self) -> None:
        """Make sure the event id is valid.

        Raises:
            `InvalidIdError` if the event id is malformed.

        """
        if self.event_id is not None:
            ids.validate(self.event_id, 'eventId')

    def get_filter(self) -> Optional[cond.ConditionBase]:
        """Get the filter condition of the query."""
        if self.event_id is None:
            return None
        return cond.Attr('EventId').eq(self.event_id)


def _get_type(attributes: Mapping[str, Any]) -> BadgeType:
    # Clients send either `type` or `badgeType`.
    value = attributes.get('Type') or attributes.get('BadgeType') or 'CUSTOM'
    if not isinstance(value, str) or value.upper() not in BADGE_TYPES:
        raise ValidationError(f'Invalid badge type: {value}')
    return value.upper()  # type: ignore


def create(database: db.Database, attributes: Mapping[str, Any]) \
        -> Dict[str, Any]:
    """Create a badge.

    Args:
        database: The database.
        attributes: The badge attributes. `Name`, `EventId` and
            `OrganizationId` are required. The type defaults to `CUSTOM`.

    Returns:
        The created badge.

    Raises:
        `ValidationError` if a required attribute is missing or the type is
            invalid.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    if not attributes.get('Name') or not attributes.get('EventId') or \
            not attributes.get('OrganizationId'):
        raise ValidationError('Missing required fields')
    ids.validate(attributes['EventId'], 'eventId')
    ids.validate(attributes['OrganizationId'], 'organizationId')

    badge_id = ids.new_id()
    badge_attributes = {k: v for k, v in attributes.items()
                        if k not in _PROTECTED_ATTRIBUTES}
    badge_attributes['Type'] = _get_type(attributes)
    badge_attributes['CreatedAt'] = db.iso_now()
    database.insert(db.PartitionKey(ent.Badge, badge_id),
                    db.SingleSortKey(ent.Badge),
                    badge_attributes)
    res = dict(badge_attributes)
    res['Id'] = badge_id
    return res


def fetch(database: db.Database, badge_id: str) -> Dict[str, Any]:
    """Fetch a badge.

    Raises:
        `NotFoundError` if the badge doesn't exist.
        `InvalidIdError` if the id is malformed.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    badge = alias.resolve(database, ent.Badge, badge_id, consistent=True)
    if badge is None:
        raise NotFoundError('Badge not found')
    return badge


def fetch_all(database: db.Database, query: BadgeQuery) \
        -> List[Dict[str, Any]]:
    """Fetch badges.

    Raises:
        `ValidationError` if the query is invalid.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    query.validate()
    items = database.query_inverse(db.SingleSortKey(ent.Badge),
                                   db.PrefixSortKey(ent.Badge),
                                   filter_condition=query.get_filter())
    return [alias.to_entity(item) for item in items]
