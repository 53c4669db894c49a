"""Badge claims.

A user can claim a badge once. Participant badges can only be claimed by
users who are checked in for the badge's event, other badge types have no
precondition. Claims are stored as PK=`BADGE#<badge id>`,
SK=`CLAIM#<user id>` and listed per user from the inverse index.

"""
from typing import Any, Dict, Set

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import badge as Badge
from eventhub.common.models import event as Event
from eventhub.common.models import ids
from eventhub.common.models import registration as Registration
from eventhub.common.models.errors import ConflictError, ForbiddenError, \
    ValidationError


def create(database: db.Database, badge_id: str, user_id: str,
           event_id: str) -> Dict[str, Any]:
    """Claim a badge for a user.

    Args:
        database: The database.
        badge_id: The id of the badge.
        user_id: The native id of the user.
        event_id: The id of the event the badge is claimed at.

    Returns:
        The claim.

    Raises:
        `ValidationError` if an id is missing or the badge belongs to an
            other event.
        `NotFoundError` if the badge or the event doesn't exist.
        `ForbiddenError` if the badge is a participant badge and the user is
            not checked in for the event.
        `ConflictError` if the user has claimed the badge already.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    if not badge_id or not user_id or not event_id:
        raise ValidationError('Missing required fields')
    ids.validate(user_id, 'userId')
    ids.validate(event_id, 'eventId')

    badge = Badge.fetch(database, badge_id)
    event = Event.fetch(database, event_id)
    if badge.get('EventId') not in (event['Id'], event.get('ExternalId')):
        raise ValidationError('Badge does not belong to this event')
    badge_type = badge.get('Type', 'CUSTOM')
    if badge_type == 'PARTICIPANT' and \
            not Registration.is_checked_in(database, event['Id'], user_id):
        raise ForbiddenError('User not checked in for this event')

    pk = db.PartitionKey(ent.Badge, badge['Id'])
    sk = db.SortKey(ent.Claim, user_id)
    attributes = {
        'BadgeId': badge['Id'],
        'UserId': user_id,
        'EventId': event['Id'],
        'BadgeType': badge_type,
        'ClaimedAt': db.iso_now(),
    }
    try:
        database.insert(pk, sk, attributes)
    except db.ConditionalCheckFailedError:
        raise ConflictError('Badge already claimed')
    return attributes


def fetch_claimed_badge_ids(database: db.Database, user_id: str) -> Set[str]:
    """Fetch the ids of the badges claimed by a user."""
    items = database.query_inverse(db.SortKey(ent.Claim, user_id),
                                   db.PrefixSortKey(ent.Badge))
    return {item['PK'] for item in items}

