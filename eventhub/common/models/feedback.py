"""Feedback model.

Registered users can rate an event once. Feedback is stored as
PK=`EVENT#<event id>`, SK=`FEEDBACK#<user id>`.

"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import ids
from eventhub.common.models import registration as Registration
from eventhub.common.models import user as User
from eventhub.common.models.errors import ConflictError, ForbiddenError, \
    ValidationError


def _validate_rating(rating: Any) -> int:
    # Bool is a subclass of int.
    if isinstance(rating, bool) or not isinstance(rating, (int, Decimal)):
        raise ValidationError('Rating must be between 1 and 5')
    if rating != int(rating) or not 1 <= rating <= 5:
        raise ValidationError('Rating must be between 1 and 5')
    return int(rating)


def create(database: db.Database, event_id: str, user_id: str, rating: Any,
           comment: Optional[str] = None, anonymous: bool = False) -> None:
    """Submit feedback on an event.

    The name, email and profile picture of the user are stored with the
    feedback unless it's anonymous.

    Args:
        database: The database.
        event_id: The native id of the event.
        user_id: The native id of the user.
        rating: Integer rating from 1 to 5.
        comment: Optional comment.
        anonymous: Whether to hide the identity of the user.

    Raises:
        `ValidationError` if the user id or the rating is invalid.
        `ForbiddenError` if the user is not registered for the event.
        `ConflictError` if the user has submitted feedback already.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    ids.validate(user_id, 'userId')
    rating = _validate_rating(rating)
    if comment is not None and not isinstance(comment, str):
        raise ValidationError('Comment must be a string')
    if Registration.fetch(database, event_id, user_id) is None:
        raise ForbiddenError(
            'You must be registered for this event to provide feedback')

    attributes: Dict[str, Any] = {
        'EventId': event_id,
        'UserId': user_id,
        'Rating': rating,
        'Comment': comment or '',
        'Anonymous': bool(anonymous),
        'UserName': None,
        'UserEmail': None,
        'UserProfilePicture': None,
    }
    if not anonymous:
        user = User.find(database, user_id)
        if user is not None:
            attributes['UserName'] = user.get('Name')
            attributes['UserEmail'] = user.get('Email')
            attributes['UserProfilePicture'] = user.get('ProfilePicture')

    pk = db.PartitionKey(ent.Event, event_id)
    sk = db.SortKey(ent.Feedback, user_id)
    try:
        database.insert(pk, sk, attributes)
    except db.ConditionalCheckFailedError:
        raise ConflictError(
            'You have already submitted feedback for this event')


def fetch_all(database: db.Database, event_id: str) -> List[Dict[str, Any]]:
    """Fetch the feedback on an event, newest first.

    The user id is left out from anonymous feedback.

    """
    items = database.query_prefix(db.PartitionKey(ent.Event, event_id),
                                  db.PrefixSortKey(ent.Feedback))
    res = []
    for item in items:
        f = {k: v for k, v in item.items() if k not in ('PK', 'SK')}
        if f.get('Anonymous'):
            f.pop('UserId', None)
        res.append(f)
    res.sort(key=lambda f: f['CreatedAt'], reverse=True)
    return res
