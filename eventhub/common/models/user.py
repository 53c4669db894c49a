"""User model.

Users are stored as PK=`USER#<id>`, SK=`#USER#`. Email addresses are unique:
each user has an email item PK=`EMAIL#<email>`, SK=`#EMAIL#` that is inserted
in the same transaction as the user. Team memberships are stored under the
user's partition as PK=`USER#<id>`, SK=`ORG#<organization id>`.

"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import alias, ids
from eventhub.common.models.errors import ConflictError, NotFoundError, \
    ValidationError

# Profile attributes that the user may edit.
EDITABLE_ATTRIBUTES = frozenset([
    'Bio',
    'Interests',
    'Name',
    'Organization',
    'Position',
    'ProfilePicture',
    'SocialMedia',
])


def _get_email_op(email: str, user_id: str) -> db.InsertArg:
    pk = db.PartitionKey(ent.Email, email)
    sk = db.SingleSortKey(ent.Email)
    return db.InsertArg(pk, sk, {'UserId': user_id})


def _normalize_email(email: Any) -> str:
    if not isinstance(email, str) or '@' not in email:
        raise ValidationError('A valid email is required')
    return email.strip().lower()


def get_membership_op(user_id: str, organization_id: str) -> db.InsertArg:
    """Get an op that adds a user to the team of an organization."""
    pk = db.PartitionKey(ent.User, user_id)
    sk = db.SortKey(ent.Org, organization_id)
    return db.InsertArg(pk, sk, {
        'UserId': user_id,
        'OrganizationId': organization_id
    })


def create(database: db.Database, attributes: Mapping[str, Any],
           external_id: Optional[str] = None) -> Dict[str, Any]:
    """Create a user.

    Args:
        database: The database.
        attributes: The profile attributes. `Name` and `Email` are required.
        external_id: Optional external id of the user.

    Returns:
        The created user.

    Raises:
        `ValidationError` if a required attribute is missing.
        `ConflictError` if the email address or the external id is taken.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    name = attributes.get('Name')
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Name is required')
    email = _normalize_email(attributes.get('Email'))
    if external_id is not None:
        ids.validate(external_id)

    user_id = ids.new_id()
    user_attributes = {k: v for k, v in attributes.items()
                       if k in EDITABLE_ATTRIBUTES}
    user_attributes['Email'] = email
    user_attributes.setdefault('Interests', [])
    user_attributes['CreatedAt'] = db.iso_now()
    if external_id is not None:
        user_attributes['ExternalId'] = external_id

    op_args: List[db.OpArg] = [
        db.InsertArg(db.PartitionKey(ent.User, user_id),
                     db.SingleSortKey(ent.User),
                     user_attributes),
        _get_email_op(email, user_id)
    ]
    if external_id is not None:
        op_args.append(alias.get_create_op(ent.User, external_id, user_id))
    try:
        database.transact_write_items(op_args)
    except db.ConditionalCheckFailedError:
        raise ConflictError('User already exists')

    res = dict(user_attributes)
    res['Id'] = user_id
    return res


def fetch(database: db.Database, user_id: str) -> Dict[str, Any]:
    """Fetch a user by its native or external id.

    Raises:
        `NotFoundError` if the user doesn't exist.
        `InvalidIdError` if the id is malformed.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    user = alias.resolve(database, ent.User, user_id)
    if user is None:
        raise NotFoundError('User not found')
    return user


def find(database: db.Database, user_id: str) -> Optional[Dict[str, Any]]:
    """Fetch a user by its native id if it exists."""
    item = database.get_item(db.PartitionKey(ent.User, user_id),
                             db.SingleSortKey(ent.User))
    if item is None:
        return None
    return alias.to_entity(item)


def fetch_many(database: db.Database, user_ids: Iterable[str]) \
        -> Dict[str, Dict[str, Any]]:
    """Fetch users by native id.

    Returns:
        A mapping from user id to user. Missing users are left out.

    """
    res = {}
    for user_id in set(user_ids):
        user = find(database, user_id)
        if user is not None:
            res[user_id] = user
    return res


def fetch_by_email(database: db.Database, email: str) -> Dict[str, Any]:
    """Fetch a user by email address.

    Raises:
        `NotFoundError` if there is no user with the email address.
        `ValidationError` if the email is malformed.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    email = _normalize_email(email)
    email_item = database.get_item(db.PartitionKey(ent.Email, email),
                                   db.SingleSortKey(ent.Email))
    if email_item is None:
        raise NotFoundError('User not found')
    user = find(database, email_item['UserId'])
    if user is None:
        raise NotFoundError('User not found')
    return user


def fetch_all(database: db.Database) -> List[Dict[str, Any]]:
    """Fetch all users.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    items = database.query_inverse(db.SingleSortKey(ent.User),
                                   db.PrefixSortKey(ent.User))
    return [alias.to_entity(item) for item in items]


def fetch_organization_ids(database: db.Database, user_id: str) -> List[str]:
    """Fetch the ids of the organizations that a user is a team member of."""
    items = database.query_prefix(db.PartitionKey(ent.User, user_id),
                                  db.PrefixSortKey(ent.Org))
    return [item['SK'] for item in items]


def update(database: db.Database, user_id: str,
           attributes: Mapping[str, Any]) -> Dict[str, Any]:
    """Update the profile of a user.

    Only the editable profile attributes are updated, the rest is ignored.

    Args:
        database: The database.
        user_id: The native or external id of the user.
        attributes: The attributes to update.

    Returns:
        The updated user.

    Raises:
        `NotFoundError` if the user doesn't exist.
        `ValidationError` if the name would be emptied or there is nothing to
            update.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    user = fetch(database, user_id)
    updates = {k: v for k, v in attributes.items() if k in EDITABLE_ATTRIBUTES}
    if not updates:
        raise ValidationError('No editable attributes provided')
    if 'Name' in updates and \
            (not isinstance(updates['Name'], str) or
             not updates['Name'].strip()):
        raise ValidationError('Name is required')

    pk = db.PartitionKey(ent.User, user['Id'])
    sk = db.SingleSortKey(ent.User)
    update_arg = db.UpdateArg(pk, sk, put_attributes=updates,
                              require_exists=True)
    try:
        database.update_item(update_arg)
    except db.ConditionalCheckFailedError:
        raise NotFoundError('User not found')
    user.update(update_arg.get_updates())
    return user
