"""Organization model.

Organizations are stored as PK=`ORG#<id>`, SK=`#ORG#`. Names are unique: each
organization has a name item PK=`ORGNAME#<name>`, SK=`#ORGNAME#` that is
written in the same transaction as the organization.

"""
from typing import Any, Dict, List, Mapping, Optional

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import alias, ids
from eventhub.common.models import user as User
from eventhub.common.models.errors import ConflictError, NotFoundError, \
    ValidationError

EDITABLE_ATTRIBUTES = frozenset([
    'Description',
    'Email',
    'Location',
    'Logo',
    'Name',
    'SocialMedia',
    'Website',
])

_NAME_TAKEN = 'Organization with this name already exists'


def _get_name_create_op(name: str, organization_id: str) -> db.InsertArg:
    pk = db.PartitionKey(ent.OrgName, name)
    sk = db.SingleSortKey(ent.OrgName)
    return db.InsertArg(pk, sk, {'OrganizationId': organization_id})


def _get_name_delete_op(name: str) -> db.DeleteArg:
    pk = db.PartitionKey(ent.OrgName, name)
    sk = db.SingleSortKey(ent.OrgName)
    return db.DeleteArg(pk, sk)


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Organization name is required')
    return name.strip()


def create(database: db.Database, owner_id: str,
           attributes: Mapping[str, Any],
           external_id: Optional[str] = None) -> Dict[str, Any]:
    """Create an organization with the owner as the first team member.

    Args:
        database: The database.
        owner_id: The native or external id of the owner.
        attributes: The organization attributes. `Name` is required.
        external_id: Optional external id of the organization.

    Returns:
        The created organization.

    Raises:
        `ValidationError` if the name is missing.
        `NotFoundError` if the owner doesn't exist.
        `ConflictError` if the name or the external id is taken.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    name = _validate_name(attributes.get('Name'))
    if external_id is not None:
        ids.validate(external_id)
    owner = User.fetch(database, owner_id)

    organization_id = ids.new_id()
    org_attributes = {k: v for k, v in attributes.items()
                      if k in EDITABLE_ATTRIBUTES}
    org_attributes['Name'] = name
    org_attributes['OwnerId'] = owner['Id']
    org_attributes['CreatedAt'] = db.iso_now()
    if external_id is not None:
        org_attributes['ExternalId'] = external_id

    op_args: List[db.OpArg] = [
        db.InsertArg(db.PartitionKey(ent.Org, organization_id),
                     db.SingleSortKey(ent.Org),
                     org_attributes),
        _get_name_create_op(name, organization_id),
        User.get_membership_op(owner['Id'], organization_id)
    ]
    if external_id is not None:
        op_args.append(alias.get_create_op(ent.Org, external_id,
                                           organization_id))
    try:
        database.transact_write_items(op_args)
    except db.ConditionalCheckFailedError:
        raise ConflictError(_NAME_TAKEN)

    res = dict(org_attributes)
    res['Id'] = organization_id
    return res


def fetch(database: db.Database, organization_id: str) -> Dict[str, Any]:
    """Fetch an organization by its native or external id.

    Raises:
        `NotFoundError` if the organization doesn't exist.
        `InvalidIdError` if the id is malformed.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    org = alias.resolve(database, ent.Org, organization_id)
    if org is None:
        raise NotFoundError('Organization not found')
    return org


def find(database: db.Database, organization_id: str) \
        -> Optional[Dict[str, Any]]:
    """Fetch an organization by its native id if it exists."""
    item = database.get_item(db.PartitionKey(ent.Org, organization_id),
                             db.SingleSortKey(ent.Org))
    if item is None:
        return None
    return alias.to_entity(item)


def fetch_all(database: db.Database) -> List[Dict[str, Any]]:
    """Fetch all organizations.

    Raises:
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    items = database.query_inverse(db.SingleSortKey(ent.Org),
                                   db.PrefixSortKey(ent.Org))
    return [alias.to_entity(item) for item in items]


def update(database: db.Database, organization_id: str,
           attributes: Mapping[str, Any]) -> Dict[str, Any]:
    """Update an organization.

    Renaming swaps the name items in the same transaction as the update, so
    names stay unique.

    Args:
        database: The database.
        organization_id: The native or external id of the organization.
        attributes: The attributes to update.

    Returns:
        The updated organization.

    Raises:
        `NotFoundError` if the organization doesn't exist.
        `ValidationError` if there is nothing to update or the name would be
            emptied.
        `ConflictError` if the new name is taken.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    org = fetch(database, organization_id)
    updates = {k: v for k, v in attributes.items() if k in EDITABLE_ATTRIBUTES}
    if not updates:
        raise ValidationError('No editable attributes provided')

    pk = db.PartitionKey(ent.Org, org['Id'])
    sk = db.SingleSortKey(ent.Org)
    op_args: List[db.OpArg] = []
    if 'Name' in updates:
        updates['Name'] = _validate_name(updates['Name'])
        if updates['Name'] != org['Name']:
            op_args.append(_get_name_delete_op(org['Name']))
            op_args.append(_get_name_create_op(updates['Name'], org['Id']))
    update_arg = db.UpdateArg(pk, sk, put_attributes=updates,
                              require_exists=True)
    op_args.append(update_arg)

    try:
        if len(op_args) == 1:
            database.update_item(update_arg)
        else:
            database.transact_write_items(op_args)
    except db.ConditionalCheckFailedError:
        # Either the organization was deleted or the new name is taken.
        if 'Name' in updates and updates['Name'] != org['Name']:
            raise ConflictError(_NAME_TAKEN)
        raise NotFoundError('Organization not found')

    org.update(update_arg.get_updates())
    return org


def add_member(database: db.Database, organization_id: str,
               user_id: str) -> None:
    """Add a user to the team of an organization.

    Raises:
        `NotFoundError` if the organization or the user doesn't exist.
        `ConflictError` if the user is a team member already.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    org = fetch(database, organization_id)
    user = User.fetch(database, user_id)
    try:
        database.put_item(User.get_membership_op(user['Id'], org['Id']))
    except db.ConditionalCheckFailedError:
        raise ConflictError('User is already a team member')


def is_member(database: db.Database, organization_id: str,
              user_id: str) -> bool:
    """Check whether a user is a team member of an organization.

    Args:
        database: The database.
        organization_id: The native id of the organization.
        user_id: The native id of the user.

    """
    item = database.get_item(db.PartitionKey(ent.User, user_id),
                             db.SortKey(ent.Org, organization_id))
    return item is not None


def fetch_team(database: db.Database, organization_id: str) \
        -> List[Dict[str, Any]]:
    """Fetch the team members of an organization.

    Args:
        database: The database.
        organization_id: The native or external id of the organization.

    Returns:
        The team members' user profiles.

    Raises:
        `NotFoundError` if the organization doesn't exist.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    org = fetch(database, organization_id)
    memberships = database.query_inverse(db.SortKey(ent.Org, org['Id']),
                                         db.PrefixSortKey(ent.User))
    user_ids = [m['PK'] for m in memberships]
    users = User.fetch_many(database, user_ids)
    return [users[uid] for uid in user_ids if uid in users]
