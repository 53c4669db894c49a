"""Event model.

Events are stored as PK=`EVENT#<id>`, SK=`#EVENT#`. Apart from `Title`,
events are free-form: every attribute provided at creation is stored.

"""
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

import boto3.dynamodb.conditions as cond

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import alias, ids
from eventhub.common.models import organization as Organization
from eventhub.common.models import outbox as Outbox
from eventhub.common.models.errors import ConflictError, ForbiddenError, \
    NotFoundError, ValidationError

# Attributes managed by the app that can't be set by clients.
_PROTECTED_ATTRIBUTES = frozenset([
    'CreatedAt',
    'ExternalId',
    'Id',
    'OrganizationId',
    'PK',
    'SK',
    'UpdatedAt',
    '_id',
])


class EventQuery(NamedTuple):
    """Filter for listing events."""

    organization_id: Optional[str] = None
    # Events where this organization is one of the partners.
    partner_organization: Optional[str] = None

    def validate(self) -> None:
        """Make sure the filter values are ids.

        Raises:
            `InvalidIdError` if a filter value is malformed.

        """
        if self.organization_id is not None:
            ids.validate(self.organization_id, 'organizationId')
        if self.partner_organization is not None:
            ids.validate(self.partner_organization, 'partnerOrganizations')

    def get_filter(self) -> Optional[cond.ConditionBase]:
        """Get the filter condition of the query."""
        conditions = []
        if self.organization_id is not None:
            conditions.append(cond.Attr('OrganizationId').eq(
                self.organization_id))
        if self.partner_organization is not None:
            conditions.append(cond.Attr('PartnerOrganizations').contains(
                self.partner_organization))
        if not conditions:
            return None
        res = conditions[0]
        for c in conditions[1:]:
            res = res & c
        return res


def _validate_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError('Event title is required')
    return title


def create(database: db.Database, attributes: Mapping[str, Any],
           external_id: Optional[str] = None) -> Dict[str, Any]:
    """Create an event.

    If the event belongs to an organization, the organization's subscribers
    are notified asynchronously.

    Args:
        database: The database.
        attributes: The event attributes. `Title` is required.
        external_id: Optional external id of the event.

    Returns:
        The created event.

    Raises:
        `ValidationError` if the title is missing.
        `ConflictError` if the external id is taken.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    _validate_title(attributes.get('Title'))
    organization_id = attributes.get('OrganizationId')
    if organization_id is not None:
        ids.validate(organization_id, 'organizationId')
    partners = attributes.get('PartnerOrganizations')
    if partners is not None and \
            (not isinstance(partners, list) or
             not all(isinstance(p, str) for p in partners)):
        raise ValidationError('partnerOrganizations must be a list of ids')
    if external_id is not None:
        ids.validate(external_id)

    event_id = ids.new_id()
    event_attributes = {k: v for k, v in attributes.items()
                        if k not in _PROTECTED_ATTRIBUTES}
    if organization_id is not None:
        event_attributes['OrganizationId'] = organization_id
    if external_id is not None:
        event_attributes['ExternalId'] = external_id
    event_attributes['CreatedAt'] = db.iso_now()

    op_args: List[db.OpArg] = [
        db.InsertArg(db.PartitionKey(ent.Event, event_id),
                     db.SingleSortKey(ent.Event),
                     event_attributes)
    ]
    if external_id is not None:
        op_args.append(alias.get_create_op(ent.Event, external_id, event_id))
    if organization_id is not None:
        entry: Outbox.Entry = {
            'Trigger': 'EVENT_PUBLISHED',
            'ActorId': organization_id,
            'OrganizationId': organization_id,
            'EventId': event_id,
            'EventTitle': event_attributes['Title'],
        }
        op_args.append(Outbox.get_create_op(entry))

    if len(op_args) == 1:
        database.put_item(op_args[0])
    else:
        try:
            database.transact_write_items(op_args)
        except db.ConditionalCheckFailedError:
            raise ConflictError('Event already exists')

    res = dict(event_attributes)
    res['Id'] = event_id
    return res


def fetch(database: db.Database, event_id: str) -> Dict[str, Any]:
    """Fetch an event by its native or external id.

    Raises:
        `NotFoundError` if the event doesn't exist.
        `InvalidIdError` if the id is malformed.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    event = alias.resolve(database, ent.Event, event_id)
    if event is None:
        raise NotFoundError('Event not found')
    return event


def find(database: db.Database, event_id: str) -> Optional[Dict[str, Any]]:
    """Fetch an event by its native id if it exists."""
    item = database.get_item(db.PartitionKey(ent.Event, event_id),
                             db.SingleSortKey(ent.Event))
    if item is None:
        return None
    return alias.to_entity(item)


def fetch_all(database: db.Database, query: EventQuery) \
        -> List[Dict[str, Any]]:
    """Fetch events, newest first.

    Args:
        database: The database.
        query: The filter.

    Raises:
        `ValidationError` if the query is invalid.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    query.validate()
    items = database.query_inverse(db.SingleSortKey(ent.Event),
                                   db.PrefixSortKey(ent.Event),
                                   filter_condition=query.get_filter())
    events = [alias.to_entity(item) for item in items]
    events.sort(key=lambda e: e.get('CreatedAt', ''), reverse=True)
    return events


def _check_organizer(database: db.Database, event: Mapping[str, Any],
                     user_id: str) -> None:
    ids.validate(user_id, 'userId')
    organization_id = event.get('OrganizationId')
    if organization_id is None:
        raise ForbiddenError('Event has no organizer')
    org = alias.resolve(database, ent.Org, organization_id)
    if org is None or not Organization.is_member(database, org['Id'],
                                                 user_id):
        raise ForbiddenError('Only the organizer can modify this event')


def update(database: db.Database, event_id: str, user_id: str,
           attributes: Mapping[str, Any]) -> Dict[str, Any]:
    """Update an event on behalf of a team member of its organization.

    Args:
        database: The database.
        event_id: The native or external id of the event.
        user_id: The native id of the user making the change.
        attributes: The attributes to update.

    Returns:
        The updated event.

    Raises:
        `NotFoundError` if the event doesn't exist.
        `ForbiddenError` if the user is not a team member of the organizer.
        `ValidationError` if there is nothing to update or the title would
            be emptied.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    event = fetch(database, event_id)
    _check_organizer(database, event, user_id)
    updates = {k: v for k, v in attributes.items()
               if k not in _PROTECTED_ATTRIBUTES}
    if not updates:
        raise ValidationError('No attributes to update')
    if 'Title' in updates:
        _validate_title(updates['Title'])

    pk = db.PartitionKey(ent.Event, event['Id'])
    sk = db.SingleSortKey(ent.Event)
    update_arg = db.UpdateArg(pk, sk, put_attributes=updates,
                              require_exists=True)
    try:
        database.update_item(update_arg)
    except db.ConditionalCheckFailedError:
        raise NotFoundError('Event not found')
    event.update(update_arg.get_updates())
    return event


def delete(database: db.Database, event_id: str, user_id: str) -> None:
    """Delete an event on behalf of a team member of its organization.

    Registrations, feedback and badges of the event are kept.

    Raises:
        `NotFoundError` if the event doesn't exist.
        `ForbiddenError` if the user is not a team member of the organizer.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    event = fetch(database, event_id)
    _check_organizer(database, event, user_id)
    op_args: List[db.OpArg] = [
        db.DeleteArg(db.PartitionKey(ent.Event, event['Id']),
                     db.SingleSortKey(ent.Event))
    ]
    if 'ExternalId' in event:
        op_args.append(db.DeleteArg(
            db.PartitionKey(ent.Alias, event['ExternalId']),
            db.SingleSortKey(ent.Event)))
    database.transact_write_items(op_args)
