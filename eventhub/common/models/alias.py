"""External ids of entities.

An entity created with an external id gets an alias item in the same
transaction: PK=`ALIAS#<external id>`, SK=`#<ENTITY>#`, pointing to the native
id of the entity. Lookups try the native id first and fall back to the alias.

"""
from typing import Any, Dict, Optional, Type

import eventhub.common.db as db
import eventhub.common.models.entities as ent
from eventhub.common.models import ids


def get_create_op(entity: Type[db.EntityName], external_id: str,
                  native_id: str) -> db.InsertArg:
    """Get an op that registers an external id for an entity.

    The op fails with `db.ConditionalCheckFailedError` in a transaction if the
    external id is taken by an other entity of the same type.

    """
    pk = db.PartitionKey(ent.Alias, external_id)
    sk = db.SingleSortKey(entity)
    return db.InsertArg(pk, sk, {'TargetId': native_id})


def to_entity(item: db.ItemResult) -> Dict[str, Any]:
    """Convert an entity item to the entity dictionary.

    The key attributes are replaced with `Id`.

    """
    res = {k: v for k, v in item.items() if k not in ('PK', 'SK')}
    res['Id'] = item['PK']
    return res


def resolve(database: db.Database, entity: Type[db.EntityName],
            identifier: str, consistent: bool = False) \
        -> Optional[Dict[str, Any]]:
    """Fetch an entity by its native or external id.

    Args:
        database: The database.
        entity: The entity name.
        identifier: The native or external id.
        consistent: Whether the reads should be strongly consistent.

    Returns:
        The entity if it exists.

    Raises:
        `InvalidIdError` if the id is malformed.
        `db.DatabaseError` if there was an error connecting to the Database.

    """
    ids.validate(identifier)
    sk = db.SingleSortKey(entity)
    if ids.is_native(identifier):
        pk = db.PartitionKey(entity, identifier)
        item = database.get_item(pk, sk, consistent=consistent)
        if item is not None:
            return to_entity(item)

    alias = database.get_item(db.PartitionKey(ent.Alias, identifier), sk,
                              consistent=consistent)
    if alias is None:
        return None
    pk = db.PartitionKey(entity, alias['TargetId'])
    item = database.get_item(pk, sk, consistent=consistent)
    if item is None:
        # The entity was deleted.
        return None
    return to_entity(item)
