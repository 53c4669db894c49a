"""Keys of the items in the single table.

An item's primary key is its partition key and its sort key together:

* Entity items: `ENTITY#<id>` / `#ENTITY#`, eg. `EVENT#<id>` / `#EVENT#`.
* Relation items: `ENTITY#<id>` / `OTHER_ENTITY#<other id>`, eg. the
  registration of a user for an event is `EVENT#<event id>` /
  `REGISTRATION#<user id>`.

A sort key prefix without a value, eg. `REGISTRATION#`, selects the relations
of one kind under a partition key. The inverse index swaps the two keys, so
the same prefixes select the partition keys that relate to a sort key.

Entity names are subclasses of `EntityName`, see
`eventhub.common.models.entities`.

"""
from abc import ABC
from typing import Any, Type, Union


FullSortKey = Union['SortKey', 'SingleSortKey']
AnySortKey = Union['SortKey', 'PrefixSortKey', 'SingleSortKey']


class EntityName(ABC):
    """Base class of entity names.

    Eg. `class User(EntityName)` results in the `USER#` key prefix.

    """

    @classmethod
    def to_prefix(cls) -> str:
        """Get the key prefix of the entity."""
        return cls.__name__.upper() + '#'


class EntityKey(ABC):
    """Key of an entity with a value."""

    def __init__(self, entity_name: Type[EntityName], value: str):
        self._prefix = entity_name.to_prefix()
        self._value = value

    def __str__(self) -> str:
        # Eg. EVENT#tech-summit
        return f'{self._prefix}{self._value}'

    def __eq__(self, other: Any) -> bool:
        # Keys are equal to their string form as well.
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __repr__(self) -> str:
        return f'{type(self).__name__}({str(self)!r})'

    @property
    def prefix(self) -> str:
        """The entity prefix, eg. `EVENT#`."""
        return self._prefix

    @property
    def value(self) -> str:
        """The id part of the key."""
        return self._value


class PartitionKey(EntityKey):
    """Partition key."""


class SortKey(EntityKey):
    """Sort key with a value."""


class PrefixSortKey(EntityKey):
    """Prefix only key to query relations."""

    def __init__(self, entity_name: Type[EntityName]):
        super().__init__(entity_name, '')

    def __str__(self) -> str:
        return self._prefix


class SingleSortKey(EntityKey):
    """Sort key of an item that doesn't model a relation."""

    def __init__(self, entity_name: Type[EntityName]):
        super().__init__(entity_name, '')
        self._prefix = f'#{self._prefix}'

    def __str__(self) -> str:
        # Eg. #EVENT#
        return self._prefix
