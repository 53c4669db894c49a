"""DynamoDB operation arguments."""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union, cast

import boto3.dynamodb.conditions as cond
from boto3.dynamodb.types import TypeSerializer

from eventhub.common.db.index import GlobalIndex, PrimaryGlobalIndex
from eventhub.common.db.keys import FullSortKey, PartitionKey

_DynamoValue = Union[str, bool]

# Can't narrow value types down, because of TypedDict-Mapping
# incompatibiltiy. See https://stackoverflow.com/q/60304154
Attributes = Mapping[str, Any]
Kwargs = Mapping[str, Any]


def iso_now() -> str:
    """Get the current UTC time as an ISO timestamp without microseconds.

    Eg. '2020-02-15T19:09:38'. Timestamps in this format sort correctly as
    strings.

    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=0, tzinfo=None).isoformat()


class OpArg(ABC):
    """DynamoDB operation argument base class."""

    @staticmethod
    def _iso_now() -> str:
        return iso_now()

    def __init__(self) -> None:
        """Initialize an OpArg instance."""
        self._serializer = TypeSerializer()

    @property
    @abstractmethod
    def op_name(self) -> str:
        """Get the operation name for which this object is an argument.

        Must correspond to TransactWriteItem argument.
        """
        raise NotImplementedError

    @abstractmethod
    def get_kwargs(self, table_name: str) -> Kwargs:
        """Get key-word arguments that can be passed to the DynamoDB operation.

        Args:
            table_name: The DynamoDB table name for the operation.

        Returns:
            The key-word arguments.

        """
        raise NotImplementedError

    def _serialize_val(self, val: Any) -> Kwargs:
        """Serialize a value to a DynamoDB value."""
        return cast(Kwargs, self._serializer.serialize(val))

    def _serialize_dict(self, item: Attributes) -> Kwargs:
        """Serialize a dictionary while preserving its top level keys."""
        return {k: self._serialize_val(v) for k, v in item.items()}

    def _serialize_keys(self, pk: PartitionKey, sk: FullSortKey) \
            -> Mapping[str, Mapping[str, _DynamoValue]]:
        """Serialize composite key."""
        item: Attributes = {
            'PK': str(pk),
            'SK': str(sk),
        }
        return self._serialize_dict(item)


class _ItemOpArg(OpArg):
    """Base class of operations on a single item."""

    def __init__(self, pk: PartitionKey, sk: FullSortKey):
        super().__init__()
        self._pk = pk
        self._sk = sk

    @property
    def pk(self) -> PartitionKey:
        """Get the partition key of the item."""
        return self._pk

    @property
    def sk(self) -> FullSortKey:
        """Get the sort key of the item."""
        return self._sk


class DeleteArg(_ItemOpArg):
    """Argument to a DynamoDB DeleteItem operation."""

    def __init__(self, pk: PartitionKey, sk: FullSortKey,
                 idempotent: bool = True):
        """Initialize a DeleteArg instance.

        Args:
            pk: The partition key of the item.
            sk: The sort key of the item.
            idempotent: If false, the op raises an error if the item to
                delete doesn't exist. Defaults to to true.

        """
        super().__init__(pk, sk)
        self._idempotent = idempotent

    @property
    def idempotent(self) -> bool:
        """Whether deleting a missing item is allowed."""
        return self._idempotent

    @property
    def op_name(self) -> str:
        """Get the operation name for which this object is an argument."""
        return 'Delete'

    def get_kwargs(self, table_name: str) -> Kwargs:
        """Get key-word arguments that can be passed to a DeleteItem operation.

        Args:
            table_name: The DynamoDB table name for the DeleteItem operation.

        Returns:
            The key-word arguments.

        """
        kwargs = {
            'TableName': table_name,
            'Key': self._serialize_keys(self._pk, self._sk)
        }
        if not self._idempotent:
            # This check is performed after the item is retrieved by the
            # composite key, so no need to specify SK.
            kwargs['ConditionExpression'] = 'attribute_exists(PK)'

        return kwargs


class PutArg(_ItemOpArg):
    """Argument to a DynamoDB PutItem operation.

    This op will replace the entire item. User `UpdateArg` if you just want to
    update a specific attribute.

    The `CreatedAt` attribute of the item is automatically set to the current
    ISO timestamp without microseconds (eg. '2020-02-15T19:09:38') unless the
    attributes contain it already.

    """

    def __init__(self, pk: PartitionKey, sk: FullSortKey,
                 attributes: Optional[Attributes] = None,
                 allow_overwrite: bool = True):
        """Initialize a PutArg instance.

        Args:
            pk: The partition key of the item.
            sk: The sort key of the item.
            attributes: Optional additional attributes of the item.
            allow_overwrite: Whether to allow overwriting an existing item.

        """
        super().__init__(pk, sk)
        self._attributes = attributes
        self._allow_overwrite = allow_overwrite

    @property
    def allow_overwrite(self) -> bool:
        """Whether the put may replace an existing item."""
        return self._allow_overwrite

    @property
    def op_name(self) -> str:
        """Get the operation name for which this object is an argument."""
        return 'Put'

    def get_item(self) -> Dict[str, Any]:
        """Get the item that will be written without serialization."""
        item: Dict[str, Any] = {
            'CreatedAt': self._iso_now()
        }
        if self._attributes:
            # Callers may backdate an item by passing `CreatedAt`.
            item.update(self._attributes)
        # Keys can't be overwritten by the attributes.
        item['PK'] = str(self._pk)
        item['SK'] = str(self._sk)
        return item

    def get_kwargs(self, table_name: str) -> Kwargs:
        """Get key-word arguments that can be passed to a PutItem operation.

        Args:
            table_name: The DynamoDB table name for the PutItem operation.

        Returns:
            The key-word arguments.

        """
        kwargs = {
            'TableName': table_name,
            'Item': self._serialize_dict(self.get_item())
        }
        if not self._allow_overwrite:
            # The condition only checks if the item with the same composite key
            # exists. Ie. if there is an item (PK=foo, SK=0) in the database,
            # and we insert a new item (PK=foo, SK=1), the insert will succeed.
            kwargs['ConditionExpression'] = 'attribute_not_exists(PK)'

        return kwargs


class InsertArg(PutArg):
    """DynamoDB PutItem argument that prevents overwriting existing items."""

    def __init__(self, pk: PartitionKey, sk: FullSortKey,
                 attributes: Optional[Attributes] = None):
        """Initialize an InsertArg instance.

        The `CreatedAt` attribute of the item is automatically set.

        Args:
            pk: The partition key of the item.
            sk: The sort key of the item.
            attributes: Optional additional attributes of the item.

        """
        super().__init__(pk, sk,
                         attributes=attributes,
                         allow_overwrite=False)


class QueryArg(OpArg):
    """DynamoDB query operation argument.

    Note that query can not be used in a transaction, the purpose of this class
    is to provide a simplified interface to the boto3 DynamoDB table class.

    """

    _max_limit = 1000

    def __init__(self, key_condition: cond.ConditionBase,
                 index: Optional[GlobalIndex] = None,
                 filter_condition: Optional[cond.ConditionBase] = None,
                 consistent: bool = False,
                 limit: Optional[int] = None,
                 newest_first: bool = False):
        """Initialize a QueryArg instance.

        Args:
            key_condition: The key condition. Eg.:
                `Key('PK').eq(str(pk)) & Key('SK').begins_with(str(sk))`
            index: The index to query. Defaults to the primary index.
            filter_condition: Optional condition on non-key attributes that
                is applied after the key condition, eg.
                `Attr('Status').eq('ACCEPTED')`.
            consistent: Whether the read is strongly consistent or not. Only
                allowed on the primary index.
            limit: The maximum number of items to fetch, at most 1000. All
                pages of the result are fetched if omitted.
            newest_first: Whether to return items in descending sort key
                order.

        """
        super().__init__()
        self._key_cond = key_condition
        self._index = index or PrimaryGlobalIndex()
        self._filter_cond = filter_condition
        self._consistent = consistent
        self._newest_first = newest_first
        if limit is not None and limit > self._max_limit:
            raise ValueError(f'Limit {limit} is greater than max '
                             f'{self._max_limit}')
        self._limit = limit

    @property
    def limit(self) -> Optional[int]:
        """Get the maximum number of items to fetch or None for all."""
        return self._limit

    @property
    def op_name(self) -> str:
        """Get the operation name for which this object is an argument.

        Note that query can not be used in a transaction.

        """
        return 'Query'

    def get_kwargs(self, table_name: str) -> Kwargs:
        """Get key-word arguments that can be passed to a boto3 DynamoDB table.

        Args:
            table_name: The DynamoDB table name for the operation.

        Returns:
            The key-word arguments.

        Raises:
            ValueError if a consistent read is requested on a secondary
                index.

        """
        args: Dict[str, Any] = {
            'KeyConditionExpression': self._key_cond,
            'ConsistentRead': self._consistent,
            'ScanIndexForward': not self._newest_first,
        }
        if self._index.name is not None:
            if self._consistent:
                raise ValueError('Global secondary indexes do not support '
                                 'consistent reads.')
            args['IndexName'] = self._index.name
        if self._filter_cond is not None:
            args['FilterExpression'] = self._filter_cond
        return args


class UpdateArg(_ItemOpArg):
    """Argument to a DynamoDB UpdateItem operation.

    This op updates the specified attributes. It creates a new item if it
    doesn't exist yet, unless `require_exists` is set.

    The `UpdatedAt` attribute of the item is automatically set to the current
    ISO timestamp without microseconds (eg. '2020-02-15T19:09:38').

    """

    def __init__(self, pk: PartitionKey, sk: FullSortKey,
                 put_attributes: Optional[Attributes] = None,
                 require_exists: bool = False):
        """Initialize an UpdateArg instance.

        Args:
            pk: The partition key of the item.
            sk: The sort key of the item.
            put_attributes: Optional attributes to put for the item. These
                attributes will be overwritten if they exist, or created if
                they don't exist.
            require_exists: If true, the op raises
                `ConditionalCheckFailedError` instead of creating a missing
                item.

        """
        super().__init__(pk, sk)
        self._put_attributes = put_attributes
        self._require_exists = require_exists

    @property
    def require_exists(self) -> bool:
        """Whether the item must exist for the update to succeed."""
        return self._require_exists

    @property
    def op_name(self) -> str:
        """Get the operation name for which this object is an argument."""
        return 'Update'

    def get_updates(self) -> Dict[str, Any]:
        """Get the attributes to set without serialization."""
        item: Dict[str, Any] = {}
        if self._put_attributes:
            item.update(self._put_attributes)
        # `UpdatedAt` always reflects the time of the op.
        item['UpdatedAt'] = self._iso_now()
        return item

    def get_kwargs(self, table_name: str) -> Kwargs:
        """Get key-word arguments that can be passed to an UpdateItem operation.

        Args:
            table_name: The DynamoDB table name for the UpdateItem operation.

        Returns:
            The key-word arguments.

        """
        names = {}
        values = {}
        actions: List[str] = []
        # Placeholders avoid clashes with DynamoDB reserved words like `Name`
        # or `Status`.
        for i, (k, v) in enumerate(self.get_updates().items()):
            names[f'#a{i}'] = k
            values[f':v{i}'] = self._serialize_val(v)
            actions.append(f'#a{i} = :v{i}')

        kwargs = {
            'TableName': table_name,
            'Key': self._serialize_keys(self._pk, self._sk),
            'UpdateExpression': 'SET ' + ', '.join(actions),
            'ExpressionAttributeNames': names,
            'ExpressionAttributeValues': values
        }
        if self._require_exists:
            kwargs['ConditionExpression'] = 'attribute_exists(PK)'
        return kwargs
