import re
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

import boto3
import boto3.dynamodb.conditions as cond

import botocore.client
from botocore.exceptions import ClientError

from eventhub.common.db.index import InverseGlobalIndex
from eventhub.common.db.keys import FullSortKey, PartitionKey, \
    PrefixSortKey
from eventhub.common.db.op_args import Attributes, DeleteArg, InsertArg, \
    OpArg, PutArg, QueryArg, UpdateArg


ItemResult = Mapping[str, Any]

# Eg. `EVENT#tech-summit`. Entity names are upper-cased class names.
_PREFIX_PATTERN = re.compile(r'^[A-Z0-9_]+#(.+)$')


class DatabaseError(Exception):
    """Raised when a database error occurred without a more specific reason.

    All other database errors inherit from this.
    """


class CapacityError(DatabaseError):
    """Raised when a ProvisionedThroughputExceededException is raised."""


class ConditionalCheckFailedError(DatabaseError):
    """Raised when a write condition failed.

    Eg. inserting an item failed because it already exists or updating an item
    that must exist failed because it doesn't.

    """


class TransactionError(DatabaseError):
    """Raised when a transaction failed without a more specific reason."""


class TransactionConflict(TransactionError):
    """The transaction failed due to conflict from an other transaction."""


class Database:
    """DynamoDB single table pattern.

    A Database instance is created once per process and passed to the
    models. The underlying boto3 objects create connections lazily.

    """

    @staticmethod
    @contextmanager
    def _dispatch_client_error() -> Iterator[None]:
        """Raise appropriate exception based on ClientError code."""
        try:
            yield None
        except ClientError as e:
            db_error = e.response.get('Error', {})
            code = db_error.get('Code')
            if code == 'ConditionalCheckFailedException':
                raise ConditionalCheckFailedError(e)
            if code == 'ProvisionedThroughputExceededException':
                raise CapacityError(e)
            elif code == 'TransactionCanceledException':
                message = db_error.get('Message', '')
                if 'ConditionalCheckFailed' in message:
                    raise ConditionalCheckFailedError(e)
                elif 'TransactionConflict' in message:
                    raise TransactionConflict(e)
                else:
                    raise TransactionError(e)
            else:
                raise DatabaseError(e)

    @staticmethod
    def _remove_entity_prefix(string: str) -> str:
        match = _PREFIX_PATTERN.match(string)
        return match.group(1) if match else string

    @classmethod
    def _strip_prefixes(cls, item: Mapping[str, Any]) -> ItemResult:
        """Strip entity prefixes from the keys of a DB item.

        Only `PK` and `SK` are stripped, other string attributes are user
        data and are returned unchanged.

        """
        item_copy: Dict[str, Any] = dict(item)
        for k in ('PK', 'SK'):
            v = item_copy.get(k)
            if isinstance(v, str):
                item_copy[k] = cls._remove_entity_prefix(v)
        return item_copy

    def __init__(self, table_name: str, inverse_index: str,
                 region_name: Optional[str] = None):
        """Initialize a Database instance.

        Args:
            table_name: The DynamoDB table name.
            inverse_index: The name of the global secondary index that has the
                partition and sort keys swapped.
            region_name: The AWS region of the table. Defaults to the boto3
                session region.

        """
        self._table_name = table_name
        self._inverse_index = InverseGlobalIndex(inverse_index)
        self._client_handle = boto3.client('dynamodb', region_name=region_name)
        # Transactions and deletes go through the low level client, queries
        # and single item reads through the table resource. The resource
        # must not share the client: it would wrap typed keys in maps again.
        resource = boto3.resource('dynamodb', region_name=region_name)
        self._table_handle = resource.Table(self._table_name)

    @property
    def _client(self) -> 'botocore.client.DynamoDB':
        return self._client_handle

    @property
    def _table(self) -> 'boto3.resources.factory.dynamodb.Table':
        return self._table_handle

    def _query(self, query_arg: QueryArg) -> List[ItemResult]:
        args = dict(query_arg.get_kwargs(self._table_name))
        limit = query_arg.limit
        items: List[Dict[str, Any]] = []
        # A single page is at most 1 MB, so follow the pagination until the
        # last page or until the limit is reached.
        while True:
            with self._dispatch_client_error():
                query_res = self._table.query(**args)
            items.extend(query_res.get('Items', []))
            last_key = query_res.get('LastEvaluatedKey')
            if not last_key:
                break
            if limit is not None and len(items) >= limit:
                break
            args['ExclusiveStartKey'] = last_key
        if limit is not None:
            items = items[:limit]
        return [self._strip_prefixes(item) for item in items]

    def delete_item(self, pk: PartitionKey, sk: FullSortKey,
                    idempotent: bool = True) -> None:
        """Delete an item from the database.

        Args:
            pk: The primary key.
            sk: The sort key.
            idempotent: If false, raise `ConditionalCheckFailedError` if the
                item doesn't exist.

        """
        delete_arg = DeleteArg(pk, sk, idempotent=idempotent)
        kwargs = delete_arg.get_kwargs(self._table_name)
        with self._dispatch_client_error():
            self._client.delete_item(**kwargs)

    def get_item(self, pk: PartitionKey, sk: FullSortKey,
                 consistent: bool = False) -> Optional[ItemResult]:
        """Fetch an item by its primary key from the database.

        Args:
            pk: The primary key.
            sk: The sort key.
            consistent: Whether the read is strongly consistent or not.

        Returns:
            The item with the key prefixes stripped if it exists.

        Raises:
            eventhub.common.db.DatabaseError if there was an error querying
                the database.

        """
        key_cond = cond.Key('PK').eq(str(pk)) & cond.Key('SK').eq(str(sk))
        query_arg = QueryArg(key_cond, consistent=consistent, limit=1)
        res = self._query(query_arg)
        if res:
            return res[0]
        else:
            return None

    def insert(self, pk: PartitionKey, sk: FullSortKey,
               attributes: Optional[Attributes] = None) -> None:
        """Insert a new item into the database.

        The `CreatedAt` attribute of the item is automatically set.
        The insert fails if an item with the same composite key (PK, SK)
        exists.

        Args:
            pk: The partition key.
            sk: The sort key.
            attributes: Dictionary with additional attributes of the item.

        Raises:
            eventhub.common.db.ConditionalCheckFailedError if the item with
                the same composite key already exists.
            eventhub.common.db.DatabaseError if there was a problem connecting
                to the database.

        """
        put_arg = InsertArg(pk, sk, attributes=attributes)
        self.put_item(put_arg)

    def put_item(self, put_arg: PutArg) -> None:
        """Insert a new item or replace an existing item.

        Args:
            put_arg: The put item op argument.

        Raises:
            eventhub.common.db.ConditionalCheckFailedError if the put arg
                doesn't allow overwriting and the item exists.
            eventhub.common.db.DatabaseError if there was a problem connecting
                to the database.

        """
        kwargs = put_arg.get_kwargs(self._table_name)
        with self._dispatch_client_error():
            self._client.put_item(**kwargs)

    def query(self, query_arg: QueryArg) -> List[ItemResult]:
        """Fetch items from the database based on a query argument.

        Args:
            query_arg: The query op argument.

        Returns:
            The requested items with the `PK` and `SK` prefixes stripped.

        Raises:
            eventhub.common.db.DatabaseError if there was an error querying
                the database.

        """
        return self._query(query_arg)

    def query_prefix(self, pk: PartitionKey, sk: PrefixSortKey,
                     filter_condition: Optional[cond.ConditionBase] = None,
                     consistent: bool = False,
                     limit: Optional[int] = None,
                     newest_first: bool = False) -> List[ItemResult]:
        """Fetch items from a partition based on a sort key prefix.

        Args:
            pk: The partition key.
            sk: The sort key prefix.
            filter_condition: Optional condition on non-key attributes.
            consistent: Whether the read is strongly consistent or not.
            limit: The maximum number of items to fetch, at most 1000.
                Defaults to all the matching items.
            newest_first: Whether to return items in descending sort key
                order.

        Returns:
            The requested items with the `PK` and `SK` prefixes stripped.

        Raises:
            eventhub.common.db.DatabaseError if there was an error querying
                the database.

        """
        key_condition = cond.Key('PK').eq(str(pk)) & \
            cond.Key('SK').begins_with(str(sk))
        query_arg = QueryArg(key_condition,
                             filter_condition=filter_condition,
                             consistent=consistent,
                             limit=limit,
                             newest_first=newest_first)
        return self._query(query_arg)

    def query_inverse(self, sk: FullSortKey,
                      pk_prefix: Optional[PrefixSortKey] = None,
                      filter_condition: Optional[cond.ConditionBase] = None,
                      limit: Optional[int] = None,
                      newest_first: bool = False) -> List[ItemResult]:
        """Fetch items by sort key from the inverse index.

        Eg. all the items with sort key `#EVENT#` are the events, or all the
        items with sort key `REGISTRATION#<user id>` and a partition key
        starting with `EVENT#` are the registrations of a user.

        Args:
            sk: The sort key the items must have.
            pk_prefix: Optional entity prefix the partition keys must start
                with.
            filter_condition: Optional condition on non-key attributes.
            limit: The maximum number of items to fetch, at most 1000.
                Defaults to all the matching items.
            newest_first: Whether to return items in descending partition
                key order.

        Returns:
            The requested items with the `PK` and `SK` prefixes stripped.

        Raises:
            eventhub.common.db.DatabaseError if there was an error querying
                the database.

        """
        index = self._inverse_index
        key_condition = cond.Key(index.partition_key).eq(str(sk))
        if pk_prefix is not None:
            key_condition = key_condition & \
                cond.Key(index.sort_key).begins_with(str(pk_prefix))
        query_arg = QueryArg(key_condition,
                             index=index,
                             filter_condition=filter_condition,
                             limit=limit,
                             newest_first=newest_first)
        return self._query(query_arg)

    def transact_write_items(self, args: Iterable[OpArg]) -> None:
        """Write multiple items in a transaction.

        Args:
            args: Write OP args.

        Raises:
            eventhub.common.db.ConditionalCheckFailedError if a condition of
                one of the ops failed.
            eventhub.common.db.TransactionError if the transaction fails.
            eventhub.common.db.DatabaseError if there was a problem connecting
                to the database.

        """
        transact_items = []
        for a in args:
            kwargs = a.get_kwargs(self._table_name)
            transact_items.append({a.op_name: kwargs})
        with self._dispatch_client_error():
            self._client.transact_write_items(TransactItems=transact_items)

    def update_item(self, update_arg: UpdateArg) -> None:
        """Update an item or insert a new item if it doesn't exist.

        Args:
            update_arg: The update item op argument.

        Raises:
            eventhub.common.db.ConditionalCheckFailedError if the update arg
                requires the item to exist and it doesn't.
            eventhub.common.db.DatabaseError if there was a problem connecting
                to the database.

        """
        kwargs = update_arg.get_kwargs(self._table_name)
        with self._dispatch_client_error():
            self._client.update_item(**kwargs)

    def update_attributes(self, pk: PartitionKey, sk: FullSortKey,
                          attributes: Attributes,
                          require_exists: bool = False) -> None:
        """Put attributes of an item.

        The `UpdatedAt` attribute of the item is automatically set.

        Args:
            pk: The partition key.
            sk: The sort key.
            attributes: Dictionary with attributes to put. These attributes
                will overwritten if they exist or created if they don't exist.
            require_exists: If true, raise `ConditionalCheckFailedError`
                instead of creating a missing item.

        Raises:
            eventhub.common.db.DatabaseError if there was a problem connecting
                to the database.

        """
        update_arg = UpdateArg(pk, sk, put_attributes=attributes,
                               require_exists=require_exists)
        self.update_item(update_arg)

