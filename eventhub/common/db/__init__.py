# flake8: noqa
# mypy: implicit-reexport

# Flake 8 would complain about unused imports if it was enabled on this file.

from eventhub.common.db.database import (
    CapacityError,
    ConditionalCheckFailedError,
    Database,
    DatabaseError,
    ItemResult,
    TransactionError,
    TransactionConflict
)
from eventhub.common.db.index import (
    GlobalIndex,
    PrimaryGlobalIndex,
    InverseGlobalIndex
)
from eventhub.common.db.keys import (
    AnySortKey,
    EntityName,
    FullSortKey,
    PartitionKey,
    PrefixSortKey,
    SingleSortKey,
    SortKey,
)
from eventhub.common.db.op_args import (
    Attributes,
    DeleteArg,
    InsertArg,
    OpArg,
    PutArg,
    QueryArg,
    UpdateArg,
    iso_now
)
