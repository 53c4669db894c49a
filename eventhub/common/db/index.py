"""Indexes that can be queried in the single table.

The inverse index swaps the partition and sort keys of the primary index. It
lets us query relations from the other side, eg. all the events a user has
registered for are the items with the `REGISTRATION#<user id>` sort key.

"""
from abc import ABC, abstractmethod
from typing import Optional


class GlobalIndex(ABC):
    """Base class of indexes."""

    @property
    @abstractmethod
    def name(self) -> Optional[str]:
        """Get the index name or None for the primary index."""
        raise NotImplementedError

    @property
    @abstractmethod
    def partition_key(self) -> str:
        """Get the attribute name of the partition key."""
        raise NotImplementedError

    @property
    @abstractmethod
    def sort_key(self) -> str:
        """Get the attribute name of the sort key."""
        raise NotImplementedError


class PrimaryGlobalIndex(GlobalIndex):
    """The primary index of the table."""

    @property
    def name(self) -> Optional[str]:
        """Get the index name."""
        return None

    @property
    def partition_key(self) -> str:
        """Get the attribute name of the partition key."""
        return 'PK'

    @property
    def sort_key(self) -> str:
        """Get the attribute name of the sort key."""
        return 'SK'


class InverseGlobalIndex(GlobalIndex):
    """Global secondary index with the primary keys swapped."""

    def __init__(self, index_name: str):
        """Initialize an InverseGlobalIndex instance.

        Args:
            index_name: The name of the GSI in the table.

        """
        self._name = index_name

    @property
    def name(self) -> Optional[str]:
        """Get the index name."""
        return self._name

    @property
    def partition_key(self) -> str:
        """Get the attribute name of the partition key."""
        return 'SK'

    @property
    def sort_key(self) -> str:
        """Get the attribute name of the sort key."""
        return 'PK'
