"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the document store.
This allows us to:
1. Swap Google Sheets for a hosted document database later
2. Use in-memory storage for testing
3. Keep the ledger logic decoupled from the storage implementation

The interface is intentionally small. The store only lists, creates and
deletes; every filter and sort happens in memory after a full fetch.
"""

from abc import ABC, abstractmethod

from src.models.transaction import NewTransaction, Transaction


class TransactionStorageInterface(ABC):
    """
    Abstract interface for per-user transaction storage.

    Every operation is scoped to one user's collection.
    """

    @abstractmethod
    async def list_all(self, user_id: str) -> list[Transaction]:
        """
        Fetch every transaction owned by a user.

        Args:
            user_id: Owner of the collection

        Returns:
            The user's transactions, in no particular order

        Raises:
            StorageError: If the fetch fails
        """
        pass

    @abstractmethod
    async def create(self, user_id: str, transaction: NewTransaction) -> str:
        """
        Persist a new transaction.

        Args:
            user_id: Owner of the collection
            transaction: Validated payload without an id

        Returns:
            The id the store assigned

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_by_id(self, user_id: str, transaction_id: str) -> bool:
        """
        Delete a transaction.

        Args:
            user_id: Owner of the collection
            transaction_id: Id assigned at creation

        Returns:
            True if a record was deleted, False if it did not exist

        Raises:
            StorageError: If the delete fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
