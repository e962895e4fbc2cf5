"""
In-Memory Storage Implementation

Used for tests and for running the app without a Google Sheets
spreadsheet (STORAGE_BACKEND=memory). Data lives as long as the process.
"""

from uuid import uuid4

from src.models.transaction import NewTransaction, Transaction
from src.services.storage.interface import TransactionStorageInterface


class InMemoryTransactionStorage(TransactionStorageInterface):
    """Dictionary-backed per-user collections."""

    def __init__(self):
        self._collections: dict[str, dict[str, Transaction]] = {}

    async def list_all(self, user_id: str) -> list[Transaction]:
        return list(self._collections.get(user_id, {}).values())

    async def create(self, user_id: str, transaction: NewTransaction) -> str:
        stored = transaction.with_id(uuid4().hex)
        self._collections.setdefault(user_id, {})[stored.id] = stored
        return stored.id

    async def delete_by_id(self, user_id: str, transaction_id: str) -> bool:
        collection = self._collections.get(user_id, {})
        return collection.pop(transaction_id, None) is not None
