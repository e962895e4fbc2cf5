"""
Transaction Store

The authoritative in-memory list of the current session's transactions.

GUARANTEES:
- Only records the document store confirmed (they carry an id) get in
- No two records share an id
- all() returns a fresh list; records themselves are immutable, so
  callers can filter and sort freely without touching the store
"""

from typing import Iterable, Optional

import structlog

from src.models.transaction import Transaction


logger = structlog.get_logger(__name__)


class DuplicateTransactionError(ValueError):
    """A record with this id is already in the store."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction already present: {transaction_id}")


class TransactionStore:
    """Insertion-ordered collection of persisted transactions."""

    def __init__(self):
        self._records: list[Transaction] = []

    def replace_all(self, records: Iterable[Transaction]) -> None:
        """
        Replace the contents wholesale (after a successful fetch).

        Order is kept as given. If the backend ever returns the same id
        twice, the first occurrence wins.
        """
        seen: set[str] = set()
        fresh: list[Transaction] = []
        for record in records:
            if record.id in seen:
                logger.warning("duplicate_transaction_id_dropped", transaction_id=record.id)
                continue
            seen.add(record.id)
            fresh.append(record)
        self._records = fresh

    def add(self, record: Transaction) -> None:
        """Append a record the document store has just confirmed."""
        if self.get(record.id) is not None:
            raise DuplicateTransactionError(record.id)
        self._records.append(record)

    def remove(self, transaction_id: str) -> bool:
        """Remove by id. Returns False if there was no such record."""
        for idx, record in enumerate(self._records):
            if record.id == transaction_id:
                del self._records[idx]
                return True
        return False

    def clear(self) -> None:
        self._records = []

    def all(self) -> list[Transaction]:
        """Snapshot of the current contents."""
        return list(self._records)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for record in self._records:
            if record.id == transaction_id:
                return record
        return None

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, transaction_id: object) -> bool:
        return any(record.id == transaction_id for record in self._records)
