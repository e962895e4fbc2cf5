"""
Storage Services Package

Provides the abstract document store interface and its implementations.
Google Sheets is the hosted backend; the in-memory store backs tests.
"""

from src.services.storage.interface import (
    ConnectionError,
    StorageError,
    TransactionStorageInterface,
)
from src.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
)
from src.services.storage.memory import InMemoryTransactionStorage

__all__ = [
    # Interfaces
    "TransactionStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStorage",
    "InMemoryTransactionStorage",
]
