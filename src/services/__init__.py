"""Services package."""

from src.services.auth import (
    AuthError,
    AuthServiceInterface,
    AuthSession,
    AuthUser,
    LocalAuthService,
)
from src.services.preferences import Preferences, PreferencesStore
from src.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsTransactionStorage,
    InMemoryTransactionStorage,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    # Auth services
    "AuthError",
    "AuthServiceInterface",
    "AuthSession",
    "AuthUser",
    "LocalAuthService",
    # Preferences
    "Preferences",
    "PreferencesStore",
    # Storage services
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStorage",
    "InMemoryTransactionStorage",
    "StorageError",
    "TransactionStorageInterface",
]
