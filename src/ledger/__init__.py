"""
Ledger Package

The transaction state model for one session and everything derived from it.
"""

from src.ledger.errors import (
    LedgerError,
    NotAuthenticatedError,
    OperationTimeoutError,
    PersistenceFailureError,
    bounded,
)
from src.ledger.session import SessionBinder, SessionState
from src.ledger.store import DuplicateTransactionError, TransactionStore
from src.ledger.views import (
    build_summary_view,
    compute_balance,
    filter_and_sort,
    limit_for_summary_view,
    parse_date_key,
    parse_filter,
    parse_sort_key,
)

__all__ = [
    "DuplicateTransactionError",
    "LedgerError",
    "NotAuthenticatedError",
    "OperationTimeoutError",
    "PersistenceFailureError",
    "SessionBinder",
    "SessionState",
    "TransactionStore",
    "bounded",
    "build_summary_view",
    "compute_balance",
    "filter_and_sort",
    "limit_for_summary_view",
    "parse_date_key",
    "parse_filter",
    "parse_sort_key",
]
