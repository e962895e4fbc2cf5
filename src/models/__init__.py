"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from src.models.transaction import (
    ActionResult,
    Balance,
    LedgerItem,
    LedgerView,
    NewTransaction,
    SortKey,
    Theme,
    Transaction,
    TransactionDraft,
    TransactionFilter,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "ActionResult",
    "Balance",
    "LedgerItem",
    "LedgerView",
    "NewTransaction",
    "SortKey",
    "Theme",
    "Transaction",
    "TransactionDraft",
    "TransactionFilter",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
]
