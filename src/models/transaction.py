"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the ledger invariants at construction time
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: A persisted Transaction is immutable.
The in-memory ledger hands out plain lists of these records, so a caller
that filters or sorts a snapshot can never change the ledger itself.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Largest amount a single transaction may carry
MAX_AMOUNT = Decimal("999999999999.99")


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def today_iso() -> str:
    return date.today().isoformat()


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Direction of a transaction.

    The amount is always a positive magnitude; the type alone decides
    whether it adds to or subtracts from the balance.
    """
    INCOME = "income"
    EXPENSE = "expense"


class TransactionFilter(str, Enum):
    """Which transactions a list view shows."""
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


class SortKey(str, Enum):
    """List orderings offered by the history view."""
    NEWEST = "newest"    # date descending
    OLDEST = "oldest"    # date ascending
    HIGHEST = "highest"  # amount descending
    LOWEST = "lowest"    # amount ascending


class Theme(str, Enum):
    """Presentation theme preference."""
    LIGHT = "light"
    DARK = "dark"


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class NewTransaction(BaseModel):
    """
    A transaction that has passed client-side validation but has not
    been persisted yet.

    This is the payload handed to the document store, which answers
    with the id it assigned.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was for"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        le=MAX_AMOUNT,
        description="Positive magnitude; direction comes from type"
    )
    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    # Kept as the raw ISO string: records written by other clients may
    # carry dates we cannot parse, and those must still render.
    date: str = Field(
        default_factory=today_iso,
        description="ISO 8601 calendar date"
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        description="When the record was created"
    )

    def with_id(self, transaction_id: str) -> "Transaction":
        """Attach the id assigned by the document store."""
        return Transaction(id=transaction_id, **self.model_dump(exclude={"id"}))


class Transaction(NewTransaction):
    """
    A transaction confirmed by the document store.

    CRITICAL: Only records carrying a store-assigned id ever enter the
    in-memory ledger.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque id assigned by the document store"
    )


class Balance(BaseModel):
    """Aggregate totals over a set of transactions."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    net: Decimal = Decimal("0")

    @property
    def is_negative(self) -> bool:
        """True when spending exceeds income (balance shown in red)."""
        return self.net < 0


# =============================================================================
# FORM INPUT & VALIDATION MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    Raw input from the add-transaction form.

    Nothing here is trusted: the validator turns a draft into a
    NewTransaction or a list of field-level issues.
    """

    description: str = ""
    amount: Optional[str] = None
    type: Optional[str] = None
    date: Optional[str] = None

    @field_validator('amount', mode='before')
    @classmethod
    def amount_as_text(cls, v):
        """Number inputs hand us floats; keep everything as text until validation."""
        if v is None or isinstance(v, str):
            return v
        return str(v)


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'invalid_format')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationResult(BaseModel):
    """Outcome of validating a TransactionDraft."""

    issues: list[ValidationIssue] = Field(default_factory=list)
    transaction: Optional[NewTransaction] = Field(
        default=None,
        description="The validated payload, present only when there are no issues"
    )

    @property
    def is_valid(self) -> bool:
        return not self.issues and self.transaction is not None

    @property
    def field_errors(self) -> dict[str, str]:
        """First message per field, for inline display next to inputs."""
        errors: dict[str, str] = {}
        for issue in self.issues:
            errors.setdefault(issue.field, issue.message)
        return errors


# =============================================================================
# ACTION & VIEW MODELS (what the presentation layer consumes)
# =============================================================================

class ActionResult(BaseModel):
    """
    Outcome of one user action (add, delete, sign in, ...).

    Failures never escape as exceptions; they come back as one of these
    with a message suitable for showing under the triggering button.
    """

    success: bool
    message: Optional[str] = None
    field_errors: dict[str, str] = Field(default_factory=dict)
    redirect_to_login: bool = False
    transaction_id: Optional[str] = None

    @classmethod
    def ok(cls, message: Optional[str] = None, **kwargs) -> "ActionResult":
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def failed(cls, message: str, **kwargs) -> "ActionResult":
        return cls(success=False, message=message, **kwargs)


class LedgerItem(BaseModel):
    """One rendered row of a transaction list."""

    id: str
    description: str
    date: str
    type: TransactionType
    display_amount: str = Field(
        ...,
        description="Signed, currency-formatted amount (e.g. '-$40.00')"
    )

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


class LedgerView(BaseModel):
    """Everything a dashboard or history page needs to render."""

    currency: str
    currency_symbol: str
    today: str
    balance: Balance
    balance_display: str
    income_display: str
    expense_display: str
    items: list[LedgerItem] = Field(default_factory=list)
    empty_message: Optional[str] = None
    filter: TransactionFilter = TransactionFilter.ALL
    sort_key: SortKey = SortKey.NEWEST
