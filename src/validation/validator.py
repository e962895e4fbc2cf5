"""
Transaction Form Validation

Runs before any collaborator is contacted. A draft either becomes a
NewTransaction or produces field-level issues for inline display.

Checks:
- description present (and not absurdly long)
- amount present, numeric, finite and greater than zero
- type is income or expense
- date, when given, is an ISO calendar date (blank means today)

IMPORTANT: Validation NEVER silently fixes input beyond trimming
whitespace. It reports problems for the user to correct.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from src.models.transaction import (
    MAX_AMOUNT,
    NewTransaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    utcnow,
)


MAX_DESCRIPTION_LENGTH = 200

DESCRIPTION_MISSING = "Please add a description"
AMOUNT_INVALID = "Please add a valid amount"
AMOUNT_TOO_LARGE = f"Amount must be at most {MAX_AMOUNT:,.2f}"
TYPE_MISSING = "Please select income or expense"
DATE_INVALID = "Please enter a valid date (YYYY-MM-DD)"
FIX_ERRORS = "Please fix the errors above"


class TransactionValidationError(ValueError):
    """Raised by validate_or_raise when a draft has issues."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))


class TransactionValidator:
    """Validates add-transaction form input."""

    def __init__(
        self,
        today: Optional[Callable[[], date]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            today: Supplies the default date (injectable for tests)
            now: Supplies created_at (injectable for tests)
        """
        self._today = today or date.today
        self._now = now or utcnow

    def _check_description(self, draft: TransactionDraft) -> list[ValidationIssue]:
        text = (draft.description or "").strip()
        if not text:
            return [ValidationIssue(
                field="description",
                issue_type="missing",
                message=DESCRIPTION_MISSING,
            )]
        if len(text) > MAX_DESCRIPTION_LENGTH:
            return [ValidationIssue(
                field="description",
                issue_type="too_long",
                message=f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
            )]
        return []

    def _parse_amount(self, draft: TransactionDraft) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        raw = (draft.amount or "").strip()
        if not raw:
            return None, [ValidationIssue(
                field="amount",
                issue_type="missing",
                message=AMOUNT_INVALID,
            )]
        try:
            amount = Decimal(raw)
        except InvalidOperation:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=AMOUNT_INVALID,
            )]
        if not amount.is_finite() or amount <= 0:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=AMOUNT_INVALID,
            )]
        if amount > MAX_AMOUNT:
            return None, [ValidationIssue(
                field="amount",
                issue_type="too_large",
                message=AMOUNT_TOO_LARGE,
            )]
        return amount, []

    def _parse_type(self, draft: TransactionDraft) -> tuple[Optional[TransactionType], list[ValidationIssue]]:
        try:
            return TransactionType((draft.type or "").strip().lower()), []
        except ValueError:
            return None, [ValidationIssue(
                field="type",
                issue_type="missing",
                message=TYPE_MISSING,
            )]

    def _parse_date(self, draft: TransactionDraft) -> tuple[Optional[str], list[ValidationIssue]]:
        raw = (draft.date or "").strip()
        if not raw:
            return self._today().isoformat(), []
        try:
            return date.fromisoformat(raw).isoformat(), []
        except ValueError:
            return None, [ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=DATE_INVALID,
            )]

    def validate(self, draft: TransactionDraft) -> ValidationResult:
        """Check every field and build the payload if all pass."""
        issues = self._check_description(draft)
        amount, amount_issues = self._parse_amount(draft)
        transaction_type, type_issues = self._parse_type(draft)
        date_str, date_issues = self._parse_date(draft)
        issues.extend(amount_issues + type_issues + date_issues)

        if issues:
            return ValidationResult(issues=issues)

        return ValidationResult(
            transaction=NewTransaction(
                description=draft.description,
                amount=amount,
                type=transaction_type,
                date=date_str,
                created_at=self._now(),
            ),
        )

    def validate_or_raise(self, draft: TransactionDraft) -> NewTransaction:
        """Like validate(), but raises TransactionValidationError on any issue."""
        result = self.validate(draft)
        if not result.is_valid:
            raise TransactionValidationError(result.issues)
        return result.transaction

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One line for under the submit button."""
        if result.is_valid:
            return ""
        if len(result.issues) == 1:
            return result.issues[0].message
        return FIX_ERRORS
