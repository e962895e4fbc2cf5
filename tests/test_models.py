"""
Tests for Expense Tracker

Test strategy:
1. Unit tests for individual components (models, validators, view engine)
2. Integration tests for flows (with in-memory or failing fakes)
3. No real API calls in tests
"""

import pytest
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from src.models.transaction import (
    MAX_AMOUNT,
    ActionResult,
    Balance,
    LedgerItem,
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


class TestTransactionModels:
    """Tests for transaction-related Pydantic models."""

    def test_new_transaction_creation(self):
        """Test NewTransaction model creation."""
        new = NewTransaction(
            description="Salary",
            amount=Decimal("2500.00"),
            type=TransactionType.INCOME,
            date="2024-02-01",
        )
        assert new.description == "Salary"
        assert new.amount == Decimal("2500.00")
        assert new.created_at.tzinfo is not None

    def test_new_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        new = NewTransaction(description="  Rent  ", amount=Decimal("1"), type="expense")
        assert new.description == "Rent"

    def test_new_transaction_defaults_date_to_today(self):
        """Test that a missing date defaults to an ISO date string."""
        new = NewTransaction(description="Coffee", amount=Decimal("3"), type="expense")
        assert datetime.strptime(new.date, "%Y-%m-%d")

    def test_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in ("0", "-5"):
            with pytest.raises(ValidationError):
                NewTransaction(description="Bad", amount=Decimal(amount), type="expense")

    def test_rejects_empty_description(self):
        """Test that a blank description is rejected."""
        with pytest.raises(ValidationError):
            NewTransaction(description="   ", amount=Decimal("1"), type="income")

    def test_transactions_are_immutable(self, tx):
        """Test that a persisted transaction cannot be modified."""
        record = tx("a")
        with pytest.raises(ValidationError):
            record.amount = Decimal("99")

    def test_with_id_attaches_store_id(self, new_tx):
        """Test that with_id keeps every field and adds the id."""
        new = new_tx(amount="42.50", description="Books")
        stored = new.with_id("abc123")
        assert isinstance(stored, Transaction)
        assert stored.id == "abc123"
        assert stored.amount == Decimal("42.50")
        assert stored.description == "Books"
        assert stored.created_at == new.created_at

    def test_with_id_on_persisted_transaction_replaces_id(self, tx):
        """Test that re-identifying a Transaction does not clash on id."""
        assert tx("old").with_id("new").id == "new"

    def test_transaction_requires_id(self):
        """Test that an empty id is rejected."""
        with pytest.raises(ValidationError):
            Transaction(id="", description="x", amount=Decimal("1"), type="income")

    def test_rejects_amount_above_cap(self):
        """Test that amounts above MAX_AMOUNT are rejected."""
        NewTransaction(description="Cap", amount=MAX_AMOUNT, type="income")
        with pytest.raises(ValidationError):
            NewTransaction(description="Huge", amount=Decimal("1e29"), type="income")

    def test_ledger_item_is_expense(self):
        """Test that list rows know their direction."""
        row = LedgerItem(id="a", description="x", date="2024-01-01",
                         type=TransactionType.EXPENSE, display_amount="-$1.00")
        assert row.is_expense
        assert not row.model_copy(update={"type": TransactionType.INCOME}).is_expense


class TestDraftAndResults:
    """Tests for form and result models."""

    def test_draft_accepts_numeric_amount(self):
        """Test that a float amount from a number input is kept as text."""
        draft = TransactionDraft(description="x", amount=12.5, type="income")
        assert draft.amount == "12.5"

    def test_draft_defaults(self):
        """Test that an empty draft is constructible."""
        draft = TransactionDraft()
        assert draft.description == ""
        assert draft.amount is None
        assert draft.type is None

    def test_validation_result_field_errors_first_message_wins(self):
        """Test that field_errors keeps the first message per field."""
        result = ValidationResult(issues=[
            ValidationIssue(field="amount", issue_type="missing", message="first"),
            ValidationIssue(field="amount", issue_type="invalid_value", message="second"),
        ])
        assert not result.is_valid
        assert result.field_errors == {"amount": "first"}

    def test_action_result_helpers(self):
        """Test ok() and failed() constructors."""
        assert ActionResult.ok().success
        failed = ActionResult.failed("nope", redirect_to_login=True)
        assert not failed.success
        assert failed.message == "nope"
        assert failed.redirect_to_login

    def test_balance_is_negative(self):
        """Test the negative balance flag."""
        assert Balance(income=Decimal("0"), expense=Decimal("5"), net=Decimal("-5")).is_negative
        assert not Balance().is_negative


class TestEnums:
    """Tests for enum values."""

    def test_sort_key_values(self):
        """Test sort key string values."""
        assert [k.value for k in SortKey] == ["newest", "oldest", "highest", "lowest"]

    def test_filter_values(self):
        """Test filter string values."""
        assert TransactionFilter("all") is TransactionFilter.ALL
        assert TransactionFilter("expense") is TransactionFilter.EXPENSE

    def test_theme_values(self):
        """Test theme string values."""
        assert Theme("dark") is Theme.DARK


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
