"""
Tests for the Google Sheets storage.

A small in-memory worksheet stands in for gspread; no network calls.
"""

import asyncio
from decimal import Decimal

import pytest

from src.models.transaction import TransactionType
from src.services.storage import GoogleSheetsTransactionStorage, StorageError
from src.services.storage.google_sheets import TRANSACTION_COLUMNS


class FakeWorksheet:
    def __init__(self, rows=None):
        self.rows = [list(TRANSACTION_COLUMNS)] + [list(r) for r in (rows or [])]
        self.fail = False

    def get_all_values(self):
        if self.fail:
            raise RuntimeError("quota exceeded")
        return [list(r) for r in self.rows]

    def append_row(self, values, value_input_option=None):
        if self.fail:
            raise RuntimeError("quota exceeded")
        self.rows.append([str(v) for v in values])

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self, sheet):
        self.sheet = sheet

    def get_transactions_sheet(self):
        return self.sheet


def row(tid, user_id="alice", description="Lunch", amount="12.50", kind="expense", day="2024-01-05"):
    return [tid, user_id, description, amount, kind, day, "2024-01-05T12:00:00+00:00"]


@pytest.fixture
def sheet():
    return FakeWorksheet([
        row("t1"),
        row("t2", description="Salary", amount="1000", kind="income"),
        row("t3", user_id="bob"),
    ])


@pytest.fixture
def storage(sheet):
    return GoogleSheetsTransactionStorage(client=FakeSheetsClient(sheet))


class TestGoogleSheetsTransactionStorage:
    """Tests for GoogleSheetsTransactionStorage."""

    def test_list_all_scopes_to_user(self, storage):
        """Test that only the user's rows are returned."""
        records = asyncio.run(storage.list_all("alice"))
        assert [r.id for r in records] == ["t1", "t2"]
        assert records[1].amount == Decimal("1000")
        assert records[1].type == TransactionType.INCOME

    def test_list_all_skips_malformed_rows(self, sheet, storage):
        """Test that a bad row is skipped, not fatal."""
        sheet.rows.append(row("bad", amount="lots"))
        sheet.rows.append(row("huge", amount="100000000000000000000000000000"))
        sheet.rows.append(["", "alice"])
        records = asyncio.run(storage.list_all("alice"))
        assert [r.id for r in records] == ["t1", "t2"]

    def test_create_appends_row(self, sheet, storage, new_tx):
        """Test that create assigns an id and writes one row."""
        new_id = asyncio.run(storage.create("alice", new_tx("7.25", description="Bus")))
        assert new_id
        assert sheet.rows[-1][0] == new_id
        assert sheet.rows[-1][1:5] == ["alice", "Bus", "7.25", "expense"]

        records = asyncio.run(storage.list_all("alice"))
        assert records[-1].id == new_id

    def test_delete_by_id(self, sheet, storage):
        """Test that the matching row is removed."""
        assert asyncio.run(storage.delete_by_id("alice", "t1")) is True
        assert [r[0] for r in sheet.rows[1:]] == ["t2", "t3"]

    def test_delete_other_users_row_is_refused(self, sheet, storage):
        """Test that ids are scoped to their owner."""
        assert asyncio.run(storage.delete_by_id("alice", "t3")) is False
        assert len(sheet.rows) == 4

    def test_delete_missing(self, storage):
        """Test deleting an id that does not exist."""
        assert asyncio.run(storage.delete_by_id("alice", "nope")) is False

    def test_backend_errors_become_storage_errors(self, sheet, storage, new_tx):
        """Test error wrapping."""
        sheet.fail = True
        with pytest.raises(StorageError):
            asyncio.run(storage.list_all("alice"))
        with pytest.raises(StorageError):
            asyncio.run(storage.create("alice", new_tx()))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
