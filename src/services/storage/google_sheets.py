"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the document store because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No per-user collections, so every row carries a user_id column
- Limited query capabilities (we filter in Python)

gspread is synchronous; calls run in a worker thread so the event loop
stays free and request timeouts can actually fire.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import GoogleSheetsSettings, get_settings
from src.models.transaction import NewTransaction, Transaction, TransactionType
from src.services.storage.interface import (
    ConnectionError,
    StorageError,
    TransactionStorageInterface,
)


logger = structlog.get_logger(__name__)

# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "description",
    "amount",
    "type",
    "date",
    "created_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and retries establishing the connection.
    Data requests themselves are never retried here.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.transactions_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.transactions_sheet_name,
                rows=1000,
                cols=len(TRANSACTION_COLUMNS),
            )
            sheet.append_row(TRANSACTION_COLUMNS)
        return sheet


class GoogleSheetsTransactionStorage(TransactionStorageInterface):
    """
    Google Sheets implementation of transaction storage.

    One transaction per row; ids are random hex strings assigned here,
    so an id is never reused after its row is deleted.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _transaction_to_row(self, user_id: str, transaction: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            transaction.id,
            user_id,
            transaction.description,
            str(transaction.amount),
            transaction.type.value,
            transaction.date,
            transaction.created_at.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Transaction(
            id=safe_get(0),
            description=safe_get(2),
            amount=Decimal(safe_get(3)),
            type=TransactionType(safe_get(4)),
            date=safe_get(5),
            created_at=datetime.fromisoformat(safe_get(6)),
        )

    def _list_all_sync(self, user_id: str) -> list[Transaction]:
        sheet = self._client.get_transactions_sheet()
        all_rows = sheet.get_all_values()[1:]  # Skip header

        transactions = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            if len(row) < 2 or row[1] != user_id:
                continue

            try:
                transactions.append(self._row_to_transaction(row))
            except Exception as e:
                logger.warning("malformed_transaction_row", row_id=row[0], error=str(e))
                continue

        return transactions

    def _create_sync(self, user_id: str, transaction: NewTransaction) -> str:
        stored = transaction.with_id(uuid4().hex)
        sheet = self._client.get_transactions_sheet()
        sheet.append_row(
            self._transaction_to_row(user_id, stored),
            value_input_option="RAW",
        )
        return stored.id

    def _delete_sync(self, user_id: str, transaction_id: str) -> bool:
        sheet = self._client.get_transactions_sheet()
        all_rows = sheet.get_all_values()

        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if len(row) > 1 and row[0] == transaction_id and row[1] == user_id:
                sheet.delete_rows(idx)
                return True

        return False

    async def list_all(self, user_id: str) -> list[Transaction]:
        """List every transaction owned by user_id."""
        try:
            return await asyncio.to_thread(self._list_all_sync, user_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}") from e

    async def create(self, user_id: str, transaction: NewTransaction) -> str:
        """Append a transaction row and return its new id."""
        try:
            return await asyncio.to_thread(self._create_sync, user_id, transaction)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}") from e

    async def delete_by_id(self, user_id: str, transaction_id: str) -> bool:
        """Delete the row holding this user's transaction."""
        try:
            return await asyncio.to_thread(self._delete_sync, user_id, transaction_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}") from e
