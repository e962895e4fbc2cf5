"""
Shared fixtures for Expense Tracker tests.

No real network calls: storage and identity are in-memory fakes, or
small subclasses that fail / stall on demand.
"""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from src.config import AppSettings
from src.models.transaction import NewTransaction, Transaction, TransactionType
from src.orchestrator import ExpenseTrackerController
from src.services.auth import LocalAuthService
from src.services.preferences import PreferencesStore
from src.services.storage import InMemoryTransactionStorage, StorageError


FIXED_TODAY = date(2024, 3, 15)


class FailingStorage(InMemoryTransactionStorage):
    """Rejects whichever operations are listed in `fail_on`."""

    def __init__(self, fail_on=("list_all", "create", "delete_by_id")):
        super().__init__()
        self.fail_on = set(fail_on)

    async def list_all(self, user_id):
        if "list_all" in self.fail_on:
            raise StorageError("backend unavailable")
        return await super().list_all(user_id)

    async def create(self, user_id, transaction):
        if "create" in self.fail_on:
            raise StorageError("backend unavailable")
        return await super().create(user_id, transaction)

    async def delete_by_id(self, user_id, transaction_id):
        if "delete_by_id" in self.fail_on:
            raise StorageError("backend unavailable")
        return await super().delete_by_id(user_id, transaction_id)


class StallingStorage(InMemoryTransactionStorage):
    """Sleeps before answering, to exercise request timeouts."""

    def __init__(self, delay: float = 1.0):
        super().__init__()
        self.delay = delay

    async def list_all(self, user_id):
        await asyncio.sleep(self.delay)
        return await super().list_all(user_id)

    async def create(self, user_id, transaction):
        await asyncio.sleep(self.delay)
        return await super().create(user_id, transaction)


class GatedStorage(InMemoryTransactionStorage):
    """The operations named in `gated` wait until the test opens the gate."""

    def __init__(self, gated=("list_all",)):
        super().__init__()
        self.gated = set(gated)
        self.gate = asyncio.Event()
        self.calls = 0

    async def list_all(self, user_id):
        if "list_all" in self.gated:
            self.calls += 1
            await self.gate.wait()
        return await super().list_all(user_id)

    async def create(self, user_id, transaction):
        if "create" in self.gated:
            self.calls += 1
            await self.gate.wait()
        return await super().create(user_id, transaction)


def make_transaction(
    transaction_id: str,
    amount: str = "10.00",
    transaction_type: TransactionType = TransactionType.EXPENSE,
    tx_date: str = "2024-01-01",
    description: str = "Item",
) -> Transaction:
    return Transaction(
        id=transaction_id,
        description=description,
        amount=Decimal(amount),
        type=transaction_type,
        date=tx_date,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def make_new_transaction(
    amount: str = "10.00",
    transaction_type: TransactionType = TransactionType.EXPENSE,
    tx_date: str = "2024-01-01",
    description: str = "Item",
) -> NewTransaction:
    return NewTransaction(
        description=description,
        amount=Decimal(amount),
        type=transaction_type,
        date=tx_date,
    )


@pytest.fixture
def tx():
    """Factory for persisted transactions."""
    return make_transaction


@pytest.fixture
def new_tx():
    """Factory for not-yet-persisted transactions."""
    return make_new_transaction


@pytest.fixture
def app_settings(tmp_path):
    return AppSettings(
        storage_backend="memory",
        preferences_path=tmp_path / "preferences.json",
        default_currency="USD",
        summary_view_limit=3,
        request_timeout_seconds=0.2,
    )


@pytest.fixture
def build_controller(app_settings):
    """Build a started controller around the given storage."""

    def _build(storage=None, auth=None):
        controller = ExpenseTrackerController(
            auth=auth or LocalAuthService(),
            storage=storage or InMemoryTransactionStorage(),
            preferences=PreferencesStore(app_settings.preferences_path),
            settings=app_settings,
            today=lambda: FIXED_TODAY,
        )
        asyncio.run(controller.start())
        return controller

    return _build
