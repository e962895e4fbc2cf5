"""
Derived View Engine

DESIGN DECISION: Every view is a PURE function of a transaction snapshot
plus explicit parameters. Nothing here holds state or touches the store,
so the same snapshot and parameters always give the same output.

Ordering rules:
- newest / oldest sort by date, highest / lowest by amount
- Python's sorted() is stable (also with reverse=True), so records that
  tie keep their original relative order
- A date string that is not an ISO date (or ISO datetime) sorts as the
  lowest possible date, below every real one. Bad data from the backend
  must never break rendering.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

import structlog

from src.models.transaction import (
    Balance,
    SortKey,
    Transaction,
    TransactionFilter,
    TransactionType,
)


logger = structlog.get_logger(__name__)

DEFAULT_SORT = SortKey.NEWEST

# Where unparseable dates land in every ordering
UNPARSEABLE_DATE = date.min


def parse_date_key(value: Optional[str]) -> date:
    """Sort key for a transaction date string."""
    if not value:
        return UNPARSEABLE_DATE
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return UNPARSEABLE_DATE


def parse_sort_key(value: Union[SortKey, str, None]) -> SortKey:
    """Resolve a sort key; anything unknown falls back to newest."""
    if isinstance(value, SortKey):
        return value
    try:
        return SortKey((value or "").strip().lower())
    except ValueError:
        logger.warning("unknown_sort_key", value=value, fallback=DEFAULT_SORT.value)
        return DEFAULT_SORT


def parse_filter(value: Union[TransactionFilter, str, None]) -> TransactionFilter:
    """Resolve a list filter; anything unknown shows all."""
    if isinstance(value, TransactionFilter):
        return value
    try:
        return TransactionFilter((value or "").strip().lower())
    except ValueError:
        logger.warning("unknown_filter", value=value, fallback=TransactionFilter.ALL.value)
        return TransactionFilter.ALL


def compute_balance(records: Iterable[Transaction]) -> Balance:
    """Sum amounts by type. Empty input gives an all-zero balance."""
    income = Decimal("0")
    expense = Decimal("0")
    for record in records:
        if record.type == TransactionType.INCOME:
            income += record.amount
        elif record.type == TransactionType.EXPENSE:
            expense += record.amount
    return Balance(income=income, expense=expense, net=income - expense)


def filter_and_sort(
    records: Sequence[Transaction],
    filter: Union[TransactionFilter, str] = TransactionFilter.ALL,
    sort_key: Union[SortKey, str, None] = DEFAULT_SORT,
) -> list[Transaction]:
    """
    Filter by type, then order. Returns a new list; input is untouched.

    Args:
        records: Snapshot to project
        filter: all / income / expense
        sort_key: newest / oldest / highest / lowest (unknown -> newest)
    """
    selected = parse_filter(filter)
    key = parse_sort_key(sort_key)

    if selected == TransactionFilter.ALL:
        visible = list(records)
    else:
        wanted = TransactionType(selected.value)
        visible = [record for record in records if record.type == wanted]

    if key == SortKey.NEWEST:
        return sorted(visible, key=lambda r: parse_date_key(r.date), reverse=True)
    if key == SortKey.OLDEST:
        return sorted(visible, key=lambda r: parse_date_key(r.date))
    if key == SortKey.HIGHEST:
        return sorted(visible, key=lambda r: r.amount, reverse=True)
    return sorted(visible, key=lambda r: r.amount)


def limit_for_summary_view(records: Sequence[Transaction], n: int) -> list[Transaction]:
    """First n records of an already-ordered sequence."""
    if n <= 0:
        return []
    return list(records[:n])


def build_summary_view(records: Sequence[Transaction], n: int) -> list[Transaction]:
    """Most recent n transactions: sort first, then limit."""
    return limit_for_summary_view(filter_and_sort(records, TransactionFilter.ALL, SortKey.NEWEST), n)
