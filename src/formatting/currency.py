"""
Currency Formatting

Renders amounts the way an en-US locale renders currency:
symbol prefix, comma grouping, fixed fraction digits per currency.

    format_currency(1234.5, "USD")  -> "$1,234.50"
    format_currency(-40, "USD")     -> "-$40.00"
    format_currency(1234.5, "JPY")  -> "¥1,235"

POLICY for unsupported codes: the formatter does NOT fail the render.
get_currency() raises UnsupportedCurrencyError, format_currency() catches
it, logs a warning and renders with the code itself as the symbol
("XYZ 1,234.50", two decimals).
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

import structlog
from pydantic import BaseModel, Field

from src.models.transaction import TransactionType


logger = structlog.get_logger(__name__)

Number = Union[Decimal, int, float, str]


class UnsupportedCurrencyError(ValueError):
    """Currency code is not one the app knows how to render."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unsupported currency: {code!r}")


class Currency(BaseModel):
    """Rendering rules for one currency."""

    code: str = Field(..., min_length=3, max_length=3)
    symbol: str
    fraction_digits: int = Field(default=2, ge=0, le=4)


SUPPORTED_CURRENCIES: dict[str, Currency] = {
    "USD": Currency(code="USD", symbol="$"),
    "EUR": Currency(code="EUR", symbol="€"),
    "GBP": Currency(code="GBP", symbol="£"),
    "JPY": Currency(code="JPY", symbol="¥", fraction_digits=0),
    "INR": Currency(code="INR", symbol="₹"),
}


def get_currency(code: str) -> Currency:
    """Look up a currency by code (case-insensitive)."""
    currency = SUPPORTED_CURRENCIES.get((code or "").strip().upper())
    if currency is None:
        raise UnsupportedCurrencyError(code)
    return currency


def is_supported_currency(code: str) -> bool:
    return (code or "").strip().upper() in SUPPORTED_CURRENCIES


def currency_symbol(code: str) -> str:
    """Symbol for the currency picker; falls back to the code itself."""
    try:
        return get_currency(code).symbol
    except UnsupportedCurrencyError:
        return (code or "").strip().upper()


def _to_decimal(amount: Number) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    return Decimal(str(amount))


def _render(value: Decimal, prefix: str, fraction_digits: int) -> str:
    if not value.is_finite():
        return f"{prefix}{value}"
    quantum = Decimal(1).scaleb(-fraction_digits)
    with localcontext() as ctx:
        # Enough digits that quantize never overflows the context
        ctx.prec = max(ctx.prec, value.adjusted() + fraction_digits + 2)
        rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)
    body = f"{abs(rounded):,.{fraction_digits}f}"
    sign = "-" if rounded < 0 else ""
    return f"{sign}{prefix}{body}"


def format_currency(amount: Number, currency_code: str) -> str:
    """
    Format an amount as a currency string.

    Negative amounts get a leading minus before the symbol.
    Never raises for an unknown currency code (see module docstring).
    """
    value = _to_decimal(amount)
    try:
        currency = get_currency(currency_code)
    except UnsupportedCurrencyError as e:
        logger.warning("unsupported_currency", code=e.code)
        code = (currency_code or "").strip().upper()
        return _render(value, f"{code} " if code else "", 2)

    return _render(value, currency.symbol, currency.fraction_digits)


def format_signed(
    amount: Number,
    transaction_type: TransactionType,
    currency_code: str,
) -> str:
    """Format a list amount with +/- from the transaction type, e.g. '+$100.00'."""
    magnitude = abs(_to_decimal(amount))
    formatted = format_currency(magnitude, currency_code)
    sign = "-" if transaction_type == TransactionType.EXPENSE else "+"
    return f"{sign}{formatted}"
