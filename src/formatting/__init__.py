"""Display formatting package."""

from src.formatting.currency import (
    SUPPORTED_CURRENCIES,
    Currency,
    UnsupportedCurrencyError,
    currency_symbol,
    format_currency,
    format_signed,
    get_currency,
    is_supported_currency,
)

__all__ = [
    "SUPPORTED_CURRENCIES",
    "Currency",
    "UnsupportedCurrencyError",
    "currency_symbol",
    "format_currency",
    "format_signed",
    "get_currency",
    "is_supported_currency",
]
