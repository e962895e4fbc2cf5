"""Tests for currency formatting."""

import pytest
from decimal import Decimal

from src.formatting import (
    UnsupportedCurrencyError,
    currency_symbol,
    format_currency,
    format_signed,
    get_currency,
    is_supported_currency,
)
from src.models.transaction import TransactionType


class TestFormatCurrency:
    """Tests for format_currency."""

    def test_usd_with_grouping(self):
        """Test symbol prefix, thousands separator and two decimals."""
        assert format_currency(Decimal("1234.5"), "USD") == "$1,234.50"

    def test_negative_amount(self):
        """Test that the minus sign precedes the symbol."""
        assert format_currency(Decimal("-40"), "USD") == "-$40.00"

    def test_zero(self):
        """Test zero renders without a sign."""
        assert format_currency(0, "USD") == "$0.00"

    def test_rounds_half_up(self):
        """Test that halves round away from zero."""
        assert format_currency(Decimal("2.005"), "USD") == "$2.01"
        assert format_currency(Decimal("-2.005"), "USD") == "-$2.01"

    def test_tiny_negative_has_no_minus(self):
        """Test that a value rounding to zero shows no minus sign."""
        assert format_currency(Decimal("-0.001"), "USD") == "$0.00"

    def test_float_input(self):
        """Test that floats are converted without binary noise."""
        assert format_currency(0.1, "EUR") == "€0.10"

    def test_jpy_has_no_fraction_digits(self):
        """Test zero-decimal currencies."""
        assert format_currency(Decimal("1234.5"), "JPY") == "¥1,235"

    def test_code_is_case_insensitive(self):
        """Test lowercase currency codes."""
        assert format_currency(Decimal("5"), "gbp") == "£5.00"

    def test_unsupported_currency_falls_back_to_code(self):
        """Test that an unknown code still renders."""
        assert format_currency(Decimal("1234.5"), "xyz") == "XYZ 1,234.50"

    def test_amount_beyond_default_precision(self):
        """Test that amounts wider than 28 digits still render."""
        assert format_currency(Decimal("1e30"), "USD") == "$1,000,000,000,000,000,000,000,000,000,000.00"
        assert format_currency(Decimal("-123456789012345678901234567.895"), "JPY") == "-¥123,456,789,012,345,678,901,234,568"

    def test_non_finite_amount_renders(self):
        """Test that NaN and infinity render instead of raising."""
        assert format_currency(Decimal("Infinity"), "USD") == "$Infinity"
        assert format_currency(Decimal("NaN"), "xyz") == "XYZ NaN"


class TestFormatSigned:
    """Tests for list amounts."""

    def test_income_gets_plus(self):
        """Test income sign."""
        assert format_signed(Decimal("100"), TransactionType.INCOME, "USD") == "+$100.00"

    def test_expense_gets_minus(self):
        """Test expense sign."""
        assert format_signed(Decimal("40"), TransactionType.EXPENSE, "USD") == "-$40.00"


class TestCurrencyLookup:
    """Tests for the currency table."""

    def test_get_currency(self):
        """Test lookup of a supported code."""
        assert get_currency("INR").symbol == "₹"

    def test_get_currency_unknown_raises(self):
        """Test that unknown codes raise."""
        with pytest.raises(UnsupportedCurrencyError) as exc:
            get_currency("ABC")
        assert exc.value.code == "ABC"

    def test_is_supported(self):
        """Test supported checks."""
        assert is_supported_currency("usd")
        assert not is_supported_currency("ABC")
        assert not is_supported_currency("")

    def test_symbol_fallback(self):
        """Test that an unknown code is its own symbol."""
        assert currency_symbol("EUR") == "€"
        assert currency_symbol("abc") == "ABC"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
