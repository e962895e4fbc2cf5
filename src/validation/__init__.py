"""Form validation package."""

from src.validation.validator import TransactionValidationError, TransactionValidator

__all__ = ["TransactionValidationError", "TransactionValidator"]
