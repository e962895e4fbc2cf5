"""Ledger error taxonomy and the bounded-wait helper for collaborator calls."""

import asyncio
from typing import Awaitable, TypeVar


T = TypeVar("T")


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class NotAuthenticatedError(LedgerError):
    """A protected action was attempted with no active session."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Cannot {action} without an active session")


class OperationTimeoutError(LedgerError):
    """A collaborator call did not finish within the request timeout."""

    def __init__(self, operation: str, timeout_seconds: float):
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(f"{operation} timed out after {timeout_seconds:g}s")


class PersistenceFailureError(LedgerError):
    """The document store rejected (or never answered) a request."""

    def __init__(self, action: str, cause: Exception):
        self.action = action
        self.cause = cause
        super().__init__(f"Failed to {action}: {cause}")


async def bounded(awaitable: Awaitable[T], operation: str, timeout_seconds: float) -> T:
    """Await a collaborator call, raising OperationTimeoutError past the deadline."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        raise OperationTimeoutError(operation, timeout_seconds) from e
