"""
Event Logger

DESIGN DECISION: Every significant action in the system is logged
as one structured event. This provides:
1. Traceability of a user action across its collaborator calls
2. Debugging capability when the backend misbehaves

The event logger:
- Writes to the local structured log only (nothing is persisted)
- Supports correlation IDs to tie together events of one user action
"""

import logging
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structured logs to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class EventType(str, Enum):
    """Types of events we log."""
    # Session
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    SIGN_IN_FAILED = "sign_in_failed"
    SIGN_UP_FAILED = "sign_up_failed"

    # Loading
    TRANSACTIONS_LOADED = "transactions_loaded"
    TRANSACTIONS_LOAD_FAILED = "transactions_load_failed"
    STALE_LOAD_DISCARDED = "stale_load_discarded"

    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    VALIDATION_FAILED = "validation_failed"
    PERSISTENCE_FAILED = "persistence_failed"
    NOT_AUTHENTICATED = "not_authenticated"
    DUPLICATE_SUBMISSION = "duplicate_submission"

    # Preferences
    PREFERENCES_CHANGED = "preferences_changed"


class EventLogger:
    """
    Central structured logging service.

    Thin wrapper over a structlog logger that fixes the event vocabulary.
    """

    def __init__(self, name: str = "expense_tracker"):
        self._logger = structlog.get_logger(name)

    def log(
        self,
        event_type: EventType,
        level: str = "info",
        correlation_id: Optional[UUID] = None,
        **details: Any,
    ) -> None:
        """Log one event."""
        fields = {"event_type": event_type.value, **details}
        if correlation_id is not None:
            fields["correlation_id"] = str(correlation_id)

        if level == "error":
            self._logger.error("app_event", **fields)
        elif level == "warning":
            self._logger.warning("app_event", **fields)
        else:
            self._logger.info("app_event", **fields)

    def log_session_started(self, user_id: str) -> None:
        self.log(EventType.SESSION_STARTED, user_id=user_id)

    def log_session_ended(self, user_id: Optional[str], cleared: int) -> None:
        self.log(EventType.SESSION_ENDED, user_id=user_id, cleared_count=cleared)

    def log_transactions_loaded(self, user_id: str, count: int) -> None:
        self.log(EventType.TRANSACTIONS_LOADED, user_id=user_id, count=count)

    def log_load_failed(self, user_id: str, error_message: str) -> None:
        self.log(
            EventType.TRANSACTIONS_LOAD_FAILED,
            level="error",
            user_id=user_id,
            error=error_message,
        )

    def log_transaction_added(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        self.log(
            EventType.TRANSACTION_ADDED,
            correlation_id=correlation_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
        )

    def log_transaction_deleted(self, transaction_id: str, correlation_id: UUID) -> None:
        self.log(
            EventType.TRANSACTION_DELETED,
            correlation_id=correlation_id,
            transaction_id=transaction_id,
        )

    def log_validation_failed(self, fields: list[str], correlation_id: UUID) -> None:
        self.log(
            EventType.VALIDATION_FAILED,
            level="warning",
            correlation_id=correlation_id,
            fields=fields,
        )

    def log_persistence_failed(
        self,
        action: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            EventType.PERSISTENCE_FAILED,
            level="error",
            correlation_id=correlation_id,
            action=action,
            error=error_message,
        )

    def log_not_authenticated(self, action: str) -> None:
        self.log(EventType.NOT_AUTHENTICATED, level="warning", action=action)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., adding a transaction).
    Pass it through all subsequent operations.
    """
    return uuid4()
