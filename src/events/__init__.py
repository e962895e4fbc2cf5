"""Structured event logging package."""

from src.events.logger import (
    EventLogger,
    EventType,
    configure_logging,
    create_correlation_id,
)

__all__ = ["EventLogger", "EventType", "configure_logging", "create_correlation_id"]
