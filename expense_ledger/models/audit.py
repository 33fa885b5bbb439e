"""
Audit Models for the Expense Ledger

Every ledger transition (request started, committed, failed,
discarded) produces an AuditEvent. Events are logged, not stored:
the persistence service only holds expenses.

DESIGN DECISION: The request id doubles as the correlation id, so
all events of one store operation can be grepped together.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    One per lifecycle transition, plus session changes.
    """
    # Request lifecycle
    REQUEST_STARTED = "request_started"
    REQUEST_SUCCEEDED = "request_succeeded"
    REQUEST_FAILED = "request_failed"
    REQUEST_DISCARDED = "request_discarded"

    # Input rejected before any write was issued
    VALIDATION_FAILED = "validation_failed"

    # Local state
    ERROR_CLEARED = "error_cleared"

    # Session
    SESSION_LOGGED_IN = "session_logged_in"
    SESSION_LOGGED_OUT = "session_logged_out"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Which store operation, and which record if there is one
    operation: Optional[str] = None
    entity_id: Optional[str] = None

    correlation_id: Optional[str] = Field(
        default=None,
        description="Request id shared by all events of one operation"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "operation": self.operation,
            "entity_id": self.entity_id,
            "correlation_id": self.correlation_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.request_started("add", request_id)
        event = AuditEventBuilder.request_failed("fetch_all", request_id, "timeout")
    """

    @staticmethod
    def request_started(
        operation: str,
        request_id: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_STARTED,
            severity=AuditSeverity.DEBUG,
            operation=operation,
            entity_id=entity_id,
            correlation_id=request_id,
            description=f"Started {operation}",
        )

    @staticmethod
    def request_succeeded(
        operation: str,
        request_id: str,
        item_count: int,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_SUCCEEDED,
            operation=operation,
            entity_id=entity_id,
            correlation_id=request_id,
            description=f"Committed {operation}",
            details={"item_count": item_count},
        )

    @staticmethod
    def request_failed(
        operation: str,
        request_id: str,
        error_message: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_FAILED,
            severity=AuditSeverity.ERROR,
            operation=operation,
            entity_id=entity_id,
            correlation_id=request_id,
            description=f"{operation} failed",
            error_message=error_message,
        )

    @staticmethod
    def request_discarded(
        operation: str,
        request_id: str,
        reason: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_DISCARDED,
            severity=AuditSeverity.WARNING,
            operation=operation,
            entity_id=entity_id,
            correlation_id=request_id,
            description=f"Dropped result of {operation}",
            details={"reason": reason},
        )

    @staticmethod
    def validation_failed(
        operation: str,
        request_id: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            operation=operation,
            correlation_id=request_id,
            description=f"Rejected {operation} input before writing",
            error_message=error_message,
        )

    @staticmethod
    def error_cleared() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ERROR_CLEARED,
            severity=AuditSeverity.DEBUG,
            description="Last error cleared",
        )

    @staticmethod
    def session_logged_in(owner_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_LOGGED_IN,
            entity_id=owner_id,
            description="User logged in",
        )

    @staticmethod
    def session_logged_out(owner_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_LOGGED_OUT,
            entity_id=owner_id,
            description="User logged out",
        )
