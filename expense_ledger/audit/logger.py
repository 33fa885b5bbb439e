"""
Audit Logger

DESIGN DECISION: Every ledger transition is logged.
This provides:
1. Traceability of each request from start to commit
2. Debugging capability for stale or failed writes
3. A record of which requests were dropped and why

The audit logger:
- Writes structured events through structlog
- Never raises (a logging failure must not break a store operation)
- Tags related events with the request id as correlation id
"""

import logging
from typing import Any, Callable, Optional

import structlog

from expense_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: Optional[str] = None, json_output: bool = True) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Passing `level` also (re)configures the stdlib root logger.
    Safe to call more than once; the last call wins.
    """
    if level is not None:
        logging.basicConfig(format="%(message)s", level=level, force=True)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service for the ledger.
    """

    def __init__(
        self,
        logger_name: str = "expense_ledger.audit",
        keep_history: bool = False,
    ):
        """
        Args:
            logger_name: stdlib logger the events are written to
            keep_history: Also keep every event in `self.events`
                          (used by tests and debugging tools)
        """
        self._logger = structlog.get_logger(logger_name)
        self.events: list[AuditEvent] = []
        self.keep_history = keep_history

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        if self.keep_history:
            self.events.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must never take down a store operation
            logging.getLogger(__name__).warning("audit logging failed: %s", e)

    def _emit(self, build: Callable[..., AuditEvent], *args: Any) -> None:
        """Build an event and log it; a rejected event is reported, not raised."""
        try:
            event = build(*args)
        except ValueError as e:
            logging.getLogger(__name__).warning("audit event rejected: %s", e)
            return
        self.log(event)

    def log_request_started(
        self,
        operation: str,
        request_id: str,
        entity_id: Optional[str] = None,
    ) -> None:
        self._emit(AuditEventBuilder.request_started, operation, request_id, entity_id)

    def log_request_succeeded(
        self,
        operation: str,
        request_id: str,
        item_count: int,
        entity_id: Optional[str] = None,
    ) -> None:
        self._emit(
            AuditEventBuilder.request_succeeded,
            operation, request_id, item_count, entity_id,
        )

    def log_request_failed(
        self,
        operation: str,
        request_id: str,
        error_message: str,
        entity_id: Optional[str] = None,
    ) -> None:
        self._emit(
            AuditEventBuilder.request_failed,
            operation, request_id, error_message, entity_id,
        )

    def log_request_discarded(
        self,
        operation: str,
        request_id: str,
        reason: str,
        entity_id: Optional[str] = None,
    ) -> None:
        self._emit(
            AuditEventBuilder.request_discarded,
            operation, request_id, reason, entity_id,
        )

    def log_validation_failed(
        self,
        operation: str,
        request_id: str,
        error_message: str,
    ) -> None:
        self._emit(AuditEventBuilder.validation_failed, operation, request_id, error_message)

    def log_error_cleared(self) -> None:
        self._emit(AuditEventBuilder.error_cleared)

    def log_session_logged_in(self, owner_id: str) -> None:
        self._emit(AuditEventBuilder.session_logged_in, owner_id)

    def log_session_logged_out(self, owner_id: Optional[str]) -> None:
        self._emit(AuditEventBuilder.session_logged_out, owner_id)
