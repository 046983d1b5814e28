"""
Audit Logger

DESIGN DECISION: Every ledger operation, committed or rejected, is logged.
This provides:
1. Complete traceability of the group's books
2. Debugging capability when an operation is rejected
3. Accountability towards members

The audit logger:
- Is synchronous, like the entity stores it sits next to
- Gracefully handles failures (doesn't break an operation if logging fails)
- Supports correlation IDs to trace the events of one operation
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from chamaa.models.audit import AuditEvent, AuditEventBuilder
from chamaa.services.storage import AuditStorageInterface


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
    """Route structlog output through stdlib logging at the given level."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store (for persistence), when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("chamaa.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_admin_created(
        self,
        admin_id: str,
        name: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.admin_created(
            admin_id=admin_id,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_group_created(
        self,
        group_id: str,
        name: str,
        admin_id: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.group_created(
            group_id=group_id,
            name=name,
            admin_id=admin_id,
            correlation_id=correlation_id,
        ))

    def log_member_created(
        self,
        member_id: str,
        name: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.member_created(
            member_id=member_id,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_member_added(
        self,
        group_id: str,
        member_id: str,
        member_count: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.member_added_to_group(
            group_id=group_id,
            member_id=member_id,
            member_count=member_count,
            correlation_id=correlation_id,
        ))

    def log_contribution_recorded(
        self,
        contribution_id: str,
        group_id: str,
        member_id: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.contribution_recorded(
            contribution_id=contribution_id,
            group_id=group_id,
            member_id=member_id,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_rejected(
        self,
        operation: str,
        kind: str,
        message: str,
        field: Optional[str],
        correlation_id: UUID,
    ) -> None:
        """Log an operation that was rejected by validation."""
        self.log(AuditEventBuilder.operation_rejected(
            operation=operation,
            kind=kind,
            message=message,
            field=field,
            correlation_id=correlation_id,
        ))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a ledger operation and pass it to every
    event the operation logs.
    """
    return uuid4()
