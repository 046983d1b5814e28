"""
Audit Models for Chamaa Ledger

Every committed or rejected ledger operation is logged for audit purposes.
This provides:
1. Complete traceability of who joined which group and who paid what
2. Debugging information when an operation is rejected
3. Accountability towards the group

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Committed operations
    ADMIN_CREATED = "admin_created"
    GROUP_CREATED = "group_created"
    MEMBER_CREATED = "member_created"
    MEMBER_ADDED_TO_GROUP = "member_added_to_group"
    CONTRIBUTION_RECORDED = "contribution_recorded"

    # Rejected operations
    OPERATION_REJECTED = "operation_rejected"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger operation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'group', 'member', 'contribution')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one operation"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
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
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_code, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_code or "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.group_created(group_id, name, admin_id, correlation_id)
    """

    @staticmethod
    def admin_created(
        admin_id: str,
        name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADMIN_CREATED,
            entity_type="admin",
            entity_id=admin_id,
            correlation_id=correlation_id,
            description=f"Admin created: {name}",
            details={"name": name},
        )

    @staticmethod
    def group_created(
        group_id: str,
        name: str,
        admin_id: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GROUP_CREATED,
            entity_type="group",
            entity_id=group_id,
            correlation_id=correlation_id,
            description=f"Group created: {name}",
            details={
                "name": name,
                "admin_id": admin_id,
            },
        )

    @staticmethod
    def member_created(
        member_id: str,
        name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_CREATED,
            entity_type="member",
            entity_id=member_id,
            correlation_id=correlation_id,
            description=f"Member created: {name}",
            details={"name": name},
        )

    @staticmethod
    def member_added_to_group(
        group_id: str,
        member_id: str,
        member_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MEMBER_ADDED_TO_GROUP,
            entity_type="group",
            entity_id=group_id,
            correlation_id=correlation_id,
            description=f"Member {member_id} joined group {group_id}",
            details={
                "member_id": member_id,
                "member_count": member_count,
            },
        )

    @staticmethod
    def contribution_recorded(
        contribution_id: str,
        group_id: str,
        member_id: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTRIBUTION_RECORDED,
            entity_type="contribution",
            entity_id=contribution_id,
            correlation_id=correlation_id,
            description=f"Contribution recorded: {amount} to group {group_id}",
            details={
                "group_id": group_id,
                "member_id": member_id,
                "amount": amount,
            },
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        kind: str,
        message: str,
        field: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} rejected: {kind}",
            error_code=kind,
            error_message=message,
            details={
                "operation": operation,
                "field": field,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Storage failure during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

