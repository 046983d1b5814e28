"""
Data Models Package

This package contains all Pydantic models used in the Chamaa Ledger.
All data flowing through the system must conform to these schemas.
"""

from chamaa.models.ledger import (
    Admin,
    Contribution,
    ContributionCreate,
    Group,
    GroupCreate,
    LedgerModel,
    Member,
    MemberCreate,
)
from chamaa.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Admin",
    "Contribution",
    "ContributionCreate",
    "Group",
    "GroupCreate",
    "LedgerModel",
    "Member",
    "MemberCreate",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
