"""
Integrity Rules Engine

DESIGN DECISION: The entity stores are flat key-value maps with no
foreign keys, so every cross-entity rule is checked here, read-only,
immediately before the write it guards:

- an admin must exist before a group can name it
- group and member must exist before a membership or contribution
- a member joins a group at most once
- member emails are unique

Each check returns an IntegrityResult: either ok, or exactly one
violation. The caller decides what to do with it (the use-case layer
raises). Checks never mutate anything.

IMPORTANT: These checks are only meaningful when run inside the same
critical section as the write that follows them. See LedgerFlow.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from chamaa.services.storage import LedgerStores


class ViolationKind(str, Enum):
    """Why an operation was rejected."""
    VALIDATION_ERROR = "validation_error"
    REFERENCE_NOT_FOUND = "reference_not_found"
    CONFLICT = "conflict"
    EMPTY_RESULT = "empty_result"


class LedgerError(Exception):
    """Base exception for rejected ledger operations."""

    kind: ViolationKind = ViolationKind.VALIDATION_ERROR

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidInputError(LedgerError):
    """A required field is missing or malformed."""
    kind = ViolationKind.VALIDATION_ERROR


class ReferenceNotFoundError(LedgerError):
    """A referenced admin, group or member does not exist."""
    kind = ViolationKind.REFERENCE_NOT_FOUND


class ConflictError(LedgerError):
    """A uniqueness or idempotency rule was violated."""
    kind = ViolationKind.CONFLICT


class EmptyResultError(LedgerError):
    """A list operation found nothing (only when configured to report it)."""
    kind = ViolationKind.EMPTY_RESULT


_ERRORS_BY_KIND: dict[ViolationKind, type[LedgerError]] = {
    ViolationKind.VALIDATION_ERROR: InvalidInputError,
    ViolationKind.REFERENCE_NOT_FOUND: ReferenceNotFoundError,
    ViolationKind.CONFLICT: ConflictError,
    ViolationKind.EMPTY_RESULT: EmptyResultError,
}


class IntegrityViolation(BaseModel):
    """A single broken rule."""

    kind: ViolationKind
    field: str = Field(
        ...,
        description="Argument the rule was checked against"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the violation"
    )


class IntegrityResult(BaseModel):
    """Outcome of one integrity check."""

    violation: Optional[IntegrityViolation] = None

    @classmethod
    def ok(cls) -> "IntegrityResult":
        return cls()

    @classmethod
    def violated(cls, kind: ViolationKind, field: str, message: str) -> "IntegrityResult":
        return cls(violation=IntegrityViolation(kind=kind, field=field, message=message))

    @property
    def is_valid(self) -> bool:
        return self.violation is None

    def raise_for_violation(self) -> None:
        """Raise the LedgerError matching the violation, if any."""
        if self.violation is None:
            return
        error_cls = _ERRORS_BY_KIND[self.violation.kind]
        raise error_cls(self.violation.message, field=self.violation.field)


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


class IntegrityValidator:
    """
    Validates cross-entity references against the ledger stores.

    One method per use case. Field-level checks (types, lengths,
    positivity) are left to the pydantic models.
    """

    def __init__(
        self,
        stores: LedgerStores,
        require_membership: bool = False,
    ):
        """
        Initialize validator.

        Args:
            stores: The four ledger collections
            require_membership: Reject contributions from members who
                                are not in the group
        """
        self._stores = stores
        self._require_membership = require_membership

    def validate_group_creation(self, admin_id: Optional[str]) -> IntegrityResult:
        if _is_absent(admin_id):
            return IntegrityResult.violated(
                ViolationKind.VALIDATION_ERROR, "admin_id", "adminId is required",
            )
        if not self._stores.admins.contains(admin_id):
            return IntegrityResult.violated(
                ViolationKind.REFERENCE_NOT_FOUND,
                "admin_id",
                f"Admin not found: {admin_id}",
            )
        return IntegrityResult.ok()

    def validate_membership_add(self, group_id: str, member_id: str) -> IntegrityResult:
        group = self._stores.groups.get(group_id)
        if group is None:
            return IntegrityResult.violated(
                ViolationKind.REFERENCE_NOT_FOUND,
                "group_id",
                f"Group not found: {group_id}",
            )
        if not self._stores.members.contains(member_id):
            return IntegrityResult.violated(
                ViolationKind.REFERENCE_NOT_FOUND,
                "member_id",
                f"Member not found: {member_id}",
            )
        if group.has_member(member_id):
            return IntegrityResult.violated(
                ViolationKind.CONFLICT,
                "member_id",
                f"Member {member_id} is already in group {group_id}",
            )
        return IntegrityResult.ok()

    def validate_member_creation(self, email: Optional[str]) -> IntegrityResult:
        """Email match is exact and case-sensitive."""
        if _is_absent(email):
            return IntegrityResult.violated(
                ViolationKind.VALIDATION_ERROR, "email", "email is required",
            )
        email = email.strip()
        if any(member.email == email for member in self._stores.members.values()):
            return IntegrityResult.violated(
                ViolationKind.CONFLICT,
                "email",
                f"A member with email {email} already exists",
            )
        return IntegrityResult.ok()

    def validate_contribution_creation(
        self,
        group_id: Optional[str],
        member_id: Optional[str],
        amount: Optional[Decimal],
    ) -> IntegrityResult:
        for field, value in (
            ("group_id", group_id),
            ("member_id", member_id),
            ("amount", amount),
        ):
            if _is_absent(value):
                return IntegrityResult.violated(
                    ViolationKind.VALIDATION_ERROR, field, f"{field} is required",
                )

        group = self._stores.groups.get(group_id)
        if group is None:
            return IntegrityResult.violated(
                ViolationKind.REFERENCE_NOT_FOUND,
                "group_id",
                f"Group not found: {group_id}",
            )
        if not self._stores.members.contains(member_id):
            return IntegrityResult.violated(
                ViolationKind.REFERENCE_NOT_FOUND,
                "member_id",
                f"Member not found: {member_id}",
            )
        if self._require_membership and not group.has_member(member_id):
            return IntegrityResult.violated(
                ViolationKind.CONFLICT,
                "member_id",
                f"Member {member_id} is not in group {group_id}",
            )
        return IntegrityResult.ok()

    def validate_group_exists(self, group_id: str) -> IntegrityResult:
        if not self._stores.groups.contains(group_id):
            return IntegrityResult.violated(
                ViolationKind.REFERENCE_NOT_FOUND,
                "group_id",
                f"Group not found: {group_id}",
            )
        return IntegrityResult.ok()
