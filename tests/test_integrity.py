"""Tests for the integrity rules engine."""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from chamaa.models.ledger import Admin, Group, Member
from chamaa.services.storage import create_memory_stores
from chamaa.validation import (
    ConflictError,
    EmptyResultError,
    IntegrityResult,
    IntegrityValidator,
    InvalidInputError,
    LedgerError,
    ReferenceNotFoundError,
    ViolationKind,
)


NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def seeded_stores():
    """One admin, one group holding m-1, and two members."""
    stores = create_memory_stores()
    stores.admins.insert("a-1", Admin(id="a-1", name="Wanjiru", email="w@example.com", created_at=NOW))
    stores.members.insert("m-1", Member(id="m-1", name="Otieno", email="o@example.com", created_at=NOW))
    stores.members.insert("m-2", Member(id="m-2", name="Akinyi", email="ak@example.com", created_at=NOW))
    stores.groups.insert(
        "g-1",
        Group(id="g-1", name="Umoja", admin_id="a-1", members=["m-1"], created_at=NOW),
    )
    return stores


@pytest.fixture
def validator(seeded_stores):
    return IntegrityValidator(seeded_stores)


class TestIntegrityResult:
    """Tests for IntegrityResult."""

    def test_ok_is_valid(self):
        """Test that an ok result has no violation and does not raise."""
        result = IntegrityResult.ok()
        assert result.is_valid
        result.raise_for_violation()

    @pytest.mark.parametrize("kind,error_cls", [
        (ViolationKind.VALIDATION_ERROR, InvalidInputError),
        (ViolationKind.REFERENCE_NOT_FOUND, ReferenceNotFoundError),
        (ViolationKind.CONFLICT, ConflictError),
        (ViolationKind.EMPTY_RESULT, EmptyResultError),
    ])
    def test_raise_for_violation_maps_kind(self, kind, error_cls):
        """Test that each violation kind raises its own error type."""
        result = IntegrityResult.violated(kind, "group_id", "boom")
        assert not result.is_valid
        with pytest.raises(error_cls) as exc_info:
            result.raise_for_violation()
        assert exc_info.value.kind == kind
        assert exc_info.value.field == "group_id"
        assert exc_info.value.message == "boom"

    def test_errors_share_a_base(self):
        """Test that every rejection is a LedgerError."""
        for error_cls in (InvalidInputError, ReferenceNotFoundError, ConflictError, EmptyResultError):
            assert issubclass(error_cls, LedgerError)


class TestGroupCreation:
    """Tests for validate_group_creation."""

    def test_known_admin(self, validator):
        """Test that an existing admin passes."""
        assert validator.validate_group_creation("a-1").is_valid

    def test_unknown_admin(self, validator):
        """Test that an unknown admin is a missing reference."""
        result = validator.validate_group_creation("a-404")
        assert result.violation.kind == ViolationKind.REFERENCE_NOT_FOUND
        assert result.violation.field == "admin_id"
        assert "a-404" in result.violation.message

    @pytest.mark.parametrize("admin_id", [None, "", "   "])
    def test_missing_admin_id(self, validator, admin_id):
        """Test that an absent admin id is a validation error."""
        result = validator.validate_group_creation(admin_id)
        assert result.violation.kind == ViolationKind.VALIDATION_ERROR


class TestMembershipAdd:
    """Tests for validate_membership_add."""

    def test_new_member(self, validator):
        """Test that a member not yet in the group passes."""
        assert validator.validate_membership_add("g-1", "m-2").is_valid

    def test_unknown_group(self, validator):
        """Test that the group is checked first."""
        result = validator.validate_membership_add("g-404", "m-404")
        assert result.violation.kind == ViolationKind.REFERENCE_NOT_FOUND
        assert result.violation.field == "group_id"

    def test_unknown_member(self, validator):
        """Test that an unknown member is a missing reference."""
        result = validator.validate_membership_add("g-1", "m-404")
        assert result.violation.kind == ViolationKind.REFERENCE_NOT_FOUND
        assert result.violation.field == "member_id"

    def test_already_member(self, validator):
        """Test that joining twice is a conflict."""
        result = validator.validate_membership_add("g-1", "m-1")
        assert result.violation.kind == ViolationKind.CONFLICT

    def test_checks_do_not_mutate(self, validator, seeded_stores):
        """Test that validation leaves the stores untouched."""
        validator.validate_membership_add("g-1", "m-2")
        assert seeded_stores.groups.get("g-1").members == ["m-1"]


class TestMemberCreation:
    """Tests for validate_member_creation."""

    def test_fresh_email(self, validator):
        """Test that an unused email passes."""
        assert validator.validate_member_creation("new@example.com").is_valid

    def test_duplicate_email(self, validator):
        """Test that a used email is a conflict."""
        result = validator.validate_member_creation("o@example.com")
        assert result.violation.kind == ViolationKind.CONFLICT
        assert result.violation.field == "email"

    def test_email_match_is_case_sensitive(self, validator):
        """Test that emails differing only in case are distinct."""
        assert validator.validate_member_creation("O@example.com").is_valid

    def test_missing_email(self, validator):
        """Test that an absent email is a validation error."""
        result = validator.validate_member_creation(None)
        assert result.violation.kind == ViolationKind.VALIDATION_ERROR


class TestContributionCreation:
    """Tests for validate_contribution_creation."""

    def test_valid(self, validator):
        """Test that a member of the group can contribute."""
        assert validator.validate_contribution_creation("g-1", "m-1", Decimal("100")).is_valid

    def test_non_member_allowed_by_default(self, validator):
        """Test that membership is not required unless configured."""
        assert validator.validate_contribution_creation("g-1", "m-2", Decimal("100")).is_valid

    def test_non_member_rejected_when_required(self, seeded_stores):
        """Test that membership is enforced when required."""
        strict = IntegrityValidator(seeded_stores, require_membership=True)
        result = strict.validate_contribution_creation("g-1", "m-2", Decimal("100"))
        assert result.violation.kind == ViolationKind.CONFLICT
        assert strict.validate_contribution_creation("g-1", "m-1", Decimal("100")).is_valid

    @pytest.mark.parametrize("group_id,member_id,amount,field", [
        (None, "m-1", Decimal("1"), "group_id"),
        ("g-1", None, Decimal("1"), "member_id"),
        ("g-1", "m-1", None, "amount"),
    ])
    def test_missing_fields(self, validator, group_id, member_id, amount, field):
        """Test that each absent field is reported by name."""
        result = validator.validate_contribution_creation(group_id, member_id, amount)
        assert result.violation.kind == ViolationKind.VALIDATION_ERROR
        assert result.violation.field == field

    def test_unknown_group(self, validator):
        """Test that an unknown group is a missing reference."""
        result = validator.validate_contribution_creation("g-404", "m-1", Decimal("1"))
        assert result.violation.kind == ViolationKind.REFERENCE_NOT_FOUND
        assert result.violation.field == "group_id"

    def test_unknown_member(self, validator):
        """Test that an unknown member is a missing reference."""
        result = validator.validate_contribution_creation("g-1", "m-404", Decimal("1"))
        assert result.violation.kind == ViolationKind.REFERENCE_NOT_FOUND
        assert result.violation.field == "member_id"


class TestGroupExists:
    """Tests for validate_group_exists."""

    def test_existing(self, validator):
        assert validator.validate_group_exists("g-1").is_valid

    def test_missing(self, validator):
        result = validator.validate_group_exists("g-404")
        assert result.violation.kind == ViolationKind.REFERENCE_NOT_FOUND


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
