"""
Tests for Chamaa Ledger

Test strategy:
1. Unit tests for individual components (models, validators, stores)
2. Integration tests for the ledger flow (in-memory storage)
3. No real Google API calls in tests (use fakes and mocks)
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from chamaa.models.ledger import (
    Admin,
    Contribution,
    ContributionCreate,
    Group,
    GroupCreate,
    Member,
    MemberCreate,
)
from chamaa.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def make_group(**overrides) -> Group:
    fields = {
        "id": "g-1",
        "name": "Umoja Savers",
        "admin_id": "a-1",
        "created_at": NOW,
    }
    fields.update(overrides)
    return Group(**fields)


class TestEntityModels:
    """Tests for the four ledger entities."""

    def test_admin_creation(self):
        """Test Admin model creation."""
        admin = Admin(id="a-1", name="Wanjiru", email="wanjiru@example.com", created_at=NOW)
        assert admin.id == "a-1"
        assert admin.created_at == NOW

    def test_names_strip_whitespace(self):
        """Test that whitespace is stripped from names and emails."""
        member = Member(id="m-1", name="  Otieno ", email=" otieno@example.com ", created_at=NOW)
        assert member.name == "Otieno"
        assert member.email == "otieno@example.com"

    def test_blank_name_rejected(self):
        """Test that a whitespace-only name is rejected."""
        with pytest.raises(ValidationError):
            Member(id="m-1", name="   ", email="x@example.com", created_at=NOW)

    def test_group_starts_empty(self):
        """Test that a new group has no members."""
        group = make_group()
        assert group.members == []

    def test_group_rejects_duplicate_members(self):
        """Test that the member list can never hold duplicates."""
        with pytest.raises(ValidationError):
            make_group(members=["m-1", "m-2", "m-1"])

    def test_group_add_member(self):
        """Test that add_member appends once and reports repeats."""
        group = make_group()
        assert group.add_member("m-1") is True
        assert group.add_member("m-2") is True
        assert group.add_member("m-1") is False
        assert group.members == ["m-1", "m-2"]
        assert group.has_member("m-2")
        assert not group.has_member("m-3")

    def test_group_identity_is_immutable(self):
        """Test that id, admin_id and created_at cannot be reassigned."""
        group = make_group()
        with pytest.raises(ValidationError):
            group.id = "other"
        with pytest.raises(ValidationError):
            group.admin_id = "other"
        with pytest.raises(ValidationError):
            group.created_at = datetime.now(timezone.utc)

    def test_member_is_immutable(self):
        """Test that members cannot be edited after creation."""
        member = Member(id="m-1", name="Otieno", email="otieno@example.com", created_at=NOW)
        with pytest.raises(ValidationError):
            member.email = "new@example.com"

    def test_contribution_keeps_exact_amount(self):
        """Test that amounts are exact decimals with no rounding."""
        parts = [
            Contribution(id=f"c-{i}", group_id="g-1", member_id="m-1", amount="0.1", created_at=NOW)
            for i in range(3)
        ]
        assert sum(c.amount for c in parts) == Decimal("0.3")

    def test_contribution_accepts_int_amount(self):
        """Test that integral amounts are accepted."""
        contribution = Contribution(
            id="c-1", group_id="g-1", member_id="m-1", amount=100, created_at=NOW,
        )
        assert contribution.amount == Decimal("100")

    @pytest.mark.parametrize("amount", ["0", "-5", "NaN", "Infinity", "abc"])
    def test_contribution_rejects_bad_amount(self, amount):
        """Test that zero, negative, non-finite and non-numeric amounts are rejected."""
        with pytest.raises(ValidationError):
            Contribution(
                id="c-1", group_id="g-1", member_id="m-1", amount=amount, created_at=NOW,
            )

    def test_camel_case_on_the_wire(self):
        """Test that entities serialize with camelCase keys."""
        group = make_group(members=["m-1"])
        data = group.model_dump(mode="json", by_alias=True)
        assert set(data) == {"id", "name", "adminId", "members", "createdAt"}
        assert data["adminId"] == "a-1"

    def test_accepts_both_spellings(self):
        """Test that entities load from camelCase or snake_case."""
        by_alias = Contribution.model_validate({
            "id": "c-1", "groupId": "g-1", "memberId": "m-1",
            "amount": "25.50", "createdAt": NOW.isoformat(),
        })
        by_name = Contribution(
            id="c-1", group_id="g-1", member_id="m-1", amount="25.50", created_at=NOW,
        )
        assert by_alias == by_name


class TestRequestModels:
    """Tests for the allow-listed request bodies."""

    def test_group_create_ignores_server_fields(self):
        """Test that a caller cannot supply id or createdAt."""
        body = GroupCreate.model_validate({
            "name": "Umoja",
            "adminId": "a-1",
            "id": "chosen-by-client",
            "createdAt": "2000-01-01T00:00:00Z",
            "members": ["m-1"],
        })
        assert body.model_dump() == {"name": "Umoja", "admin_id": "a-1"}

    def test_member_create_requires_email(self):
        """Test that email is mandatory."""
        with pytest.raises(ValidationError):
            MemberCreate.model_validate({"name": "Otieno"})

    def test_contribution_create_parses_string_amount(self):
        """Test that amount strings are parsed to Decimal."""
        body = ContributionCreate.model_validate({
            "groupId": "g-1", "memberId": "m-1", "amount": "1500.75",
        })
        assert body.amount == Decimal("1500.75")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.GROUP_CREATED,
            description="Group created: Umoja",
        )
        assert event.event_type == AuditEventType.GROUP_CREATED
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.CONTRIBUTION_RECORDED,
            description="Contribution recorded",
            details={"amount": "1000"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "contribution_recorded"
        assert log_dict["details"]["amount"] == "1000"
        assert log_dict["correlation_id"] is None

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            description="create_member rejected: conflict",
            error_code="conflict",
        )
        row = event.to_sheets_row()
        assert len(row) == 11  # Expected number of columns
        assert row[2] == "operation_rejected"  # event_type
        assert row[3] == "warning"  # severity
        assert row[8] == ""  # no details
        assert row[9] == "conflict"  # error_code

    def test_audit_event_builder_member_added(self):
        """Test AuditEventBuilder.member_added_to_group."""
        correlation_id = uuid4()

        event = AuditEventBuilder.member_added_to_group(
            group_id="g-1",
            member_id="m-1",
            member_count=3,
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.MEMBER_ADDED_TO_GROUP
        assert event.entity_type == "group"
        assert event.entity_id == "g-1"
        assert event.correlation_id == correlation_id
        assert event.details == {"member_id": "m-1", "member_count": 3}

    def test_audit_event_builder_operation_rejected(self):
        """Test AuditEventBuilder.operation_rejected."""
        event = AuditEventBuilder.operation_rejected(
            operation="create_group",
            kind="reference_not_found",
            message="Admin not found: a-9",
            field="admin_id",
            correlation_id=uuid4(),
        )

        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "reference_not_found"
        assert event.error_message == "Admin not found: a-9"
        assert event.details["field"] == "admin_id"
        assert event.entity_id is None

    def test_audit_event_builder_storage_error(self):
        """Test AuditEventBuilder.storage_error."""
        event = AuditEventBuilder.storage_error(
            operation="list_groups",
            error_message="quota exceeded",
        )

        assert event.event_type == AuditEventType.STORAGE_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.correlation_id is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
