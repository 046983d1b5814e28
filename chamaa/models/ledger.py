"""
Core Data Models for Chamaa Ledger

These models define the strict schemas for the four ledger collections.
They are designed to:
1. Validate presence and type of fields (cross-entity checks live in
   chamaa.validation)
2. Keep server-assigned fields (id, created_at) immutable
3. Be serializable for storage and the HTTP surface (camelCase on the wire)

DESIGN DECISION: Entities are only ever built by the use-case layer from
allow-listed arguments. Request models below extract the fields a caller
may set and silently drop anything else, so a client can never supply its
own id or timestamp.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class LedgerModel(BaseModel):
    """Shared config: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# ENTITIES
# =============================================================================

class Admin(LedgerModel):
    """
    Person who runs one or more groups.

    The id is either generated or supplied by the process itself when
    seeding a well-known admin.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=1, max_length=320)
    created_at: datetime


class Group(LedgerModel):
    """
    A savings group.

    The only entity mutated after creation: members are appended, never
    removed or reordered.
    """

    id: str = Field(..., min_length=1, frozen=True)
    name: str = Field(..., min_length=1, max_length=200)
    admin_id: str = Field(..., min_length=1, frozen=True)
    members: list[str] = Field(
        default_factory=list,
        description="Member ids in the order they joined"
    )
    created_at: datetime = Field(..., frozen=True)

    @field_validator('members')
    @classmethod
    def members_are_unique(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("Group members must be unique")
        return v

    def has_member(self, member_id: str) -> bool:
        return member_id in self.members

    def add_member(self, member_id: str) -> bool:
        """Append a member if absent. Returns False when already present."""
        if self.has_member(member_id):
            return False
        self.members.append(member_id)
        return True


class Member(LedgerModel):
    """A person who can join groups and contribute to them."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=1, max_length=320)
    created_at: datetime


class Contribution(LedgerModel):
    """
    A payment a member made into a group's pool.

    Append-only. The amount is kept as an exact Decimal with no currency
    attached and no rounding.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    group_id: str = Field(..., min_length=1)
    member_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, allow_inf_nan=False)
    created_at: datetime


# =============================================================================
# REQUEST MODELS - allow-listed caller fields only
# =============================================================================

class GroupCreate(LedgerModel):
    """Fields a caller may set when creating a group."""

    name: str = Field(..., min_length=1, max_length=200)
    admin_id: str = Field(..., min_length=1)


class MemberCreate(LedgerModel):
    """Fields a caller may set when creating a member."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=1, max_length=320)


class ContributionCreate(LedgerModel):
    """Fields a caller may set when recording a contribution."""

    group_id: str = Field(..., min_length=1)
    member_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, allow_inf_nan=False)
