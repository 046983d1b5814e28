"""
Main Orchestrator for Chamaa Ledger

This module ties together the models, the integrity rules, the entity
stores and the audit log, and defines the use-case operations:
create admin, create group, add member to group, create member,
record contribution, and the list operations.

DESIGN DECISION: Every operation is one critical section.
The stores offer no multi-key transactions, so an operation takes the
ledger lock, runs its integrity checks, and performs its single write
before releasing it. No other operation can observe or interleave with
a half-applied state, and a rejected operation writes nothing.

This is the "glue" that keeps four independent collections consistent.
"""

import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional, Union

import structlog
from pydantic import BaseModel, ValidationError

from chamaa.audit import AuditLogger, create_correlation_id
from chamaa.clock import MonotonicClock
from chamaa.config import LedgerSettings, Settings, get_settings
from chamaa.identifiers import new_id
from chamaa.models.ledger import Admin, Contribution, Group, Member
from chamaa.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    InMemoryAuditStorage,
    LedgerStores,
    StorageError,
    create_memory_stores,
    create_sheets_entity_stores,
)
from chamaa.validation import (
    ConflictError,
    EmptyResultError,
    IntegrityValidator,
    InvalidInputError,
    LedgerError,
)


logger = structlog.get_logger(__name__)

Amount = Union[Decimal, int, float, str]


class LedgerFlow:
    """
    Orchestrates every ledger use case.

    Each public method moves through two states:
    Validating -> Committed, or Validating -> Rejected.
    Rejections raise a LedgerError subclass and leave every store
    untouched; storage failures raise StorageError.
    """

    def __init__(
        self,
        stores: LedgerStores,
        validator: Optional[IntegrityValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[MonotonicClock] = None,
        settings: Optional[LedgerSettings] = None,
        lock: Optional[threading.RLock] = None,
    ):
        self._stores = stores
        self._settings = settings or LedgerSettings()
        self._validator = validator or IntegrityValidator(
            stores,
            require_membership=self._settings.require_membership_for_contribution,
        )
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock or MonotonicClock()
        # One lock for all four collections
        self._lock = lock or threading.RLock()

    @property
    def stores(self) -> LedgerStores:
        return self._stores

    @contextmanager
    def _operation(self, name: str) -> Iterator:
        """Run one use case as a critical section and audit rejections."""
        correlation_id = create_correlation_id()
        with self._lock:
            try:
                yield correlation_id
            except LedgerError as e:
                self._audit_logger.log_rejected(
                    operation=name,
                    kind=e.kind.value,
                    message=e.message,
                    field=e.field,
                    correlation_id=correlation_id,
                )
                raise
            except StorageError as e:
                self._audit_logger.log_storage_error(
                    operation=name,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                raise

    def _build(self, model: type[BaseModel], **fields) -> BaseModel:
        """Construct an entity, turning schema failures into InvalidInputError."""
        try:
            return model(**fields)
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error.get("loc") else None
            raise InvalidInputError(
                f"Invalid {field or model.__name__}: {error['msg']}",
                field=field,
            ) from e

    def _finish_list(self, what: str, items: list) -> list:
        if not items and self._settings.empty_list_as_error:
            raise EmptyResultError(f"No {what} found")
        return items

    # -------------------------------------------------------------------------
    # Admins
    # -------------------------------------------------------------------------

    def create_admin(
        self,
        name: str,
        email: str,
        admin_id: Optional[str] = None,
    ) -> Admin:
        """
        Create an admin.

        Without admin_id a fresh id is generated, so calling this twice
        creates two admins. An explicit admin_id that already exists is
        a conflict; it is never overwritten.
        """
        with self._operation("create_admin") as correlation_id:
            if admin_id and self._stores.admins.contains(admin_id):
                raise ConflictError(f"Admin already exists: {admin_id}", field="admin_id")

            admin = self._build(
                Admin,
                id=admin_id or new_id(),
                name=name,
                email=email,
                created_at=self._clock.now(),
            )
            self._stores.admins.insert(admin.id, admin)

            self._audit_logger.log_admin_created(
                admin_id=admin.id,
                name=admin.name,
                correlation_id=correlation_id,
            )
            return admin

    def seed_default_admin(self) -> Admin:
        """Create the configured default admin (reuses it if its id is pinned and present)."""
        settings = self._settings
        if settings.default_admin_id:
            with self._lock:
                existing = self._stores.admins.get(settings.default_admin_id)
                if existing is not None:
                    logger.info("default_admin_present", admin_id=existing.id)
                    return existing
                return self.create_admin(
                    settings.default_admin_name,
                    settings.default_admin_email,
                    admin_id=settings.default_admin_id,
                )
        return self.create_admin(settings.default_admin_name, settings.default_admin_email)

    def list_admins(self) -> list[Admin]:
        with self._operation("list_admins"):
            return self._finish_list("admins", self._stores.admins.values())

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def create_group(self, name: str, admin_id: str) -> Group:
        """Create an empty group owned by an existing admin."""
        with self._operation("create_group") as correlation_id:
            group = self._build(
                Group,
                id=new_id(),
                name=name,
                admin_id=admin_id,
                members=[],
                created_at=self._clock.now(),
            )
            self._validator.validate_group_creation(group.admin_id).raise_for_violation()

            self._stores.groups.insert(group.id, group)

            self._audit_logger.log_group_created(
                group_id=group.id,
                name=group.name,
                admin_id=group.admin_id,
                correlation_id=correlation_id,
            )
            return group

    def add_member(self, group_id: str, member_id: str) -> Group:
        """
        Add an existing member to an existing group.

        Adding someone twice is a ConflictError; the member list never
        holds duplicates. Returns the updated group.
        """
        with self._operation("add_member") as correlation_id:
            self._validator.validate_membership_add(group_id, member_id).raise_for_violation()

            group = self._stores.groups.get(group_id)
            group.add_member(member_id)
            self._stores.groups.insert(group.id, group)

            self._audit_logger.log_member_added(
                group_id=group.id,
                member_id=member_id,
                member_count=len(group.members),
                correlation_id=correlation_id,
            )
            return group

    def list_groups(self) -> list[Group]:
        with self._operation("list_groups"):
            return self._finish_list("groups", self._stores.groups.values())

    # -------------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------------

    def create_member(self, name: str, email: str) -> Member:
        """Create a member; emails must be unique (exact match)."""
        with self._operation("create_member") as correlation_id:
            member = self._build(
                Member,
                id=new_id(),
                name=name,
                email=email,
                created_at=self._clock.now(),
            )
            self._validator.validate_member_creation(member.email).raise_for_violation()

            self._stores.members.insert(member.id, member)

            self._audit_logger.log_member_created(
                member_id=member.id,
                name=member.name,
                correlation_id=correlation_id,
            )
            return member

    def list_members(self) -> list[Member]:
        with self._operation("list_members"):
            return self._finish_list("members", self._stores.members.values())

    # -------------------------------------------------------------------------
    # Contributions
    # -------------------------------------------------------------------------

    def create_contribution(
        self,
        group_id: str,
        member_id: str,
        amount: Amount,
    ) -> Contribution:
        """
        Record a contribution.

        Group and member must exist. Membership of the member in the
        group is only required when require_membership_for_contribution
        is set.
        """
        with self._operation("create_contribution") as correlation_id:
            for field, value in (
                ("group_id", group_id),
                ("member_id", member_id),
                ("amount", amount),
            ):
                if value is None:
                    raise InvalidInputError(f"{field} is required", field=field)

            contribution = self._build(
                Contribution,
                id=new_id(),
                group_id=group_id,
                member_id=member_id,
                amount=amount,
                created_at=self._clock.now(),
            )
            self._validator.validate_contribution_creation(
                contribution.group_id,
                contribution.member_id,
                contribution.amount,
            ).raise_for_violation()

            self._stores.contributions.insert(contribution.id, contribution)

            self._audit_logger.log_contribution_recorded(
                contribution_id=contribution.id,
                group_id=contribution.group_id,
                member_id=contribution.member_id,
                amount=str(contribution.amount),
                correlation_id=correlation_id,
            )
            return contribution

    def _scan_contributions(self, group_id: str) -> Iterator[Contribution]:
        # Full scan, no index by group: fine at chamaa scale
        for contribution in self._stores.contributions.values():
            if contribution.group_id == group_id:
                yield contribution

    def list_contributions_for_group(self, group_id: str) -> list[Contribution]:
        """Contributions made to one group, in store order."""
        with self._operation("list_contributions_for_group"):
            self._validator.validate_group_exists(group_id).raise_for_violation()
            contributions = list(self._scan_contributions(group_id))
            return self._finish_list("contributions", contributions)


def _memory_components(ledger_settings: LedgerSettings) -> LedgerFlow:
    return LedgerFlow(
        stores=create_memory_stores(),
        audit_logger=AuditLogger(InMemoryAuditStorage()),
        settings=ledger_settings,
    )


def create_app_components(
    settings: Optional[Settings] = None,
) -> tuple[LedgerFlow, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Picks the storage backend from settings and seeds the default admin.
    A google_sheets backend that is misconfigured or unreachable stops
    startup: writes are never redirected to a store that forgets them.

    Raises:
        pydantic.ValidationError: Google Sheets settings incomplete
        StorageError: Google Sheets could not be reached while seeding

    Returns:
        (ledger_flow, sheets_client)
    """
    settings = settings or get_settings()
    ledger_settings = settings.ledger
    sheets_client = None

    if ledger_settings.storage_backend == "google_sheets":
        sheets_client = GoogleSheetsClient(settings.google_sheets)
        flow = LedgerFlow(
            stores=create_sheets_entity_stores(sheets_client),
            audit_logger=AuditLogger(GoogleSheetsAuditStorage(sheets_client)),
            settings=ledger_settings,
        )
    else:
        flow = _memory_components(ledger_settings)
    logger.info("storage_backend_selected", backend=ledger_settings.storage_backend)

    if ledger_settings.seed_default_admin:
        flow.seed_default_admin()

    return flow, sheets_client
