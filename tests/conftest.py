"""Shared fixtures: in-memory stores, a pinned clock, a ready ledger and sheet fakes."""

import itertools

import pytest

from chamaa.audit import AuditLogger
from chamaa.clock import MonotonicClock
from chamaa.config import GoogleSheetsSettings, LedgerSettings
from chamaa.orchestrator import LedgerFlow
from chamaa.services.storage import InMemoryAuditStorage, create_memory_stores


# 2023-11-14T22:13:20Z, one second per reading
START_NS = 1_700_000_000_000_000_000
STEP_NS = 1_000_000_000


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the sheet-backed stores."""

    def __init__(self, header=None):
        self.rows = [list(header)] if header else []
        self.updates = []

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def col_values(self, col):
        return [row[col - 1] if len(row) >= col else "" for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(cell) for cell in row])

    def update(self, range_name=None, values=None, value_input_option=None):
        # Only single-row writes anchored in column A, e.g. "A3"
        self.updates.append((range_name, values, value_input_option))
        index = int(range_name.lstrip("A"))
        self.rows[index - 1] = [str(cell) for cell in values[0]]

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    """Stands in for GoogleSheetsClient: one FakeWorksheet per title."""

    def __init__(self):
        self.settings = GoogleSheetsSettings.model_construct(
            credentials_path="unused.json",
            spreadsheet_id="sheet-1",
        )
        self.worksheets = {}

    def get_worksheet(self, title, header):
        if title not in self.worksheets:
            self.worksheets[title] = FakeWorksheet(header)
        return self.worksheets[title]


@pytest.fixture
def clock():
    return MonotonicClock(source=itertools.count(START_NS, STEP_NS).__next__)


@pytest.fixture
def stores():
    return create_memory_stores()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def ledger_settings():
    return LedgerSettings(
        storage_backend="memory",
        seed_default_admin=False,
        require_membership_for_contribution=False,
        empty_list_as_error=False,
    )


@pytest.fixture
def flow(stores, audit_storage, clock, ledger_settings):
    return LedgerFlow(
        stores=stores,
        audit_logger=AuditLogger(audit_storage),
        clock=clock,
        settings=ledger_settings,
    )


@pytest.fixture
def admin(flow):
    return flow.create_admin("Wanjiru", "wanjiru@example.com")
