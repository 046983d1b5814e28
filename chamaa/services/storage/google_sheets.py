"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a persistent backend because:
1. Group treasurers can view the ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a chamaa is a few dozen people)
- No transactions (writes are serialized by the use-case layer)
- Limited query capabilities (we scan and filter in Python)

Each collection lives in its own worksheet: a header row, then one
entity per row with the key in column A. List fields are JSON-encoded.
"""

import json
from typing import Generic, Iterable, Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from chamaa.config import GoogleSheetsSettings, get_settings
from chamaa.models.audit import AuditEvent
from chamaa.models.ledger import Admin, Contribution, Group, Member
from chamaa.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    EntityStore,
    LedgerStores,
    StorageError,
    T,
)


logger = structlog.get_logger(__name__)

KEY_COLUMN = "key"

# Column mappings per collection (after the key column)
ADMIN_COLUMNS = ["id", "name", "email", "created_at"]
GROUP_COLUMNS = ["id", "name", "admin_id", "members", "created_at"]
MEMBER_COLUMNS = ["id", "name", "email", "created_at"]
CONTRIBUTION_COLUMNS = ["id", "group_id", "member_id", "amount", "created_at"]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_code",
    "error_message",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[str, gspread.Worksheet] = {}
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, header: list[str]) -> gspread.Worksheet:
        """Get or create a worksheet, writing the header row on creation."""
        if title not in self._worksheets:
            spreadsheet = self.get_spreadsheet()
            try:
                sheet = spreadsheet.worksheet(title)
            except gspread.WorksheetNotFound:
                sheet = spreadsheet.add_worksheet(
                    title=title,
                    rows=1000,
                    cols=len(header),
                )
                sheet.append_row(header)
            self._worksheets[title] = sheet
        return self._worksheets[title]


class GoogleSheetsEntityStore(EntityStore[T], Generic[T]):
    """
    Google Sheets implementation of an entity store.

    Rows are kept in insertion order; an upsert rewrites the existing
    row in place so ordering stays stable.
    """

    def __init__(
        self,
        client: GoogleSheetsClient,
        sheet_name: str,
        model: type[T],
        columns: list[str],
        json_columns: Iterable[str] = (),
    ):
        self._client = client
        self._sheet_name = sheet_name
        self._model = model
        self._columns = columns
        self._json_columns = set(json_columns)

    @property
    def header(self) -> list[str]:
        return [KEY_COLUMN, *self._columns]

    def _sheet(self) -> gspread.Worksheet:
        return self._client.get_worksheet(self._sheet_name, self.header)

    def _entity_to_row(self, key: str, entity: T) -> list:
        """Convert an entity to a spreadsheet row."""
        data = entity.model_dump(mode="json")
        row = [key]
        for column in self._columns:
            value = data.get(column)
            if column in self._json_columns:
                row.append(json.dumps(value))
            else:
                row.append("" if value is None else str(value))
        return row

    def _row_to_entity(self, row: list) -> T:
        """Convert a spreadsheet row to an entity."""
        # Handle missing trailing cells gracefully
        def safe_get(index: int) -> str:
            try:
                return row[index]
            except IndexError:
                return ""

        data = {}
        for offset, column in enumerate(self._columns, start=1):
            raw = safe_get(offset)
            if column in self._json_columns:
                data[column] = json.loads(raw) if raw else []
            else:
                data[column] = raw
        return self._model.model_validate(data)

    def _find_row(self, sheet: gspread.Worksheet, key: str) -> Optional[int]:
        """1-based sheet row holding key, skipping the header."""
        keys = sheet.col_values(1)
        for idx, value in enumerate(keys[1:], start=2):
            if value == key:
                return idx
        return None

    def get(self, key: str) -> Optional[T]:
        try:
            for row in self._sheet().get_all_values()[1:]:
                if row and row[0] == key:
                    return self._row_to_entity(row)
            return None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {self._sheet_name}/{key}: {e}") from e

    def insert(self, key: str, value: T) -> None:
        try:
            sheet = self._sheet()
            row = self._entity_to_row(key, value)
            idx = self._find_row(sheet, key)
            if idx is None:
                sheet.append_row(row, value_input_option="RAW")
                return
            # Whole row in one RAW write
            sheet.update(
                range_name=f"A{idx}",
                values=[row],
                value_input_option="RAW",
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {self._sheet_name}/{key}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            sheet = self._sheet()
            idx = self._find_row(sheet, key)
            if idx is not None:
                sheet.delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {self._sheet_name}/{key}: {e}") from e

    def values(self) -> list[T]:
        try:
            rows = self._sheet().get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {self._sheet_name}: {e}") from e

        entities = []
        for row in rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                entities.append(self._row_to_entity(row))
            except (ValueError, TypeError) as e:
                # Corrupt rows are a storage failure, never skipped
                logger.error(
                    "malformed_row",
                    sheet=self._sheet_name,
                    key=row[0],
                    error=str(e),
                )
                raise StorageError(f"Malformed row {row[0]} in {self._sheet_name}") from e
        return entities


def create_sheets_entity_stores(client: GoogleSheetsClient) -> LedgerStores:
    """Build the four ledger collections on top of one spreadsheet."""
    settings = client.settings
    return LedgerStores(
        admins=GoogleSheetsEntityStore(
            client, settings.admins_sheet_name, Admin, ADMIN_COLUMNS,
        ),
        groups=GoogleSheetsEntityStore(
            client, settings.groups_sheet_name, Group, GROUP_COLUMNS,
            json_columns=["members"],
        ),
        members=GoogleSheetsEntityStore(
            client, settings.members_sheet_name, Member, MEMBER_COLUMNS,
        ),
        contributions=GoogleSheetsEntityStore(
            client, settings.contributions_sheet_name, Contribution, CONTRIBUTION_COLUMNS,
        ),
    )


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    def _sheet(self) -> gspread.Worksheet:
        return self._client.get_worksheet(
            self._client.settings.audit_sheet_name, AUDIT_COLUMNS,
        )

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            self._sheet().append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Audit logging must not break the main flow
            logger.warning(
                "audit_append_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False
