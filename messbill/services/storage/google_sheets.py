"""
Google Sheets Storage Implementation

DESIGN DECISION: A shared Google Sheet is offered as an alternative to
local files because:
1. The mess manager and members can view the ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a mess has a few dozen members)
- No transactions (member and history sheets are rewritten whole)

The implementation follows the abstract interface, so business logic
does not change when switching between local files and Sheets.
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from messbill.config import get_settings
from messbill.models.audit import AuditEvent, AuditEventType, AuditSeverity
from messbill.models.mess import (
    BillResult,
    ExpenseInputs,
    HistoryEntry,
    Member,
    Overview,
)
from messbill.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    MessStorageInterface,
    StorageError,
)


# Column mappings for Members sheet
MEMBER_COLUMNS = [
    "name",
    "meals",
    "deposits",
    "guest",
    "fine",
    "is_guest_only",
    "email",
]

# History entries are stored as one row each; the snapshot is JSON
HISTORY_COLUMNS = [
    "entry_id",
    "recorded_at",
    "total_meals",
    "meal_rate",
    "total_members",
    "establishment_charge",
    "members_json",
    "expenses_json",
    "results_json",
]

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
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings=None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self):
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

    def get_worksheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        """Get a worksheet, creating it with a header row if missing."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_members_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.members_sheet_name, MEMBER_COLUMNS)

    def get_history_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.history_sheet_name, HISTORY_COLUMNS)

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,
        )


def _safe_get(row: list, index: int, default: str = "") -> str:
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsStorage(MessStorageInterface):
    """
    Google Sheets implementation of member and history storage.

    Both sheets are rewritten on every save: the member list is small
    and the history is capped, so there is no benefit in row updates.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _member_to_row(self, member: Member) -> list:
        return [
            member.name,
            member.meals,
            member.deposits,
            member.guest,
            member.fine,
            str(member.is_guest_only),
            member.email or "",
        ]

    def _row_to_member(self, row: list) -> Member:
        return Member(
            name=_safe_get(row, 0),
            meals=float(_safe_get(row, 1, "0")),
            deposits=float(_safe_get(row, 2, "0")),
            guest=float(_safe_get(row, 3, "0")),
            fine=float(_safe_get(row, 4, "0")),
            is_guest_only=_safe_get(row, 5).lower() == "true",
            email=_safe_get(row, 6) or None,
        )

    def _entry_to_row(self, entry: HistoryEntry) -> list:
        return [
            str(entry.entry_id),
            entry.recorded_at.isoformat(),
            entry.overview.total_meals,
            entry.overview.meal_rate,
            entry.overview.total_members,
            entry.overview.establishment_charge,
            json.dumps([m.model_dump(mode="json", by_alias=True) for m in entry.members]),
            entry.expenses.model_dump_json(),
            json.dumps([r.model_dump(mode="json", by_alias=True) for r in entry.results]),
        ]

    def _row_to_entry(self, row: list) -> HistoryEntry:
        return HistoryEntry(
            entry_id=UUID(_safe_get(row, 0)),
            recorded_at=datetime.fromisoformat(_safe_get(row, 1)),
            overview=Overview(
                total_meals=float(_safe_get(row, 2, "0")),
                meal_rate=float(_safe_get(row, 3, "0")),
                total_members=int(_safe_get(row, 4, "0")),
                establishment_charge=float(_safe_get(row, 5, "0")),
            ),
            members=tuple(Member.model_validate(m) for m in json.loads(_safe_get(row, 6, "[]"))),
            expenses=ExpenseInputs.model_validate_json(_safe_get(row, 7, "{}")),
            results=tuple(BillResult.model_validate(r) for r in json.loads(_safe_get(row, 8, "[]"))),
        )

    def _rewrite(self, sheet: gspread.Worksheet, columns: list[str], rows: list[list]) -> None:
        """
        Overwrite the sheet from A1, then clear rows left over from a
        longer previous save. A failed write leaves the old rows in place.
        """
        values = [columns] + rows
        previous_count = len(sheet.get_all_values())
        sheet.update(range_name="A1", values=values, value_input_option="RAW")
        if previous_count > len(values):
            start = rowcol_to_a1(len(values) + 1, 1)
            end = rowcol_to_a1(previous_count, len(columns))
            sheet.batch_clear([f"{start}:{end}"])

    async def load_members(self) -> list[Member]:
        try:
            sheet = self._client.get_members_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load members: {e}")

        members = []
        for index, row in enumerate(all_rows, start=2):
            if not row or not row[0]:
                continue
            try:
                members.append(self._row_to_member(row))
            except (ValidationError, ValueError) as e:
                raise StorageError(f"Malformed member in row {index}: {e}")
        return members

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_members(self, members: list[Member]) -> bool:
        try:
            sheet = self._client.get_members_sheet()
            self._rewrite(sheet, MEMBER_COLUMNS, [self._member_to_row(m) for m in members])
            return True
        except Exception as e:
            raise StorageError(f"Failed to save members: {e}")

    async def load_history(self) -> list[HistoryEntry]:
        try:
            sheet = self._client.get_history_sheet()
            all_rows = sheet.get_all_values()[1:]
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load history: {e}")

        entries = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            try:
                entries.append(self._row_to_entry(row))
            except (ValidationError, ValueError):
                continue  # Skip malformed rows

        # Newest first
        entries.sort(key=lambda e: e.recorded_at, reverse=True)
        return entries

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save_history(self, entries: list[HistoryEntry]) -> bool:
        try:
            sheet = self._client.get_history_sheet()
            self._rewrite(sheet, HISTORY_COLUMNS, [self._entry_to_row(e) for e in entries])
            return True
        except Exception as e:
            raise StorageError(f"Failed to save history: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        return AuditEvent(
            event_id=UUID(_safe_get(row, 0)),
            timestamp=datetime.fromisoformat(_safe_get(row, 1)),
            event_type=AuditEventType(_safe_get(row, 2)),
            severity=AuditSeverity(_safe_get(row, 3)),
            entity_type=_safe_get(row, 4) or None,
            entity_id=_safe_get(row, 5) or None,
            correlation_id=UUID(_safe_get(row, 6)) if _safe_get(row, 6) else None,
            description=_safe_get(row, 7),
            details=json.loads(_safe_get(row, 8)) if _safe_get(row, 8) else {},
            error_message=_safe_get(row, 9) or None,
            is_user_action=_safe_get(row, 10).lower() == "true",
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except (ValidationError, ValueError):
                    continue

        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
