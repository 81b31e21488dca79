"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a shared backend because:
1. Users can view (and hand-fix) their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (fine for personal use)
- No transactions; each key is one row, written in place
- A single cell holds at most 50,000 characters, which caps one collection

The worksheet has one row per storage key:
``key | value_json | updated_at``.
"""

import json
from typing import Any, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_tracker.config import GoogleSheetsSettings, get_settings
from expense_tracker.models.expense import utc_now
from expense_tracker.services.storage.interface import (
    ConnectionError,
    CorruptDataError,
    KeyValueStorage,
    StorageError,
)


KV_COLUMNS = [
    "key",
    "value_json",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and retries the initial connection.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

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

    def get_kv_sheet(self) -> gspread.Worksheet:
        """Get or create the key-value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.worksheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.worksheet_name,
                rows=1000,
                cols=len(KV_COLUMNS),
            )
            sheet.append_row(KV_COLUMNS)
        return sheet


class GoogleSheetsStorage(KeyValueStorage):
    """
    Google Sheets implementation of key-value storage.

    A worksheet can be injected directly (tests use a fake one);
    otherwise it is fetched through ``GoogleSheetsClient``.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        worksheet: Optional[Any] = None,
    ):
        if client is None and worksheet is None:
            client = GoogleSheetsClient()
        self._client = client
        self._worksheet = worksheet

    def _sheet(self) -> Any:
        if self._worksheet is None:
            self._worksheet = self._client.get_kv_sheet()
        return self._worksheet

    def _find_row(self, key: str) -> tuple[Optional[int], Optional[list]]:
        """Return (1-based row index, row) for a key, skipping the header."""
        all_rows = self._sheet().get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == key:
                return idx, row
        return None, None

    def read(self, key: str) -> Optional[Any]:
        try:
            _, row = self._find_row(key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {key}: {e}")

        if row is None:
            return None
        raw = row[1] if len(row) > 1 else ""
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Corrupt JSON for {key}: {e}")

    def write(self, key: str, value: Any) -> None:
        try:
            text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON-serializable: {e}")

        updated_at = utc_now().isoformat()
        try:
            idx, _ = self._find_row(key)
            sheet = self._sheet()
            if idx is None:
                sheet.append_row([key, text, updated_at], value_input_option="RAW")
            else:
                sheet.update_cell(idx, 2, text)
                sheet.update_cell(idx, 3, updated_at)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {key}: {e}")

    def remove(self, key: str) -> None:
        try:
            idx, _ = self._find_row(key)
            if idx is not None:
                self._sheet().delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to remove {key}: {e}")
