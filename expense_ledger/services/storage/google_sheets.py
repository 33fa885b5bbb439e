"""
Google Sheets Expense Backend

One worksheet row per expense, columns in EXPENSE_COLUMNS order.
All users share the sheet; every read filters on the owner column
and every write locates its row by (id, owner).

TRADEOFFS:
- Each read pulls the whole sheet (fine for one person's ledger)
- Row lookups and writes are two calls, so a concurrent edit from
  the Sheets UI between them can hit the wrong row
- Date range and ordering are applied in Python, not by the API

gspread is synchronous, so every sheet call runs in a worker thread
to keep the event loop free for other in-flight requests.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_ledger.config import GoogleSheetsSettings, get_settings
from expense_ledger.models.expense import (
    Expense,
    ExpenseCategory,
    NewExpense,
    PaymentMethod,
)
from expense_ledger.services.storage.interface import (
    ConnectionError,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
    sort_newest_first,
)


# Column layout of the Expenses sheet
EXPENSE_COLUMNS = [
    "id",
    "date",
    "description",
    "category",
    "payment_method",
    "amount",
    "owner",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and retries establishing the connection.
    Individual reads and writes are NOT retried - a failed write is
    reported to the store, which leaves retrying to the caller.
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

    def get_expenses_sheet(self) -> gspread.Worksheet:
        """Get or create the Expenses worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.expenses_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.expenses_sheet_name,
                rows=1000,
                cols=len(EXPENSE_COLUMNS),
            )
            sheet.append_row(EXPENSE_COLUMNS)
        return sheet


class GoogleSheetsExpenseStorage(ExpenseStorageInterface):
    """
    Google Sheets implementation of expense storage.

    Expenses are stored one per row. Ids are generated here, which
    from the store's point of view is "server-assigned".
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _expense_to_row(self, expense: Expense) -> list:
        """Convert an Expense to a spreadsheet row."""
        return [
            expense.id,
            expense.date.isoformat(),
            expense.description,
            expense.category.value,
            expense.payment_method.value,
            str(expense.amount),
            expense.owner,
        ]

    def _row_to_expense(self, row: list) -> Expense:
        """Convert a spreadsheet row to an Expense."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return Expense(
            id=safe_get(0),
            date=date.fromisoformat(safe_get(1)),
            description=safe_get(2),
            category=ExpenseCategory(safe_get(3, ExpenseCategory.OTHER.value)),
            payment_method=PaymentMethod(
                safe_get(4, PaymentMethod.CREDIT_CARD.value)
            ),
            amount=Decimal(safe_get(5, "0")),
            owner=safe_get(6),
        )

    def _read_owned(self, owner: str) -> list[Expense]:
        sheet = self._client.get_expenses_sheet()
        all_rows = sheet.get_all_values()[1:]  # Skip header

        expenses = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            if len(row) < 7 or row[6] != owner:
                continue
            try:
                expenses.append(self._row_to_expense(row))
            except (ValueError, ArithmeticError):
                continue  # Skip malformed rows
        return expenses

    def _find_row(self, sheet: gspread.Worksheet, owner: str, expense_id: str) -> Optional[int]:
        """Return the 1-based sheet row of an owned expense, if present."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if row and row[0] == expense_id and len(row) > 6 and row[6] == owner:
                return idx
        return None

    async def fetch_all(self, owner: str) -> list[Expense]:
        """Fetch every expense of an owner, newest first."""
        try:
            expenses = await asyncio.to_thread(self._read_owned, owner)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to fetch expenses: {e}")
        return sort_newest_first(expenses)

    async def fetch_range(
        self,
        owner: str,
        date_from: date,
        date_to: date,
    ) -> list[Expense]:
        """Fetch an owner's expenses within an inclusive date range."""
        try:
            expenses = await asyncio.to_thread(self._read_owned, owner)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to fetch expenses: {e}")
        return sort_newest_first([
            e for e in expenses if date_from <= e.date <= date_to
        ])

    async def insert(self, owner: str, expense: NewExpense) -> Expense:
        """Append a new expense row."""
        stored = expense.with_owner(uuid4().hex, owner)

        def _append() -> None:
            sheet = self._client.get_expenses_sheet()
            sheet.append_row(self._expense_to_row(stored), value_input_option="RAW")

        try:
            await asyncio.to_thread(_append)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to add expense: {e}")
        return stored

    async def update(self, owner: str, expense: Expense) -> Expense:
        """Overwrite an existing expense row."""
        stored = expense.to_new().with_owner(expense.id, owner)

        def _update() -> bool:
            sheet = self._client.get_expenses_sheet()
            idx = self._find_row(sheet, owner, expense.id)
            if idx is None:
                return False
            sheet.update(
                range_name=f"A{idx}:G{idx}",
                values=[self._expense_to_row(stored)],
                value_input_option="RAW",
            )
            return True

        try:
            found = await asyncio.to_thread(_update)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update expense: {e}")

        if not found:
            raise NotFoundError(f"Expense not found: {expense.id}")
        return stored

    async def delete(self, owner: str, expense_id: str) -> None:
        """Delete an expense row. Missing ids are ignored."""

        def _delete() -> None:
            sheet = self._client.get_expenses_sheet()
            idx = self._find_row(sheet, owner, expense_id)
            if idx is not None:
                sheet.delete_rows(idx)

        try:
            await asyncio.to_thread(_delete)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete expense: {e}")
