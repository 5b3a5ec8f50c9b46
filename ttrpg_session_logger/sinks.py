"""Sinks: tables that session records are appended to."""

import csv
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import gspread
from gspread.exceptions import APIError, SpreadsheetNotFound, WorksheetNotFound

from .config import ConfigurationError
from .models import SESSION_HEADER, SessionRecord

LOG = logging.getLogger(__name__)


def _status_code(error: APIError):
    response = getattr(error, "response", None)
    return getattr(response, "status_code", None) or getattr(error, "code", None)


class TableSink(ABC):
    """Append-only destination table for session records."""

    @abstractmethod
    def append(self, record: SessionRecord) -> None:
        """Append one record, creating the table and header if needed."""


class GoogleSheetSink(TableSink):
    """Appends rows to a tab of a Google Sheets spreadsheet.

    The tab is looked up once per sink. If it doesn't exist it is created
    with a bold header row before the first data row.
    """

    def __init__(self, client: gspread.Client, spreadsheet_id: str, sheet_name: str):
        """Initialize sink.

        Args:
            client: Authorized gspread client
            spreadsheet_id: Spreadsheet key (from its URL)
            sheet_name: Tab to append to
        """
        self.client = client
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self._worksheet = None

    @classmethod
    def from_credentials(
        cls, credentials, spreadsheet_id: str, sheet_name: str
    ) -> "GoogleSheetSink":
        return cls(gspread.authorize(credentials), spreadsheet_id, sheet_name)

    def _open_spreadsheet(self):
        try:
            return self.client.open_by_key(self.spreadsheet_id)
        except (SpreadsheetNotFound, APIError) as e:
            # Quota and server errors are write failures, not bad configuration
            if isinstance(e, APIError) and _status_code(e) not in (403, 404):
                raise
            raise ConfigurationError(
                f"Spreadsheet '{self.spreadsheet_id}' not found or not accessible "
                f"({e}). Check SPREADSHEET_ID and that the sheet is shared with "
                f"these credentials.",
                setting="SPREADSHEET_ID",
                value=self.spreadsheet_id,
            ) from e

    def worksheet(self):
        """Return the destination tab, creating it with a header if absent.

        A tab whose first row is empty also gets the header, so a run that
        failed between creating the tab and writing the header is repaired
        by the next one.
        """
        if self._worksheet is not None:
            return self._worksheet

        spreadsheet = self._open_spreadsheet()
        try:
            worksheet = spreadsheet.worksheet(self.sheet_name)
        except WorksheetNotFound:
            LOG.info(
                "Creating sheet '%s' in spreadsheet %s",
                self.sheet_name,
                self.spreadsheet_id,
            )
            worksheet = spreadsheet.add_worksheet(
                title=self.sheet_name, rows=1000, cols=len(SESSION_HEADER)
            )

        if not worksheet.row_values(1):
            LOG.info("Writing header row to sheet '%s'", self.sheet_name)
            worksheet.append_row(list(SESSION_HEADER), value_input_option="RAW")
            worksheet.format("A1:F1", {"textFormat": {"bold": True}})

        self._worksheet = worksheet
        return worksheet

    def append(self, record: SessionRecord) -> None:
        self.worksheet().append_row(record.to_row(), value_input_option="RAW")
        LOG.info(
            "Logged session '%s' (%s) to sheet '%s'",
            record.campaign_name,
            record.date,
            self.sheet_name,
        )


class CsvSink(TableSink):
    """Appends rows to a local CSV file, writing the header for a new file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def _needs_header(self) -> bool:
        return not self.path.exists() or self.path.stat().st_size == 0

    def append(self, record: SessionRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        write_header = self._needs_header()
        with open(self.path, "a", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            if write_header:
                LOG.info("Creating session log %s", self.path)
                writer.writerow(SESSION_HEADER)
            writer.writerow(record.to_row())
        LOG.info(
            "Logged session '%s' (%s) to %s",
            record.campaign_name,
            record.date,
            self.path,
        )
