"""Google Sheets API client."""

import logging
from typing import Any, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import settings
from .base import TableAdapter, index_to_col_letter

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

HEADER_FIELDS = "sheets(data(rowData(values(formattedValue,note))))"


def quote_sheet_name(sheet_name: str) -> str:
    """Quote a sheet name for use in A1 notation."""
    return "'" + sheet_name.replace("'", "''") + "'"


class GoogleSheetsClient(TableAdapter):
    """Table adapter backed by one Google Spreadsheet."""

    def __init__(self, spreadsheet_id: Optional[str] = None):
        self.spreadsheet_id = spreadsheet_id or settings.spreadsheet_id
        self._service = None
        self._credentials = None
        self._sheet_ids: Optional[dict[str, int]] = None

    def _get_credentials(self) -> Credentials:
        """Get or refresh OAuth2 credentials."""
        creds = None

        if settings.google_token_path.exists():
            creds = Credentials.from_authorized_user_file(str(settings.google_token_path), SCOPES)

        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                if not settings.google_credentials_path.exists():
                    raise FileNotFoundError(
                        f"Google credentials file not found at {settings.google_credentials_path}. "
                        "Please download it from Google Cloud Console."
                    )
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(settings.google_credentials_path), SCOPES
                )
                creds = flow.run_local_server(port=0)

            # Save credentials for next run
            settings.google_token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(settings.google_token_path, "w") as token:
                token.write(creds.to_json())

        return creds

    @property
    def service(self):
        """Get or create the Sheets API service."""
        if self._service is None:
            self._credentials = self._get_credentials()
            self._service = build("sheets", "v4", credentials=self._credentials)
        return self._service

    def _require_spreadsheet(self) -> str:
        if not self.spreadsheet_id:
            raise ValueError(
                "No spreadsheet configured. Pass spreadsheet_id or set COLREG_SPREADSHEET_ID."
            )
        return self.spreadsheet_id

    def _load_sheet_ids(self) -> dict[str, int]:
        """Map sheet titles to their numeric sheet IDs, cached until the workbook changes."""
        if self._sheet_ids is None:
            try:
                result = (
                    self.service.spreadsheets()
                    .get(
                        spreadsheetId=self._require_spreadsheet(),
                        fields="sheets(properties(sheetId,title))",
                    )
                    .execute()
                )
            except HttpError as e:
                raise RuntimeError(f"Failed to get spreadsheet info: {e}")
            self._sheet_ids = {
                sheet["properties"]["title"]: sheet["properties"]["sheetId"]
                for sheet in result.get("sheets", [])
            }
        return self._sheet_ids

    def _sheet_id(self, sheet_name: str) -> int:
        sheet_ids = self._load_sheet_ids()
        if sheet_name not in sheet_ids:
            raise KeyError(f"Sheet '{sheet_name}' not found")
        return sheet_ids[sheet_name]

    def _batch_update(self, requests: list[dict], action: str) -> dict:
        try:
            return (
                self.service.spreadsheets()
                .batchUpdate(spreadsheetId=self._require_spreadsheet(), body={"requests": requests})
                .execute()
            )
        except HttpError as e:
            raise RuntimeError(f"Failed to {action}: {e}")

    def get_sheet_names(self) -> set[str]:
        return set(self._load_sheet_ids())

    def _read_header_cells(self, sheet_name: str) -> list[dict]:
        """Read formatted values and notes of the header row."""
        try:
            result = (
                self.service.spreadsheets()
                .get(
                    spreadsheetId=self._require_spreadsheet(),
                    ranges=[f"{quote_sheet_name(sheet_name)}!1:1"],
                    includeGridData=True,
                    fields=HEADER_FIELDS,
                )
                .execute()
            )
        except HttpError as e:
            raise RuntimeError(f"Failed to read header row of '{sheet_name}': {e}")

        cells: list[dict] = []
        for sheet in result.get("sheets", []):
            for grid in sheet.get("data", []):
                row_data = grid.get("rowData", [])
                if row_data:
                    cells = row_data[0].get("values", [])

        # Trim trailing cells that carry neither text nor a note
        while cells and not cells[-1].get("formattedValue") and not cells[-1].get("note"):
            cells = cells[:-1]
        return cells

    def get_header_row(self, sheet_name: str) -> list[str]:
        return [str(cell.get("formattedValue", "")) for cell in self._read_header_cells(sheet_name)]

    def get_header_annotations(self, sheet_name: str) -> list[str]:
        return [cell.get("note", "") for cell in self._read_header_cells(sheet_name)]

    def set_header_annotation(self, sheet_name: str, column: int, text: str) -> None:
        cell = {"note": text} if text else {}
        self._batch_update(
            [
                {
                    "updateCells": {
                        "range": {
                            "sheetId": self._sheet_id(sheet_name),
                            "startRowIndex": 0,
                            "endRowIndex": 1,
                            "startColumnIndex": column - 1,
                            "endColumnIndex": column,
                        },
                        "rows": [{"values": [cell]}],
                        "fields": "note",
                    }
                }
            ],
            f"set note on {sheet_name}!{index_to_col_letter(column - 1)}1",
        )
        logger.debug(f"Set note on {sheet_name}!{index_to_col_letter(column - 1)}1: {text!r}")

    def clear_header_annotations(self, sheet_name: str) -> None:
        self._batch_update(
            [
                {
                    "repeatCell": {
                        "range": {
                            "sheetId": self._sheet_id(sheet_name),
                            "startRowIndex": 0,
                            "endRowIndex": 1,
                        },
                        "cell": {},
                        "fields": "note",
                    }
                }
            ],
            f"clear header notes on '{sheet_name}'",
        )

    def read_rows(self, sheet_name: str) -> list[list[Any]]:
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .get(
                    spreadsheetId=self._require_spreadsheet(),
                    range=quote_sheet_name(sheet_name),
                    valueRenderOption="UNFORMATTED_VALUE",
                )
                .execute()
            )
        except HttpError as e:
            raise RuntimeError(f"Failed to read sheet '{sheet_name}': {e}")
        return result.get("values", [])

    def write_cells(self, sheet_name: str, row: int, column: int, values: list[Any]) -> None:
        range_notation = f"{quote_sheet_name(sheet_name)}!{index_to_col_letter(column - 1)}{row}"
        try:
            (
                self.service.spreadsheets()
                .values()
                .update(
                    spreadsheetId=self._require_spreadsheet(),
                    range=range_notation,
                    valueInputOption="RAW",
                    body={"values": [values]},
                )
                .execute()
            )
        except HttpError as e:
            raise RuntimeError(f"Failed to write {range_notation}: {e}")

    def append_row(self, sheet_name: str, values: list[Any]) -> None:
        try:
            (
                self.service.spreadsheets()
                .values()
                .append(
                    spreadsheetId=self._require_spreadsheet(),
                    range=quote_sheet_name(sheet_name),
                    valueInputOption="RAW",
                    insertDataOption="INSERT_ROWS",
                    body={"values": [values]},
                )
                .execute()
            )
        except HttpError as e:
            raise RuntimeError(f"Failed to append to '{sheet_name}': {e}")

    def delete_row(self, sheet_name: str, row: int) -> None:
        self._batch_update(
            [
                {
                    "deleteDimension": {
                        "range": {
                            "sheetId": self._sheet_id(sheet_name),
                            "dimension": "ROWS",
                            "startIndex": row - 1,
                            "endIndex": row,
                        }
                    }
                }
            ],
            f"delete row {row} of '{sheet_name}'",
        )

    def create_sheet(self, sheet_name: str, header: list[str]) -> None:
        result = self._batch_update(
            [
                {
                    "addSheet": {
                        "properties": {
                            "title": sheet_name,
                            "gridProperties": {"frozenRowCount": 1},
                        }
                    }
                }
            ],
            f"create sheet '{sheet_name}'",
        )
        sheet_id = result["replies"][0]["addSheet"]["properties"]["sheetId"]
        self._sheet_ids = None

        self.write_cells(sheet_name, 1, 1, header)
        self._batch_update(
            [
                {
                    "repeatCell": {
                        "range": {
                            "sheetId": sheet_id,
                            "startRowIndex": 0,
                            "endRowIndex": 1,
                            "startColumnIndex": 0,
                            "endColumnIndex": len(header),
                        },
                        "cell": {"userEnteredFormat": {"textFormat": {"bold": True}}},
                        "fields": "userEnteredFormat.textFormat.bold",
                    }
                }
            ],
            f"format header of '{sheet_name}'",
        )
        logger.info(f"Created sheet '{sheet_name}'")
