"""Persistence layer for registry entries, kept in a sheet of the workbook."""

import logging
import math
from typing import Any, Optional

from ..config import settings
from ..sheets.base import TableAdapter
from .models import (
    NOT_FOUND,
    REGISTRY_HEADERS,
    RegistryEntry,
    RegistryNotFoundError,
)

logger = logging.getLogger(__name__)

# 1-based registry columns
COL_SCRIPT = 1
COL_VARIABLE = 2
COL_SHEET_NAME = 3
COL_HEADER_NAME = 4
COL_POSITION = 5
COL_LAST_RUN = 6
COL_NOTES = 7


def _cell(row: list[Any], column: int) -> Any:
    return row[column - 1] if len(row) >= column else ""


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_position(value: Any) -> int:
    """Parse a Position cell. Blank, zero and non-numeric values are unresolved."""
    if isinstance(value, bool):
        return NOT_FOUND
    try:
        number = float(value)
    except (TypeError, ValueError):
        return NOT_FOUND
    if not math.isfinite(number) or int(number) == 0:
        return NOT_FOUND
    return int(number)


class RegistryStore:
    """Manages registry entries stored as rows of the registry sheet."""

    def __init__(self, table: TableAdapter, sheet_name: Optional[str] = None):
        self.table = table
        self.sheet_name = sheet_name or settings.registry_sheet_name

    def exists(self) -> bool:
        return self.table.sheet_exists(self.sheet_name)

    def ensure_exists(self) -> bool:
        """Create the registry sheet if needed. Returns True if it was created."""
        if self.exists():
            return False
        self.table.create_sheet(self.sheet_name, list(REGISTRY_HEADERS))
        logger.info(f"Created registry sheet '{self.sheet_name}'")
        return True

    def load_entries(self) -> list[RegistryEntry]:
        """Read every entry. Raises RegistryNotFoundError if the sheet is absent."""
        if not self.exists():
            raise RegistryNotFoundError(self.sheet_name)

        rows = self.table.read_rows(self.sheet_name)
        entries = []
        for offset, row in enumerate(rows[1:]):
            entry = self._row_to_entry(row, offset + 2)
            if entry is not None:
                entries.append(entry)
        return entries

    def find_entry(self, script: str, variable: str) -> Optional[RegistryEntry]:
        for entry in self.load_entries():
            if entry.script == script and entry.variable == variable:
                return entry
        return None

    def _row_to_entry(self, row: list[Any], row_number: int) -> Optional[RegistryEntry]:
        """Convert a sheet row to a RegistryEntry. Blank rows yield None."""
        script = _text(_cell(row, COL_SCRIPT))
        variable = _text(_cell(row, COL_VARIABLE))
        if not script and not variable:
            return None
        # Kept raw: sheet dates arrive as serial numbers
        last_run = _cell(row, COL_LAST_RUN)
        if isinstance(last_run, str):
            last_run = last_run.strip()
        return RegistryEntry(
            script=script,
            variable=variable,
            sheet_name=_text(_cell(row, COL_SHEET_NAME)),
            header_name=_text(_cell(row, COL_HEADER_NAME)),
            position=parse_position(_cell(row, COL_POSITION)),
            last_accessed=last_run if last_run not in ("", None) else None,
            notes=_text(_cell(row, COL_NOTES)),
            row=row_number,
        )

    def _require_row(self, entry: RegistryEntry) -> int:
        if entry.row is None:
            raise ValueError(f"Entry {entry.marker} was not loaded from the registry")
        return entry.row

    def append_entry(self, entry: RegistryEntry) -> RegistryEntry:
        """Append a new entry row."""
        self.table.append_row(self.sheet_name, entry.to_row())
        logger.info(f"Registered {entry.marker} -> {entry.sheet_name}:{entry.position}")
        return entry

    def update_location(self, entry: RegistryEntry, header_name: str, position: int) -> RegistryEntry:
        """Write Header_Name and Position together."""
        self.table.write_cells(
            self.sheet_name, self._require_row(entry), COL_HEADER_NAME, [header_name, position]
        )
        entry.header_name = header_name
        entry.position = position
        return entry

    def update_followed(
        self, entry: RegistryEntry, header_name: str, position: int, notes: str
    ) -> RegistryEntry:
        """Write Header_Name, Position and Notes. Last_Run is left untouched."""
        row = self._require_row(entry)
        self.table.write_cells(self.sheet_name, row, COL_HEADER_NAME, [header_name, position])
        self.table.write_cells(self.sheet_name, row, COL_NOTES, [notes])
        entry.header_name = header_name
        entry.position = position
        entry.notes = notes
        return entry

    def touch(self, entry: RegistryEntry, timestamp: str) -> RegistryEntry:
        """Stamp Last_Run."""
        self.table.write_cells(self.sheet_name, self._require_row(entry), COL_LAST_RUN, [timestamp])
        entry.last_accessed = timestamp
        return entry

    def delete_entries(self, entries: list[RegistryEntry]) -> int:
        """Delete entry rows bottom-up so earlier row numbers stay valid."""
        rows = sorted({self._require_row(entry) for entry in entries}, reverse=True)
        for row in rows:
            self.table.delete_row(self.sheet_name, row)
        if rows:
            logger.info(f"Deleted {len(rows)} registry rows")
        return len(rows)
