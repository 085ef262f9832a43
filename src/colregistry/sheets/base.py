"""Table adapter interface and column notation helpers."""

from abc import ABC, abstractmethod
from typing import Any, Optional


def col_letter_to_index(col: str) -> int:
    """Convert column letter(s) to 0-based index. A=0, B=1, ..., Z=25, AA=26, etc."""
    result = 0
    for char in col.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def index_to_col_letter(index: int) -> str:
    """Convert 0-based index to column letter(s)."""
    result = ""
    index += 1
    while index > 0:
        index -= 1
        result = chr(ord("A") + (index % 26)) + result
        index //= 26
    return result


def parse_column_choice(text: Optional[str], column_count: int) -> Optional[int]:
    """
    Parse an operator-supplied column letter into a 0-based index.

    Returns None when the text is not a column letter or falls outside
    the first ``column_count`` columns.
    """
    if text is None:
        return None
    letters = text.strip().upper()
    if not letters or not all("A" <= char <= "Z" for char in letters):
        return None
    index = col_letter_to_index(letters)
    if 0 <= index < column_count:
        return index
    return None


class TableAdapter(ABC):
    """
    Abstract access to a workbook of named sheets.

    Row and column numbers are 1-based at this interface.
    """

    @abstractmethod
    def get_sheet_names(self) -> set[str]:
        """Return the names of all sheets in the workbook."""
        pass

    def sheet_exists(self, name: str) -> bool:
        """Check whether a sheet with this name exists."""
        return name in self.get_sheet_names()

    @abstractmethod
    def get_header_row(self, sheet_name: str) -> list[str]:
        """Return the header row text, blank strings for empty cells."""
        pass

    @abstractmethod
    def get_header_annotations(self, sheet_name: str) -> list[str]:
        """Return the header notes, parallel to the header row."""
        pass

    @abstractmethod
    def set_header_annotation(self, sheet_name: str, column: int, text: str) -> None:
        """Set the note on a header cell. Empty text clears it."""
        pass

    @abstractmethod
    def clear_header_annotations(self, sheet_name: str) -> None:
        """Clear every note on the header row."""
        pass

    @abstractmethod
    def read_rows(self, sheet_name: str) -> list[list[Any]]:
        """Return every row of the sheet, header row first."""
        pass

    @abstractmethod
    def write_cells(self, sheet_name: str, row: int, column: int, values: list[Any]) -> None:
        """Write consecutive cells of one row starting at ``column``."""
        pass

    @abstractmethod
    def append_row(self, sheet_name: str, values: list[Any]) -> None:
        """Append a row after the last non-empty row."""
        pass

    @abstractmethod
    def delete_row(self, sheet_name: str, row: int) -> None:
        """Delete a row, shifting the rows below it up."""
        pass

    @abstractmethod
    def create_sheet(self, sheet_name: str, header: list[str]) -> None:
        """Create a sheet with a frozen, bold header row."""
        pass
