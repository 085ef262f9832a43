"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from colregistry.config import DEFAULT_PRUNE_THRESHOLD_DAYS, Settings
from colregistry.prompts import ConfirmationPort
from colregistry.registry import REGISTRY_HEADERS, ColumnRegistry
from colregistry.sheets import TableAdapter

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class InMemoryTable(TableAdapter):
    """Workbook kept in dictionaries, recording every write."""

    def __init__(self):
        self.sheets: dict[str, list[list[Any]]] = {}
        self.notes: dict[str, list[str]] = {}
        self.note_writes: list[tuple[str, int, str]] = []
        self.cell_writes: list[tuple[str, int, int, list[Any]]] = []
        self.cleared: list[str] = []
        self.deleted_rows: list[tuple[str, int]] = []
        self.header_reads: list[str] = []

    def add_sheet(self, name: str, headers: list[str], notes: Optional[list[str]] = None):
        self.sheets[name] = [list(headers)]
        self.notes[name] = list(notes or [])

    def note(self, name: str, column: int) -> str:
        notes = self.notes[name]
        return notes[column - 1] if column <= len(notes) else ""

    def get_sheet_names(self) -> set[str]:
        return set(self.sheets)

    def get_header_row(self, sheet_name: str) -> list[str]:
        self.header_reads.append(sheet_name)
        rows = self.sheets[sheet_name]
        return [str(value) for value in rows[0]] if rows else []

    def get_header_annotations(self, sheet_name: str) -> list[str]:
        notes = list(self.notes[sheet_name])
        width = len(self.sheets[sheet_name][0]) if self.sheets[sheet_name] else 0
        return notes + [""] * (width - len(notes))

    def set_header_annotation(self, sheet_name: str, column: int, text: str) -> None:
        notes = self.notes[sheet_name]
        while len(notes) < column:
            notes.append("")
        notes[column - 1] = text
        self.note_writes.append((sheet_name, column, text))

    def clear_header_annotations(self, sheet_name: str) -> None:
        self.notes[sheet_name] = []
        self.cleared.append(sheet_name)

    def read_rows(self, sheet_name: str) -> list[list[Any]]:
        return [list(row) for row in self.sheets[sheet_name]]

    def write_cells(self, sheet_name: str, row: int, column: int, values: list[Any]) -> None:
        rows = self.sheets[sheet_name]
        while len(rows) < row:
            rows.append([])
        target = rows[row - 1]
        while len(target) < column - 1 + len(values):
            target.append("")
        target[column - 1 : column - 1 + len(values)] = values
        self.cell_writes.append((sheet_name, row, column, list(values)))

    def append_row(self, sheet_name: str, values: list[Any]) -> None:
        self.sheets[sheet_name].append(list(values))

    def delete_row(self, sheet_name: str, row: int) -> None:
        del self.sheets[sheet_name][row - 1]
        self.deleted_rows.append((sheet_name, row))

    def create_sheet(self, sheet_name: str, header: list[str]) -> None:
        self.add_sheet(sheet_name, header)


class ScriptedPrompt(ConfirmationPort):
    """Confirmation port answering from a script of canned responses."""

    def __init__(self, choices: Optional[list[Optional[str]]] = None, confirm: bool = True):
        self.choices = list(choices or [])
        self.confirm = confirm
        self.choice_calls: list[tuple[str, str, str]] = []
        self.confirm_calls: list[tuple[str, list[str]]] = []
        self.notifications: list[str] = []

    def prompt_choice(self, title: str, message: str, default: str) -> Optional[str]:
        self.choice_calls.append((title, message, default))
        if not self.choices:
            return default
        return self.choices.pop(0)

    def confirm_list(self, message: str, items: list[str]) -> bool:
        self.confirm_calls.append((message, list(items)))
        return self.confirm

    def notify(self, message: str) -> None:
        self.notifications.append(message)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with test values."""
    return Settings(
        registry_sheet_name="ColumnRegistry",
        prune_threshold_days=DEFAULT_PRUNE_THRESHOLD_DAYS,
        headless=False,
        spreadsheet_id="test-sheet-123",
    )


@pytest.fixture
def table() -> InMemoryTable:
    """Empty in-memory workbook."""
    return InMemoryTable()


@pytest.fixture
def make_registry(table):
    """Create the registry sheet with the given data rows."""

    def _make(rows: list[list[Any]]) -> InMemoryTable:
        table.add_sheet("ColumnRegistry", list(REGISTRY_HEADERS))
        for row in rows:
            table.append_row("ColumnRegistry", list(row))
        return table

    return _make


@pytest.fixture
def scripted_prompt() -> ScriptedPrompt:
    """Prompt that accepts every default and confirms every list."""
    return ScriptedPrompt()


@pytest.fixture
def headless_registry(table, test_settings) -> ColumnRegistry:
    """Registry with no operator available."""
    return ColumnRegistry(table, prompt=None, settings=test_settings, clock=lambda: FIXED_NOW)


@pytest.fixture
def interactive_registry(table, scripted_prompt, test_settings) -> ColumnRegistry:
    """Registry answered by the scripted prompt."""
    return ColumnRegistry(
        table, prompt=scripted_prompt, settings=test_settings, clock=lambda: FIXED_NOW
    )


def registry_row(table: InMemoryTable, script: str, variable: str) -> list[Any]:
    for row in table.sheets["ColumnRegistry"][1:]:
        if row[0] == script and row[1] == variable:
            return row
    raise AssertionError(f"No registry row for {script}:{variable}")


@pytest.fixture
def find_row(table):
    """Look up the raw registry row of an entry."""
    return lambda script, variable: registry_row(table, script, variable)


@pytest.fixture
def make_prompt():
    """Factory for scripted prompts with custom answers."""
    return ScriptedPrompt


@pytest.fixture
def now() -> datetime:
    """The fixed time used by registry fixtures."""
    return FIXED_NOW
