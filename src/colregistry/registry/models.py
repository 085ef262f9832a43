"""Data models for the column registry."""

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

# Persisted column order of the registry sheet
REGISTRY_HEADERS = [
    "Script",
    "Variable_ID",
    "Sheet_Name",
    "Header_Name",
    "Position",
    "Last_Run",
    "Notes",
]

NOT_FOUND = -1

# Day zero of spreadsheet date serial numbers
SERIAL_EPOCH = datetime(1899, 12, 30, tzinfo=timezone.utc)


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Serialize a timestamp the way the registry sheet stores Last_Run."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_timestamp(value: object) -> Optional[datetime]:
    """
    Parse a Last_Run value.

    Accepts ISO-8601 text and spreadsheet date serial numbers (days since
    1899-12-30, UTC). Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return SERIAL_EPOCH + timedelta(days=value)
        except OverflowError:
            return None
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RegistryEntry(BaseModel):
    """One (script, variable) binding to a column of a sheet."""

    script: str
    variable: str
    sheet_name: str = ""
    header_name: str = ""
    position: int = NOT_FOUND  # 1-based; <= 0 means unresolved
    last_accessed: Optional[Union[str, int, float]] = None  # Raw Last_Run cell
    notes: str = ""
    row: Optional[int] = None  # Sheet row the entry was read from

    @property
    def marker(self) -> str:
        """Token identifying this entry in header notes."""
        return f"{self.script}:{self.variable}"

    @property
    def is_resolved(self) -> bool:
        return self.position > 0

    def to_row(self) -> list:
        """Serialize to the persisted column order."""
        return [
            self.script,
            self.variable,
            self.sheet_name,
            self.header_name,
            self.position,
            self.last_accessed or "",
            self.notes,
        ]


class MatchType(str, Enum):
    """Which evidence led to a resolution."""

    FULL = "full"  # name + position + tooltip
    NAME_POSITION = "name+position"
    TOOLTIP = "tooltip"
    MANUAL = "manual"  # operator located the column
    NONE = "none"


class ReconcileStatus(str, Enum):
    """Outcome of reconciling one entry."""

    UNCHANGED = "unchanged"
    UPDATED = "updated"
    UNRESOLVED = "unresolved"
    SKIPPED = "skipped"  # target sheet missing


class MovedEvent(BaseModel):
    """Emitted when an entry resolves to a different column or header."""

    script: str
    variable: str
    sheet_name: str
    old_position: int
    new_position: int
    new_name: str

    @property
    def marker(self) -> str:
        return f"{self.script}:{self.variable}"


class ReconcileResult(BaseModel):
    """Result of reconciling one entry."""

    entry: RegistryEntry
    status: ReconcileStatus
    match_type: MatchType = MatchType.NONE
    old_position: int = NOT_FOUND
    new_position: int = NOT_FOUND
    moved_event: Optional[MovedEvent] = None
    followers: list[RegistryEntry] = Field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.status in (ReconcileStatus.UNCHANGED, ReconcileStatus.UPDATED)


class MaintenanceReport(BaseModel):
    """Summary of a maintenance run."""

    cancelled: bool = False
    pruned: list[str] = Field(default_factory=list)
    scripts_updated: list[str] = Field(default_factory=list)
    annotations_written: int = 0
    missing_sheets: list[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=_utc_now)

    def summary(self) -> str:
        if self.cancelled:
            return "✓ Maintenance cancelled"
        return (
            "✓ Maintenance complete:\n"
            f"  • Pruned: {len(self.pruned)} entries\n"
            f"  • Updated: {len(self.scripts_updated)} script(s)\n"
            f"  • Tooltips: {self.annotations_written} set"
        )


class RegistryNotFoundError(Exception):
    """Exception raised when the registry sheet does not exist."""

    def __init__(self, sheet_name: str):
        self.sheet_name = sheet_name
        super().__init__(f'Registry sheet "{sheet_name}" does not exist')


class DuplicateEntryError(Exception):
    """Exception raised when registering a (script, variable) pair twice."""

    pass
