"""Data models for sheet snapshots."""

from pydantic import BaseModel, Field


class HeaderSnapshot(BaseModel):
    """Header row and header notes of one sheet, read once per pass."""

    sheet_name: str
    headers: list[str] = Field(default_factory=list)
    annotations: list[str] = Field(default_factory=list)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def header_at(self, index: int) -> str:
        """Header text at a 0-based index, blank when out of range."""
        if 0 <= index < len(self.headers):
            return self.headers[index]
        return ""

    def annotation_at(self, index: int) -> str:
        """Note text at a 0-based index, blank when out of range."""
        if 0 <= index < len(self.annotations):
            return self.annotations[index] or ""
        return ""

    def set_annotation(self, index: int, text: str):
        """Mirror a note write into the snapshot."""
        while len(self.annotations) <= index:
            self.annotations.append("")
        self.annotations[index] = text
