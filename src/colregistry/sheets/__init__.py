"""Spreadsheet access for the column registry."""

from .base import TableAdapter, col_letter_to_index, index_to_col_letter, parse_column_choice
from .client import GoogleSheetsClient
from .models import HeaderSnapshot

__all__ = [
    "TableAdapter",
    "GoogleSheetsClient",
    "HeaderSnapshot",
    "col_letter_to_index",
    "index_to_col_letter",
    "parse_column_choice",
]
