"""Configuration management for the column registry."""

import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# 13 months of 30.44 days
DEFAULT_PRUNE_THRESHOLD_DAYS = 13 * 30.44


def _parse_bool(name: str, default: str = "false") -> bool:
    """Parse a boolean flag from an environment variable."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Application settings."""

    # Google Sheets API credentials
    google_credentials_path: Path = Path(os.getenv("GOOGLE_CREDENTIALS_PATH", "credentials.json"))
    google_token_path: Path = Path(os.getenv("GOOGLE_TOKEN_PATH", "token.json"))

    # Spreadsheet holding both the registry sheet and the tracked sheets
    spreadsheet_id: Optional[str] = os.getenv("COLREG_SPREADSHEET_ID")

    # Registry sheet layout
    registry_sheet_name: str = os.getenv("COLREG_REGISTRY_SHEET", "ColumnRegistry")

    # Entries whose Last_Run is older than this are offered for pruning
    prune_threshold_days: float = float(
        os.getenv("COLREG_PRUNE_THRESHOLD_DAYS", str(DEFAULT_PRUNE_THRESHOLD_DAYS))
    )

    # No operator available: tier 2 matches are auto-accepted, tier 3 fails
    headless: bool = _parse_bool("COLREG_HEADLESS")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def prune_threshold(self) -> timedelta:
        """Staleness threshold as a timedelta."""
        return timedelta(days=self.prune_threshold_days)


settings = Settings()
