"""Fast position lookups over the registry."""

import logging
from datetime import datetime
from typing import Callable

from .models import NOT_FOUND, _utc_now, format_timestamp
from .store import RegistryStore

logger = logging.getLogger(__name__)


class LookupCache:
    """
    Read path used by scripts at run time.

    Never touches the tracked sheets; returns whatever position the
    registry currently holds and stamps Last_Run on resolved entries.
    """

    def __init__(self, store: RegistryStore, clock: Callable[[], datetime] = _utc_now):
        self.store = store
        self.clock = clock

    def get_column_position(self, script: str, variable: str) -> int:
        """1-based position of a variable's column, or -1 if not resolved."""
        for entry in self.store.load_entries():
            if entry.script == script and entry.variable == variable:
                if entry.is_resolved:
                    self.store.touch(entry, format_timestamp(self.clock()))
                    return entry.position
                return NOT_FOUND

        logger.info(f"No registry entry for {script}.{variable}")
        return NOT_FOUND

    def get_column_positions(self, script: str) -> dict[str, int]:
        """Positions of every variable registered for a script, -1 where unresolved."""
        positions: dict[str, int] = {}
        timestamp = format_timestamp(self.clock())
        for entry in self.store.load_entries():
            if entry.script != script:
                continue
            positions[entry.variable] = entry.position if entry.is_resolved else NOT_FOUND
            if entry.is_resolved:
                self.store.touch(entry, timestamp)
        return positions
