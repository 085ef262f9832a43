"""Main entry point for column registry operations."""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..config import Settings, settings as default_settings
from ..prompts.base import ConfirmationPort
from ..sheets.base import TableAdapter
from ..sheets.models import HeaderSnapshot
from .lookup import LookupCache
from .maintenance import MaintenanceOrchestrator
from .models import (
    NOT_FOUND,
    DuplicateEntryError,
    MaintenanceReport,
    ReconcileResult,
    ReconcileStatus,
    RegistryEntry,
    _utc_now,
)
from .propagation import PropagationEngine
from .reconciler import Reconciler
from .store import RegistryStore

logger = logging.getLogger(__name__)


class ColumnRegistry:
    """
    Tracks which column each (script, variable) pair lives in.

    This is the command surface for calling scripts. It coordinates the
    registry store, the reconciler, propagation and maintenance.

    Pass ``prompt=None`` to run headless: tier 2 matches are accepted
    automatically, entries needing manual location stay unresolved and
    pruning is never confirmed.
    """

    def __init__(
        self,
        table: TableAdapter,
        prompt: Optional[ConfirmationPort] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize the registry.

        Args:
            table: Workbook holding the registry sheet and the tracked sheets
            prompt: Operator confirmation surface, None when headless
            settings: Settings instance (module settings if not provided)
            clock: Source of the current time
        """
        self.settings = settings or default_settings
        self.table = table
        self.prompt = prompt
        self.store = RegistryStore(table, self.settings.registry_sheet_name)
        self.reconciler = Reconciler(table, self.store, prompt)
        self.propagation = PropagationEngine(self.store)
        self.lookup = LookupCache(self.store, clock)
        self.maintenance = MaintenanceOrchestrator(
            table,
            self.store,
            self.update_columns,
            prompt,
            threshold=self.settings.prune_threshold,
            clock=clock,
        )

    def get_column_position(self, script_id: str, variable_id: str) -> int:
        """Cached 1-based column of a variable, or -1 if not resolved."""
        return self.lookup.get_column_position(script_id, variable_id)

    def get_column_positions(self, script_id: str) -> dict[str, int]:
        """Cached columns of every variable of a script."""
        return self.lookup.get_column_positions(script_id)

    def update_columns(self, script_id: str) -> list[ReconcileResult]:
        """
        Reconcile every entry of a script against its sheet. Call at script start.

        The registry and each sheet's header row are read once. Moves are
        propagated to other entries that tracked the same column.

        Raises:
            RegistryNotFoundError: If the registry sheet does not exist
        """
        snapshot = self.store.load_entries()
        working = {entry.row: entry.model_copy() for entry in snapshot}
        headers: dict[str, Optional[HeaderSnapshot]] = {}
        results = []

        for original in snapshot:
            if original.script != script_id:
                continue
            entry = working[original.row]

            header = self._header_snapshot(entry.sheet_name, headers)
            if header is None:
                results.append(
                    ReconcileResult(
                        entry=entry,
                        status=ReconcileStatus.SKIPPED,
                        old_position=entry.position,
                        new_position=entry.position,
                    )
                )
                continue

            result = self.reconciler.reconcile(entry, header)
            event = result.moved_event
            if event is not None:
                result.followers = self.propagation.on_moved(event, snapshot)
                for follower in result.followers:
                    working[follower.row] = follower
                    # Followers no longer reference the old column
                    self.reconciler.discard_marker(
                        event.sheet_name, header, event.old_position, follower.marker
                    )
            results.append(result)

        unresolved = [r.entry.marker for r in results if r.status == ReconcileStatus.UNRESOLVED]
        if unresolved:
            logger.warning(f"Unresolved after update of {script_id}: {', '.join(unresolved)}")
        logger.info(
            f"Updated {script_id}: {sum(r.resolved for r in results)}/{len(results)} columns resolved"
        )
        return results

    def _header_snapshot(
        self, sheet_name: str, cache: dict[str, Optional[HeaderSnapshot]]
    ) -> Optional[HeaderSnapshot]:
        if sheet_name not in cache:
            if not sheet_name or not self.table.sheet_exists(sheet_name):
                logger.warning(f"Sheet not found: '{sheet_name}'")
                cache[sheet_name] = None
            else:
                headers = self.table.get_header_row(sheet_name)
                annotations = self.table.get_header_annotations(sheet_name)
                annotations = annotations + [""] * (len(headers) - len(annotations))
                cache[sheet_name] = HeaderSnapshot(
                    sheet_name=sheet_name, headers=headers, annotations=annotations
                )
        return cache[sheet_name]

    def perform_registry_maintenance(self) -> MaintenanceReport:
        """Prune stale entries, reconcile every script and rebuild header notes."""
        return self.maintenance.run()

    def register_entry(
        self,
        script: str,
        variable: str,
        sheet_name: str,
        header_name: str = "",
        position: int = NOT_FOUND,
    ) -> RegistryEntry:
        """
        Add a new entry to the registry.

        The entry is reconciled on the next update_columns call for its script.

        Raises:
            DuplicateEntryError: If the (script, variable) pair is already registered
            RegistryNotFoundError: If the registry sheet does not exist
        """
        if self.store.find_entry(script, variable) is not None:
            raise DuplicateEntryError(f"{script}:{variable} is already registered")
        entry = RegistryEntry(
            script=script,
            variable=variable,
            sheet_name=sheet_name,
            header_name=header_name,
            position=position if position > 0 else NOT_FOUND,
        )
        return self.store.append_entry(entry)
