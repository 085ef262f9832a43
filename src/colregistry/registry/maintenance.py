"""Registry maintenance: prune, reconcile everything, rebuild header notes."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..config import settings
from ..prompts.base import ConfirmationPort
from ..sheets.base import TableAdapter
from .annotations import MarkerSet
from .models import MaintenanceReport, RegistryEntry, _utc_now, parse_timestamp
from .store import RegistryStore

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30.44


class MaintenanceOrchestrator:
    """
    Runs the three maintenance phases in order.

    1. Prune entries whose Last_Run is older than the threshold, after a
       single operator confirmation. Declining aborts the whole run.
    2. Reconcile every script still in the registry.
    3. Rebuild all header notes from the reconciled registry.
    """

    def __init__(
        self,
        table: TableAdapter,
        store: RegistryStore,
        update_columns: Callable[[str], object],
        prompt: Optional[ConfirmationPort] = None,
        threshold: Optional[timedelta] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.table = table
        self.store = store
        self.update_columns = update_columns
        self.prompt = prompt
        self.threshold = threshold if threshold is not None else settings.prune_threshold
        self.clock = clock

    def run(self) -> MaintenanceReport:
        logger.info("=== Starting Registry Maintenance ===")
        report = MaintenanceReport(started_at=self.clock())

        self.store.ensure_exists()

        if not self.prune(report):
            logger.info("Pruning cancelled by user")
            self._notify(report.summary())
            return report

        self.reconcile_all(report)
        self.rebuild_annotations(report)

        elapsed = (self.clock() - report.started_at).total_seconds()
        logger.info(
            f"=== Maintenance complete in {elapsed:.1f}s: pruned {len(report.pruned)} | "
            f"updated {len(report.scripts_updated)} script(s) | "
            f"tooltips {report.annotations_written} set ==="
        )
        self._notify(report.summary())
        return report

    def _notify(self, message: str):
        if self.prompt is not None:
            self.prompt.notify(message)

    def find_stale_entries(self, entries: list[RegistryEntry]) -> list[tuple[RegistryEntry, float]]:
        """Entries idle for longer than the threshold, with their age in months."""
        now = self.clock()
        stale = []
        for entry in entries:
            if not entry.last_accessed or not entry.script or not entry.variable:
                continue
            last_run = parse_timestamp(entry.last_accessed)
            if last_run is None:
                logger.info(f"Skipping row {entry.row}: invalid date format")
                continue
            age = now - last_run
            if age > self.threshold:
                stale.append((entry, age / timedelta(days=DAYS_PER_MONTH)))
        return stale

    def prune(self, report: MaintenanceReport) -> bool:
        """Phase 1. Returns False if the operator declined."""
        logger.info(f"Phase 1: Pruning entries unused for more than {self.threshold.days} days")
        stale = self.find_stale_entries(self.store.load_entries())
        if not stale:
            logger.info("No entries to prune")
            return True

        items = [f"{entry.marker} ({months:.1f}mo, {entry.sheet_name})" for entry, months in stale]
        message = f"Delete {len(stale)} unused entry(ies)?"
        if self.prompt is None:
            # Deleting rows always needs an operator
            logger.warning(f"{len(stale)} prune candidates but no operator to confirm")
            report.cancelled = True
            return False
        if not self.prompt.confirm_list(message, items):
            report.cancelled = True
            return False

        self.store.delete_entries([entry for entry, _ in stale])
        report.pruned = [entry.marker for entry, _ in stale]
        logger.info(f"Pruned {len(report.pruned)} entries")
        return True

    def reconcile_all(self, report: MaintenanceReport):
        """Phase 2: reconcile each distinct script in registry order."""
        logger.info("Phase 2: Updating column positions for each script")
        scripts = list(dict.fromkeys(e.script for e in self.store.load_entries() if e.script))
        for script in scripts:
            logger.info(f"Updating: {script}")
            self.update_columns(script)
        report.scripts_updated = scripts

    def rebuild_annotations(self, report: MaintenanceReport):
        """Phase 3: clear and rewrite header notes for every referenced sheet."""
        logger.info("Phase 3: Rebuilding all tooltips")
        layout: dict[str, dict[int, MarkerSet]] = {}
        for entry in self.store.load_entries():
            if not entry.sheet_name:
                continue
            columns = layout.setdefault(entry.sheet_name, {})
            if entry.is_resolved:
                columns.setdefault(entry.position, MarkerSet()).add(entry.marker)

        sheet_names = self.table.get_sheet_names()
        for sheet_name, columns in layout.items():
            if sheet_name not in sheet_names:
                logger.warning(f"⚠ Sheet not found: {sheet_name}")
                report.missing_sheets.append(sheet_name)
                continue

            logger.info(f"Processing sheet: {sheet_name}")
            self.table.clear_header_annotations(sheet_name)
            for position in sorted(columns):
                self.table.set_header_annotation(sheet_name, position, columns[position].serialize())
                report.annotations_written += 1
