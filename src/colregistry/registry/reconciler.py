"""Three-tier column reconciliation for a single registry entry."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..prompts.base import ConfirmationPort
from ..sheets.base import TableAdapter, index_to_col_letter, parse_column_choice
from ..sheets.models import HeaderSnapshot
from .annotations import MarkerSet
from .models import (
    MatchType,
    MovedEvent,
    ReconcileResult,
    ReconcileStatus,
    RegistryEntry,
)
from .store import RegistryStore

logger = logging.getLogger(__name__)


@dataclass
class Evidence:
    """Which signals agree at one column."""

    name: bool
    position: bool
    tooltip: bool


class Reconciler:
    """
    Decides which column of a sheet a registry entry now refers to.

    Evidence at each column is the registered header name, the registered
    position and the entry's marker in the header note. Resolution runs in
    three tiers:

    1. All three signals agree at the old position: accept silently.
    2. Name and position agree at the old position, or the marker is found
       anywhere: ask the operator with the candidate pre-filled, or accept
       it when there is no operator.
    3. Only one of name or position agrees somewhere: ask the operator to
       locate the column. Without an operator the entry stays unresolved.

    Within a tier the leftmost matching column wins.
    """

    def __init__(
        self,
        table: TableAdapter,
        store: RegistryStore,
        prompt: Optional[ConfirmationPort] = None,
    ):
        self.table = table
        self.store = store
        self.prompt = prompt

    def _evidence(self, entry: RegistryEntry, snapshot: HeaderSnapshot, index: int) -> Evidence:
        return Evidence(
            name=bool(entry.header_name) and snapshot.header_at(index) == entry.header_name,
            position=index + 1 == entry.position,
            tooltip=entry.marker in MarkerSet.parse(snapshot.annotation_at(index)),
        )

    def _old_index(self, entry: RegistryEntry, snapshot: HeaderSnapshot) -> Optional[int]:
        if 0 < entry.position <= snapshot.column_count:
            return entry.position - 1
        return None

    def reconcile(self, entry: RegistryEntry, snapshot: HeaderSnapshot) -> ReconcileResult:
        """Resolve the entry against a header snapshot of its sheet."""
        old_position = entry.position
        old_index = self._old_index(entry, snapshot)

        # Tier 1: everything still lines up
        if old_index is not None:
            evidence = self._evidence(entry, snapshot, old_index)
            if evidence.name and evidence.position and evidence.tooltip:
                logger.debug(f"{entry.marker} confirmed at column {old_position}")
                return ReconcileResult(
                    entry=entry,
                    status=ReconcileStatus.UNCHANGED,
                    match_type=MatchType.FULL,
                    old_position=old_position,
                    new_position=old_position,
                )

        result = self._confirm_partial_match(entry, snapshot, old_index)
        if result is None:
            result = self._locate_manually(entry, snapshot)
        if result is None:
            logger.warning(
                f"Could not resolve {entry.marker} on sheet '{entry.sheet_name}'; "
                f"keeping position {old_position}"
            )
            return ReconcileResult(
                entry=entry,
                status=ReconcileStatus.UNRESOLVED,
                old_position=old_position,
                new_position=old_position,
            )
        return result

    def _confirm_partial_match(
        self, entry: RegistryEntry, snapshot: HeaderSnapshot, old_index: Optional[int]
    ) -> Optional[ReconcileResult]:
        """Tier 2: name+position at the old column, or the marker anywhere."""
        candidate = None
        match_type = None

        if old_index is not None:
            evidence = self._evidence(entry, snapshot, old_index)
            if evidence.name and evidence.position:
                candidate, match_type = old_index, MatchType.NAME_POSITION

        if candidate is None:
            for index in range(snapshot.column_count):
                if self._evidence(entry, snapshot, index).tooltip:
                    candidate, match_type = index, MatchType.TOOLTIP
                    break

        if candidate is None:
            return None

        letter = index_to_col_letter(candidate)
        if self.prompt is None:
            logger.info(f"Accepting {match_type.value} match for {entry.variable} in headless mode")
            return self.select_column(entry, snapshot, candidate, match_type)

        message = (
            f'Confirm column match for "{entry.variable}":\n\n'
            f'Column {letter}: "{snapshot.header_at(candidate)}"\n'
            f"Match type: {match_type.value}\n\n"
            "Enter column letter to confirm (or change):"
        )
        response = self.prompt.prompt_choice("Column Match Confirmation", message, letter)
        chosen = parse_column_choice(response, snapshot.column_count)
        if chosen is None:
            logger.info(f"Match for {entry.variable} not confirmed")
            return None
        if chosen != candidate:
            match_type = MatchType.MANUAL
        return self.select_column(entry, snapshot, chosen, match_type)

    def _locate_manually(
        self, entry: RegistryEntry, snapshot: HeaderSnapshot
    ) -> Optional[ReconcileResult]:
        """Tier 3: only one of name or position agrees; the operator decides."""
        suggestion = None
        for index in range(snapshot.column_count):
            evidence = self._evidence(entry, snapshot, index)
            if evidence.name != evidence.position:
                suggestion = index
                break

        if suggestion is None and not entry.header_name:
            return None

        if self.prompt is None:
            logger.warning(f"Cannot resolve {entry.variable} in headless mode")
            return None

        default = index_to_col_letter(suggestion) if suggestion is not None else ""
        suggestion_text = (
            f'\n\nSuggested: Column {default}: "{snapshot.header_at(suggestion)}"'
            if suggestion is not None
            else ""
        )
        message = (
            f'Column "{entry.header_name or entry.variable}" needs manual location.'
            f"{suggestion_text}\n\nEnter column letter (e.g., A, B, C):"
        )
        response = self.prompt.prompt_choice(f"Locate Column: {entry.variable}", message, default)
        chosen = parse_column_choice(response, snapshot.column_count)
        if chosen is None:
            return None
        return self.select_column(entry, snapshot, chosen, MatchType.MANUAL)

    def discard_marker(
        self, sheet_name: str, snapshot: HeaderSnapshot, position: int, marker: str
    ) -> bool:
        """Remove a marker from the header note at a 1-based position."""
        if not 0 < position <= snapshot.column_count:
            return False
        markers = MarkerSet.parse(snapshot.annotation_at(position - 1))
        if not markers.discard(marker):
            return False
        text = markers.serialize()
        self.table.set_header_annotation(sheet_name, position, text)
        snapshot.set_annotation(position - 1, text)
        return True

    def select_column(
        self,
        entry: RegistryEntry,
        snapshot: HeaderSnapshot,
        index: int,
        match_type: MatchType = MatchType.MANUAL,
    ) -> ReconcileResult:
        """
        Bind the entry to the column at a 0-based index.

        Moves the entry's marker from its old header note to the new one,
        writes Header_Name and Position, and emits a MovedEvent when either
        changed.
        """
        old_position = entry.position
        old_name = entry.header_name
        new_position = index + 1
        new_name = snapshot.header_at(index)
        marker = entry.marker

        if old_position != new_position:
            self.discard_marker(entry.sheet_name, snapshot, old_position, marker)

        new_markers = MarkerSet.parse(snapshot.annotation_at(index))
        if new_markers.add(marker):
            text = new_markers.serialize()
            self.table.set_header_annotation(entry.sheet_name, new_position, text)
            snapshot.set_annotation(index, text)

        if (old_position, old_name) == (new_position, new_name):
            return ReconcileResult(
                entry=entry,
                status=ReconcileStatus.UNCHANGED,
                match_type=match_type,
                old_position=old_position,
                new_position=new_position,
            )

        self.store.update_location(entry, new_name, new_position)
        logger.info(
            f"{marker} on '{entry.sheet_name}': column {old_position} -> {new_position} "
            f"({match_type.value})"
        )
        return ReconcileResult(
            entry=entry,
            status=ReconcileStatus.UPDATED,
            match_type=match_type,
            old_position=old_position,
            new_position=new_position,
            moved_event=MovedEvent(
                script=entry.script,
                variable=entry.variable,
                sheet_name=entry.sheet_name,
                old_position=old_position,
                new_position=new_position,
                new_name=new_name,
            ),
        )
