"""Propagation of a resolved column move to sibling entries."""

import logging

from .models import MovedEvent, RegistryEntry
from .store import RegistryStore

logger = logging.getLogger(__name__)


class PropagationEngine:
    """Moves every other entry that tracked the same physical column."""

    def __init__(self, store: RegistryStore):
        self.store = store

    def on_moved(self, event: MovedEvent, snapshot: list[RegistryEntry]) -> list[RegistryEntry]:
        """
        Apply a move to the entries that shared the old column.

        ``snapshot`` is the registry as it stood when the pass began, so
        followers updated earlier in the same pass are matched on their
        original position and nothing is reconciled recursively.

        Returns the updated followers.
        """
        if event.old_position <= 0 or event.old_position == event.new_position:
            return []

        notes = (
            f"Auto-updated: followed {event.marker} "
            f"from pos {event.old_position} to {event.new_position}"
        )
        followers = []
        for other in snapshot:
            if other.script == event.script and other.variable == event.variable:
                continue
            if other.sheet_name != event.sheet_name or other.position != event.old_position:
                continue

            follower = other.model_copy()
            self.store.update_followed(follower, event.new_name, event.new_position, notes)
            followers.append(follower)
            logger.info(
                f"Proactively updated {other.script}.{other.variable} "
                f"from {event.old_position} to {event.new_position}"
            )
        return followers
