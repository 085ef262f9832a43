"""Column registry: tracking script variables to sheet columns."""

from .models import (
    REGISTRY_HEADERS,
    NOT_FOUND,
    RegistryEntry,
    MovedEvent,
    MatchType,
    ReconcileStatus,
    ReconcileResult,
    MaintenanceReport,
    RegistryNotFoundError,
    DuplicateEntryError,
)
from .annotations import MarkerSet
from .store import RegistryStore
from .reconciler import Reconciler
from .propagation import PropagationEngine
from .maintenance import MaintenanceOrchestrator
from .lookup import LookupCache
from .manager import ColumnRegistry

__all__ = [
    "REGISTRY_HEADERS",
    "NOT_FOUND",
    "RegistryEntry",
    "MovedEvent",
    "MatchType",
    "ReconcileStatus",
    "ReconcileResult",
    "MaintenanceReport",
    "RegistryNotFoundError",
    "DuplicateEntryError",
    "MarkerSet",
    "RegistryStore",
    "Reconciler",
    "PropagationEngine",
    "MaintenanceOrchestrator",
    "LookupCache",
    "ColumnRegistry",
]
