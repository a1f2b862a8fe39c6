"""Services layer: store, persistence, duplicates, import/export and media."""

from .repository import BaseRepository, JSONRepository, MemoryRepository, empty_snapshot
from .duplicates import (
    Comparison,
    DuplicateDetected,
    ResolutionAction,
    compare_cards,
    resolve_duplicate,
)
from .card_store import CardStore
from .csv_io import ImportResult, export_cards_to_csv, import_cards_from_csv
from .save_states import GameSaveState, SaveStateManager
from .media_service import MediaService

__all__ = [
    "BaseRepository",
    "JSONRepository",
    "MemoryRepository",
    "empty_snapshot",
    "Comparison",
    "DuplicateDetected",
    "ResolutionAction",
    "compare_cards",
    "resolve_duplicate",
    "CardStore",
    "ImportResult",
    "export_cards_to_csv",
    "import_cards_from_csv",
    "GameSaveState",
    "SaveStateManager",
    "MediaService",
]
