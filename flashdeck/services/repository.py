"""
Repository Pattern - persistence of the full store snapshot.

The card store calls ``save`` after every mutation and ``load`` once at
start-up. Implementations report failure through the return value; they
never raise into the store.
"""

import copy
import json
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import Config
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

Snapshot = Dict[str, Any]


def empty_snapshot() -> Snapshot:
    """The snapshot meaning "no data yet"."""
    return {"decks": [], "cards": []}


class BaseRepository(ABC):
    """
    Abstract base class for snapshot storage.
    
    A snapshot is a plain dict: ``{"decks": [...], "cards": [...]}``.
    """
    
    @abstractmethod
    def load(self) -> Snapshot:
        """Return the last saved snapshot, or an empty one on first run."""
        pass
    
    @abstractmethod
    def save(self, snapshot: Snapshot) -> bool:
        """Persist a snapshot. Returns True if successful."""
        pass


class MemoryRepository(BaseRepository):
    """Keeps the last snapshot in memory. Used for tests and throwaway stores."""
    
    def __init__(self, snapshot: Optional[Snapshot] = None):
        self._snapshot: Snapshot = copy.deepcopy(snapshot) if snapshot else empty_snapshot()
        self.save_count = 0
    
    def load(self) -> Snapshot:
        return copy.deepcopy(self._snapshot)
    
    def save(self, snapshot: Snapshot) -> bool:
        self._snapshot = copy.deepcopy(snapshot)
        self.save_count += 1
        return True


class JSONRepository(BaseRepository):
    """
    JSON file repository.
    
    Writes are atomic: the snapshot goes to a temp file which is then
    renamed over the target, so a crash never leaves a half-written store.
    """
    
    def __init__(self, path: Optional[str] = None):
        """
        Initialize JSON repository.
        
        Args:
            path: Path to the JSON file (defaults to Config.STORE_FILE)
        """
        self.path = Path(path or Config.STORE_FILE)
    
    def load(self) -> Snapshot:
        """Load the snapshot; missing or unreadable files load as empty."""
        if not self.path.exists():
            return empty_snapshot()
        
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read store file %s: %s", self.path, e)
            return empty_snapshot()
        
        if not isinstance(data, dict):
            logger.warning("Store file %s does not contain a snapshot object", self.path)
            return empty_snapshot()
        
        snapshot = empty_snapshot()
        snapshot["decks"] = list(data.get("decks") or [])
        snapshot["cards"] = list(data.get("cards") or [])
        return snapshot
    
    def save(self, snapshot: Snapshot) -> bool:
        """Save the snapshot with an atomic temp-file write."""
        temp_file = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = f"{self.path}.{uuid.uuid4().hex[:8]}.tmp"
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2, ensure_ascii=False)
            os.replace(temp_file, self.path)
            temp_file = None
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not save store file %s: %s", self.path, e)
            return False
        finally:
            if temp_file and os.path.exists(temp_file):
                try:
                    os.remove(temp_file)
                except OSError:
                    pass
