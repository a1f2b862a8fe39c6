"""
Saved game progress - one resumable session per quiz mode and deck selection.
"""

import json
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..config import Config
from ..quiz.modes import Mode
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class GameSaveState:
    id: str
    mode: Mode
    deck_ids: List[str]
    saved_at: datetime
    game_data: Dict[str, Any]
    
    def matches(self, mode: Mode, deck_ids: Iterable[str]) -> bool:
        return self.mode is mode and set(self.deck_ids) == set(deck_ids)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mode": self.mode.value,
            "deck_ids": list(self.deck_ids),
            "saved_at": self.saved_at.isoformat(),
            "game_data": self.game_data,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSaveState":
        return cls(
            id=data.get("id") or uuid.uuid4().hex,
            mode=Mode(data["mode"]),
            deck_ids=list(data.get("deck_ids") or []),
            saved_at=datetime.fromisoformat(data["saved_at"]),
            game_data=dict(data.get("game_data") or {}),
        )


class SaveStateManager:
    """
    Persist and look up saved quiz progress.
    
    Only the ``max_states`` most recent saves are kept, and saves older
    than ``max_age_days`` are dropped when the file is loaded.
    
    Usage:
        manager = SaveStateManager()
        manager.save_game_state(session.mode, session.deck_ids, session.snapshot())
        data = manager.load_game_state(Mode.TEST, [deck.id])
    """
    
    def __init__(
        self,
        path: Optional[str] = None,
        max_states: Optional[int] = None,
        max_age_days: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize the manager and load existing saves.
        
        Args:
            path: JSON file (defaults to Config.SAVE_STATES_FILE)
            max_states: Saves to keep (defaults to Config.MAX_SAVE_STATES)
            max_age_days: Age limit in days (defaults to Config.SAVE_STATE_MAX_AGE_DAYS)
            clock: Source of the current time
        """
        self.path = Path(path or Config.SAVE_STATES_FILE)
        self.max_states = max_states or Config.MAX_SAVE_STATES
        self.max_age_days = max_age_days or Config.SAVE_STATE_MAX_AGE_DAYS
        self._clock = clock
        self.available_save_states: List[GameSaveState] = []
        self._load()
    
    def _find(self, mode: Mode, deck_ids: Iterable[str]) -> Optional[GameSaveState]:
        deck_ids = list(deck_ids)
        return next((s for s in self.available_save_states if s.matches(mode, deck_ids)), None)
    
    def save_game_state(self, mode: Mode, deck_ids: Iterable[str], game_data: Dict[str, Any]) -> GameSaveState:
        """
        Save progress, replacing any earlier save for the same mode and decks.
        
        Returns:
            The stored save state
        """
        deck_ids = list(deck_ids)
        state = GameSaveState(
            id=uuid.uuid4().hex,
            mode=mode,
            deck_ids=deck_ids,
            saved_at=self._clock(),
            game_data=game_data,
        )
        
        self.available_save_states = [
            s for s in self.available_save_states if not s.matches(mode, deck_ids)
        ]
        self.available_save_states.append(state)
        self.available_save_states.sort(key=lambda s: s.saved_at, reverse=True)
        self.available_save_states = self.available_save_states[:self.max_states]
        
        self._save()
        logger.info("Saved game state for %s", mode.value)
        return state
    
    def load_game_state(self, mode: Mode, deck_ids: Iterable[str]) -> Optional[Dict[str, Any]]:
        """Get saved game data, or None if there is no save."""
        state = self._find(mode, deck_ids)
        return dict(state.game_data) if state else None
    
    def has_save_state(self, mode: Mode, deck_ids: Iterable[str]) -> bool:
        return self._find(mode, deck_ids) is not None
    
    def get_save_state_info(self, mode: Mode, deck_ids: Iterable[str]) -> Optional[Tuple[datetime, int]]:
        """``(saved_at, deck_count)`` for display, or None."""
        state = self._find(mode, deck_ids)
        if state is None:
            return None
        return state.saved_at, len(state.deck_ids)
    
    def delete_save_state(self, mode: Mode, deck_ids: Iterable[str]) -> None:
        deck_ids = list(deck_ids)
        self.available_save_states = [
            s for s in self.available_save_states if not s.matches(mode, deck_ids)
        ]
        self._save()
    
    def clear_all(self) -> None:
        self.available_save_states = []
        self._save()
    
    def clear_old(self) -> int:
        """
        Drop saves older than the age limit.
        
        Returns:
            Number of saves removed
        """
        cutoff = self._clock() - timedelta(days=self.max_age_days)
        before = len(self.available_save_states)
        self.available_save_states = [s for s in self.available_save_states if s.saved_at >= cutoff]
        removed = before - len(self.available_save_states)
        if removed:
            self._save()
            logger.info("Cleared %d old save states", removed)
        return removed
    
    def _load(self) -> None:
        if not self.path.exists():
            return
        
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                entries = json.load(f)
            self.available_save_states = [GameSaveState.from_dict(e) for e in entries]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Could not load save states from %s: %s", self.path, e)
            self.available_save_states = []
            return
        
        self.clear_old()
    
    def _save(self) -> bool:
        temp_file = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = f"{self.path}.{uuid.uuid4().hex[:8]}.tmp"
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump([s.to_dict() for s in self.available_save_states], f, indent=2, ensure_ascii=False)
            os.replace(temp_file, self.path)
            temp_file = None
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not save game states to %s: %s", self.path, e)
            return False
        finally:
            if temp_file and os.path.exists(temp_file):
                try:
                    os.remove(temp_file)
                except OSError:
                    pass
