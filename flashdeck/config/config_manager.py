"""User settings: JSON file, environment overrides, validated game rules."""

import copy
import json
import os
import uuid
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from .settings import Config
from ..errors import ValidationError
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

ENV_PREFIX = "FLASHDECK_"

# Smallest value that keeps each game rule playable
MINIMUMS: Dict[str, int] = {
    "HANGMAN_ATTEMPTS": 1,
    "MULTIPLE_CHOICE_OPTIONS": 2,
    "MAX_SAVE_STATES": 1,
    "SAVE_STATE_MAX_AGE_DAYS": 1,
}


class SettingsManager:
    """
    User-adjustable study settings.

    Precedence: environment (``FLASHDECK_<KEY>``) over the settings file
    over DEFAULTS. Values are coerced to the type of their default; a value
    that cannot be used falls back to the default with a warning.

    Usage:
        settings = SettingsManager()
        session = QuizSession(cards, Mode.HANGMAN, **settings.session_options())
        settings.set("HANGMAN_ATTEMPTS", 8)
    """

    _instance: Optional["SettingsManager"] = None
    _lock: Lock = Lock()

    DEFAULTS: Dict[str, Any] = {
        "CURRENT_LANG": Config.CURRENT_LANG,
        "DEFAULT_DECK_NAME": Config.DEFAULT_DECK_NAME,

        # Game rules
        "HANGMAN_ATTEMPTS": Config.HANGMAN_ATTEMPTS,
        "MULTIPLE_CHOICE_OPTIONS": Config.MULTIPLE_CHOICE_OPTIONS,
        "SHUFFLE_SESSIONS": True,

        # Save states
        "MAX_SAVE_STATES": Config.MAX_SAVE_STATES,
        "SAVE_STATE_MAX_AGE_DAYS": Config.SAVE_STATE_MAX_AGE_DAYS,

        # Озвучка
        "SPEECH_ENABLED": True,
        "VOICE": Config.VOICE,
    }

    def __new__(cls, settings_file: Optional[str] = None) -> "SettingsManager":
        """One manager per process; later constructor arguments are ignored."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._initialized = False
                    cls._instance = instance
        return cls._instance

    def __init__(self, settings_file: Optional[str] = None) -> None:
        """
        Args:
            settings_file: JSON file to read and write (Config.SETTINGS_FILE)
        """
        if getattr(self, "_initialized", False):
            return

        self.path = Path(settings_file or Config.SETTINGS_FILE)
        self._values: Dict[str, Any] = {}
        self._write_lock = Lock()

        self.reload()
        self._initialized = True

    # ==================== Loading ====================

    def reload(self) -> None:
        """Re-read the settings file and the environment."""
        values = copy.deepcopy(self.DEFAULTS)

        for key, raw in self._read_file().items():
            if key not in self.DEFAULTS:
                logger.warning("Ignoring unknown setting %r in %s", key, self.path)
                continue
            values[key] = self._coerce_or_default(key, raw, "settings file")

        for key in self.DEFAULTS:
            raw = os.environ.get(f"{ENV_PREFIX}{key}")
            if raw is not None:
                values[key] = self._coerce_or_default(key, raw, "environment")

        self._values = values
        self._write()

    def _read_file(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not read settings file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Settings file %s does not hold an object", self.path)
            return {}
        return data

    def _coerce_or_default(self, key: str, raw: Any, source: str) -> Any:
        try:
            return self.coerce(key, raw)
        except ValidationError as e:
            logger.warning("Invalid %s value for %s: %s", source, key, e)
            return self.DEFAULTS[key]

    @classmethod
    def coerce(cls, key: str, raw: Any) -> Any:
        """
        Convert ``raw`` to the type of the setting's default.

        Strings are accepted for every type, so environment values and
        JSON values go through the same rules.

        Raises:
            ValidationError: unknown key, or a value the setting cannot take
        """
        if key not in cls.DEFAULTS:
            raise ValidationError(f"Unknown setting {key!r}")
        default = cls.DEFAULTS[key]

        if isinstance(default, bool):
            if isinstance(raw, bool):
                return raw
            text = str(raw).strip().lower()
            if text in ("true", "1", "yes", "on"):
                return True
            if text in ("false", "0", "no", "off"):
                return False
            raise ValidationError(f"expected a boolean, got {raw!r}")

        if isinstance(default, int):
            try:
                value = int(str(raw).strip()) if not isinstance(raw, int) else raw
            except ValueError:
                raise ValidationError(f"expected a whole number, got {raw!r}")
            minimum = MINIMUMS.get(key)
            if minimum is not None and value < minimum:
                raise ValidationError(f"must be at least {minimum}, got {value}")
            return value

        value = str(raw).strip()
        if not value:
            raise ValidationError("must not be empty")
        return value

    # ==================== Access ====================

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        return dict(self._values)

    def set(self, key: str, value: Any, persist: bool = True) -> None:
        """
        Change a setting.

        Raises:
            ValidationError: unknown key or unusable value (nothing changes)
        """
        self._values[key] = self.coerce(key, value)
        if persist:
            self._write()

    def reset(self, key: Optional[str] = None) -> None:
        """Restore one setting, or all of them, to DEFAULTS."""
        if key is None:
            self._values = copy.deepcopy(self.DEFAULTS)
        elif key in self.DEFAULTS:
            self._values[key] = self.DEFAULTS[key]
        self._write()

    def session_options(self) -> Dict[str, Any]:
        """QuizSession keyword arguments taken from the game-rule settings."""
        return {
            "option_count": self._values["MULTIPLE_CHOICE_OPTIONS"],
            "hangman_attempts": self._values["HANGMAN_ATTEMPTS"],
            "shuffle": self._values["SHUFFLE_SESSIONS"],
        }

    # ==================== Persistence ====================

    def _write(self) -> bool:
        """Atomically replace the settings file."""
        with self._write_lock:
            temp_file = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                temp_file = f"{self.path}.{uuid.uuid4().hex[:8]}.tmp"
                with open(temp_file, "w", encoding="utf-8") as f:
                    json.dump(self._values, f, indent=2, ensure_ascii=False)
                os.replace(temp_file, self.path)
                temp_file = None
                return True
            except OSError as e:
                logger.warning("Could not save settings file %s: %s", self.path, e)
                return False
            finally:
                if temp_file and os.path.exists(temp_file):
                    os.remove(temp_file)

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the process-wide instance (tests)."""
        with cls._lock:
            cls._instance = None
