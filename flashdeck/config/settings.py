"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Project root .env (FLASHDECK_LANG, FLASHDECK_DATA_DIR, FLASHDECK_LOG_LEVEL)
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)

from .languages import LANG_CONFIG

# Поточна мова навчання
CURRENT_LANG = os.environ.get("FLASHDECK_LANG", "NL").upper()


@dataclass
class Config:
    """Application-wide configuration."""

    settings = LANG_CONFIG.get(CURRENT_LANG, LANG_CONFIG["NL"])

    # Мовні параметри
    CURRENT_LANG: str = CURRENT_LANG if CURRENT_LANG in LANG_CONFIG else "NL"
    VOICE: str = settings["voice"]
    VOICE_ID: str = settings["voice_id"]
    LABEL: str = settings["label"]
    ARTICLES = tuple(settings["articles"])

    # Store behaviour
    DEFAULT_DECK_NAME: str = "Uncategorized"

    # Game rules
    HANGMAN_ATTEMPTS: int = 6
    MULTIPLE_CHOICE_OPTIONS: int = 4
    MAX_SAVE_STATES: int = 10
    SAVE_STATE_MAX_AGE_DAYS: int = 30

    LOG_LEVEL: str = os.environ.get("FLASHDECK_LOG_LEVEL", "INFO")

    # Cross-platform paths using pathlib
    # BASE_DIR is the project root (parent of flashdeck/)
    BASE_DIR: Path = Path(__file__).parent.parent.parent.resolve()

    DATA_DIR: str = os.environ.get("FLASHDECK_DATA_DIR", str(BASE_DIR / "data"))
    MEDIA_DIR: str = str(Path(DATA_DIR) / "media")
    STORE_FILE: str = str(Path(DATA_DIR) / "flashcards.json")
    SAVE_STATES_FILE: str = str(Path(DATA_DIR) / "save_states.json")
    SETTINGS_FILE: str = str(Path(DATA_DIR) / "settings.json")
