"""flashdeck - flashcard decks and quiz games"""

__version__ = "1.0.0"

from .config import Config
from .errors import FlashDeckError, InvalidStateTransition, NotFoundError, ValidationError
from .models import Card, Deck, CandidateFields
from .services import (
    CardStore,
    DuplicateDetected,
    JSONRepository,
    MemoryRepository,
    ResolutionAction,
)
from .quiz import Mode, Phase, QuizSession

__all__ = [
    'Config',
    'FlashDeckError',
    'InvalidStateTransition',
    'NotFoundError',
    'ValidationError',
    'Card',
    'Deck',
    'CandidateFields',
    'CardStore',
    'DuplicateDetected',
    'JSONRepository',
    'MemoryRepository',
    'ResolutionAction',
    'Mode',
    'Phase',
    'QuizSession',
]
