"""Quiz engine - session state machine, modes and game helpers."""

from .battle import BattleEvent, BattleState, Enemy, Player
from .distractors import TrueFalseQuestion, generate_options, make_true_false_question
from .hangman import HangmanRound, HangmanStatus
from .modes import Mode, ModeStrategy, strategy_for
from .session import Phase, QuizOutcome, QuizSession, SessionSummary

__all__ = [
    'BattleEvent',
    'BattleState',
    'Enemy',
    'Player',
    'TrueFalseQuestion',
    'generate_options',
    'make_true_false_question',
    'HangmanRound',
    'HangmanStatus',
    'Mode',
    'ModeStrategy',
    'strategy_for',
    'Phase',
    'QuizOutcome',
    'QuizSession',
    'SessionSummary',
]
