"""
Quiz modes - grading strategies plugged into QuizSession.

Each mode declares which phases it uses and how an answer is graded;
the session owns all state and transitions.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, List, Sequence, Tuple

from ..errors import ValidationError
from ..models.card import Card
from ..utils.parsing import TextParser
from .distractors import generate_options, make_true_false_question
from .hangman import HangmanRound

if TYPE_CHECKING:
    from .session import QuizSession


class Mode(Enum):
    """Available quiz modes."""
    STUDY = "study"
    TEST = "test"
    TRUE_FALSE = "true_false"
    SPELLING = "spelling"
    LOOK_COVER_CHECK = "look_cover_check"
    HANGMAN = "hangman"
    BATTLE_QUIZ = "battle_quiz"
    ARTICLE = "article"


class ModeStrategy:
    """
    Base strategy.
    
    Attributes:
        skips_answering: answers are accepted straight from PRESENTING
                         (the prompt already contains the answer surface)
        auto_advance: grading moves on to the next card immediately
        uses_submit: grading goes through ``submit_answer``
    """
    
    mode: Mode
    skips_answering = True
    auto_advance = False
    uses_submit = True
    
    def filter_cards(self, cards: List[Card]) -> List[Card]:
        return cards
    
    def prepare(self, session: "QuizSession", card: Card) -> None:
        """Set up per-card prompt state (options, questions) on the session."""
    
    def grade(self, session: "QuizSession", card: Card, candidate: Any) -> Tuple[bool, Any]:
        """Return ``(correct, expected)`` for a candidate answer."""
        raise NotImplementedError


class SelfReportStrategy(ModeStrategy):
    """Swipe study: the user reports known (True) or unknown (False)."""
    
    mode = Mode.STUDY
    auto_advance = True
    
    def grade(self, session, card, candidate):
        if not isinstance(candidate, bool):
            raise ValidationError("Study answers are True (known) or False (unknown)")
        return candidate, True


class RecallStrategy(ModeStrategy):
    """Type the word: case-insensitive, trimmed comparison with the card's word."""
    
    def __init__(self, mode: Mode):
        self.mode = mode
        # Look-cover-check needs the prompt covered before writing
        self.skips_answering = mode is not Mode.LOOK_COVER_CHECK
    
    def grade(self, session, card, candidate):
        if candidate is None:
            candidate = ""
        return TextParser.answers_match(str(candidate), card.word), card.word


class TrueFalseStrategy(ModeStrategy):
    """Judge whether the shown definition belongs to the word."""
    
    mode = Mode.TRUE_FALSE
    
    def prepare(self, session, card):
        session.current_question = make_true_false_question(card, session.pool, session.rng)
    
    def grade(self, session, card, candidate):
        if not isinstance(candidate, bool):
            raise ValidationError("True/false answers must be True or False")
        expected = session.current_question.is_correct
        return candidate == expected, expected


class MultipleChoiceStrategy(ModeStrategy):
    """Pick the card's definition among distractors."""
    
    mode = Mode.BATTLE_QUIZ
    
    def __init__(self, option_count: int):
        self.option_count = option_count
    
    def prepare(self, session, card):
        session.current_options = generate_options(
            card.definition, session.pool, self.option_count, session.rng
        )
    
    def grade(self, session, card, candidate):
        return TextParser.normalize_field(candidate) == card.definition, card.definition


class ArticleStrategy(ModeStrategy):
    """Pick the card's grammatical article (de/het) among the language's articles."""
    
    mode = Mode.ARTICLE
    
    def __init__(self, articles: Sequence[str]):
        self.articles = list(articles)
    
    def filter_cards(self, cards):
        return [card for card in cards if TextParser.normalize_field(card.article)]
    
    def prepare(self, session, card):
        session.current_options = list(self.articles)
    
    def grade(self, session, card, candidate):
        return TextParser.answers_match(candidate, card.article), card.article


class HangmanStrategy(ModeStrategy):
    """Letter guessing; graded by the round's win/loss, not by submit."""
    
    mode = Mode.HANGMAN
    skips_answering = False
    uses_submit = False
    
    def __init__(self, max_attempts: int):
        self.max_attempts = max_attempts
    
    def filter_cards(self, cards):
        return [card for card in cards if any(ch.isalpha() for ch in card.word)]
    
    def prepare(self, session, card):
        session.hangman = HangmanRound(card.word, self.max_attempts)


def strategy_for(
    mode: Mode,
    option_count: int,
    hangman_attempts: int,
    articles: Sequence[str]
) -> ModeStrategy:
    """Build the strategy for a mode."""
    if mode is Mode.STUDY:
        return SelfReportStrategy()
    if mode in (Mode.TEST, Mode.SPELLING, Mode.LOOK_COVER_CHECK):
        return RecallStrategy(mode)
    if mode is Mode.TRUE_FALSE:
        return TrueFalseStrategy()
    if mode is Mode.BATTLE_QUIZ:
        return MultipleChoiceStrategy(option_count)
    if mode is Mode.ARTICLE:
        return ArticleStrategy(articles)
    if mode is Mode.HANGMAN:
        return HangmanStrategy(hangman_attempts)
    raise ValueError(f"Unsupported mode: {mode!r}")
