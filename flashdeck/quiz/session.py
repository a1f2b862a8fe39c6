"""
Quiz Session Engine - one run of a quiz mode over an ordered card subset.

Phases:

    PRESENTING -> ANSWERING -> GRADED -> ADVANCING -> PRESENTING ... -> COMPLETE

A session built from an empty card list sits in EMPTY and never runs.
Modes whose prompt already contains the answer surface accept answers
straight from PRESENTING; look-cover-check needs ``reveal()`` (cover)
first; hangman moves to ANSWERING on the first guessed letter. Swipe
study grades and advances in one call.

All transitions are synchronous. Operations called in the wrong phase
raise InvalidStateTransition and leave the session untouched.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from ..config import Config
from ..errors import InvalidStateTransition
from ..models.card import Card
from ..utils.logger import setup_logger
from .battle import BattleEvent, BattleState
from .distractors import TrueFalseQuestion
from .hangman import HangmanRound, HangmanStatus
from .modes import Mode, strategy_for

if TYPE_CHECKING:
    from ..services.card_store import CardStore

logger = setup_logger(__name__)

_rng = random.Random()


class Phase(Enum):
    EMPTY = "empty"
    PRESENTING = "presenting"
    ANSWERING = "answering"
    GRADED = "graded"
    ADVANCING = "advancing"
    COMPLETE = "complete"


@dataclass
class QuizOutcome:
    """Result of grading one card."""
    card: Card
    candidate: Any
    expected: Any
    correct: bool
    battle_event: Optional[BattleEvent] = None


@dataclass
class SessionSummary:
    score: int
    attempts: int
    percentage: int
    history: List[QuizOutcome] = field(default_factory=list)

    @property
    def incorrect_cards(self) -> List[Card]:
        return [outcome.card for outcome in self.history if not outcome.correct]


class QuizSession:
    """
    Mode-parameterized quiz state machine.

    Usage:
        session = QuizSession(store.cards_for_decks([deck.id]), Mode.SPELLING, store=store)
        while not session.is_complete:
            session.submit_answer(input(session.current_card.definition))
            session.advance()
        print(session.percentage)

    Study (swipe) sessions advance on their own: each ``submit_answer`` moves
    to the next card, and calling ``advance()`` afterwards is rejected.
    """

    def __init__(
        self,
        cards: Sequence[Card],
        mode: Mode,
        store: Optional["CardStore"] = None,
        pool: Optional[Sequence[Card]] = None,
        rng: Optional[random.Random] = None,
        shuffle: bool = False,
        option_count: Optional[int] = None,
        hangman_attempts: Optional[int] = None,
        articles: Optional[Sequence[str]] = None,
        deck_ids: Optional[Sequence[str]] = None
    ):
        """
        Create a session.

        Args:
            cards: Cards to quiz, in order
            mode: Quiz mode
            store: Card store updated with mastery statistics (optional)
            pool: Cards to draw distractors from (defaults to ``cards``)
            rng: Random source (inject a seeded one for tests)
            shuffle: Shuffle ``cards`` before the first prompt
            option_count: Options per multiple-choice question
            hangman_attempts: Wrong guesses allowed per hangman word
            articles: Article options for the article game
            deck_ids: Decks the session was started from (used for save states)
        """
        self.mode = mode
        self.store = store
        self.rng = rng or _rng
        self.deck_ids = list(deck_ids or [])
        self.strategy = strategy_for(
            mode,
            option_count or Config.MULTIPLE_CHOICE_OPTIONS,
            hangman_attempts or Config.HANGMAN_ATTEMPTS,
            articles or Config.ARTICLES,
        )

        self.cards: List[Card] = self.strategy.filter_cards(list(cards))
        if shuffle:
            self.rng.shuffle(self.cards)
        self.pool: List[Card] = list(pool) if pool else list(self.cards)

        self.battle: Optional[BattleState] = None
        self._start()

    def _start(self) -> None:
        self.current_index = 0
        self.score = 0
        self.attempts = 0
        self.history: List[QuizOutcome] = []
        self.last_outcome: Optional[QuizOutcome] = None
        self._clear_prompt()

        if self.mode is Mode.BATTLE_QUIZ:
            self.battle = BattleState(self.rng)

        if not self.cards:
            self.phase = Phase.EMPTY
        else:
            self._present()

    def _clear_prompt(self) -> None:
        self.current_options: List[str] = []
        self.current_question: Optional[TrueFalseQuestion] = None
        self.hangman: Optional[HangmanRound] = None

    def _present(self) -> None:
        self._clear_prompt()
        self.phase = Phase.PRESENTING
        self.strategy.prepare(self, self.cards[self.current_index])

    def _reject(self, operation: str, message: str = "") -> None:
        error = InvalidStateTransition(operation, self.phase, message)
        logger.warning("%s (mode %s)", error, self.mode.value)
        raise error

    # ==================== Observers ====================

    @property
    def total(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return self.phase is Phase.EMPTY

    @property
    def is_complete(self) -> bool:
        return self.phase is Phase.COMPLETE

    @property
    def current_card(self) -> Optional[Card]:
        """Card being quizzed, or None when empty or complete."""
        if self.phase in (Phase.PRESENTING, Phase.ANSWERING, Phase.GRADED):
            return self.cards[self.current_index]
        return None

    @property
    def percentage(self) -> int:
        """Correct answers as a percentage of graded answers, halves rounded up (0 before any)."""
        if self.attempts == 0:
            return 0
        return (200 * self.score + self.attempts) // (2 * self.attempts)

    @property
    def progress(self) -> float:
        if not self.cards:
            return 0.0
        if self.is_complete:
            return 1.0
        return self.current_index / len(self.cards)

    def summary(self) -> SessionSummary:
        return SessionSummary(
            score=self.score,
            attempts=self.attempts,
            percentage=self.percentage,
            history=list(self.history),
        )

    # ==================== Transitions ====================

    def reveal(self) -> None:
        """
        Cover the prompt and open the answer input (look-cover-check).

        A no-op for modes whose prompt already contains the answer surface
        and when already answering.
        """
        if self.phase is Phase.PRESENTING:
            if not self.strategy.skips_answering:
                self.phase = Phase.ANSWERING
            return
        if self.phase is Phase.ANSWERING:
            return
        self._reject("reveal")

    def submit_answer(self, candidate: Any) -> QuizOutcome:
        """
        Grade an answer for the current card.

        Args:
            candidate: Typed text, chosen option, or bool for study/true-false

        Returns:
            The graded outcome
        """
        if not self.strategy.uses_submit:
            self._reject("submit an answer", "this mode is graded by guessing letters")

        answerable = self.phase is Phase.ANSWERING or (
            self.phase is Phase.PRESENTING and self.strategy.skips_answering
        )
        if not answerable:
            self._reject("submit an answer")

        card = self.cards[self.current_index]
        correct, expected = self.strategy.grade(self, card, candidate)
        return self._grade(card, candidate, expected, correct)

    def guess_letter(self, letter: str) -> HangmanStatus:
        """
        Guess a letter of the current hangman word.

        The card is graded as soon as the round is won or lost.
        """
        if self.mode is not Mode.HANGMAN:
            self._reject("guess a letter", "only hangman sessions take letter guesses")
        if self.phase not in (Phase.PRESENTING, Phase.ANSWERING):
            self._reject("guess a letter")

        status = self.hangman.guess(letter)
        self.phase = Phase.ANSWERING

        if self.hangman.is_over:
            card = self.cards[self.current_index]
            guessed = "".join(sorted(self.hangman.guessed_letters))
            self._grade(card, guessed, card.word, status is HangmanStatus.WON)
        return status

    def _grade(self, card: Card, candidate: Any, expected: Any, correct: bool) -> QuizOutcome:
        self.attempts += 1
        if correct:
            self.score += 1

        if self.store is not None and self.store.has_card(card.id):
            self.store.record_card_shown(card.id, correct)
            if correct:
                self.store.increment_success(card.id)

        outcome = QuizOutcome(card=card, candidate=candidate, expected=expected, correct=correct)
        if self.battle is not None:
            outcome.battle_event = self.battle.apply(correct)

        self.history.append(outcome)
        self.last_outcome = outcome
        self.phase = Phase.GRADED

        if self.strategy.auto_advance:
            self.advance()
        return outcome

    def advance(self) -> Phase:
        """
        Move past a graded card.

        Returns:
            PRESENTING for the next card, or COMPLETE after the last one
            (or once the battle quiz player is defeated)
        """
        if self.phase is not Phase.GRADED:
            self._reject("advance")

        self.phase = Phase.ADVANCING
        self.current_index += 1

        battle_lost = self.battle is not None and self.battle.is_over
        if self.current_index >= len(self.cards) or battle_lost:
            self._clear_prompt()
            self.phase = Phase.COMPLETE
        else:
            self._present()
        return self.phase

    def reset(self) -> None:
        """Reshuffle the cards and start over with zeroed counters."""
        if self.is_empty:
            return
        self.rng.shuffle(self.cards)
        self._start()

    # ==================== Save states ====================

    def snapshot(self) -> Dict[str, Any]:
        """
        Serializable progress of this session.

        A graded card counts as done: restoring resumes at the next card.
        """
        next_index = self.current_index + (1 if self.phase is Phase.GRADED else 0)
        return {
            "mode": self.mode.value,
            "deck_ids": list(self.deck_ids),
            "card_ids": [card.id for card in self.cards],
            "next_index": min(next_index, len(self.cards)),
            "score": self.score,
            "attempts": self.attempts,
            "history": [
                {
                    "card_id": o.card.id,
                    "candidate": o.candidate,
                    "expected": o.expected,
                    "correct": o.correct,
                }
                for o in self.history
            ],
        }

    @classmethod
    def restore(
        cls,
        snapshot: Dict[str, Any],
        cards: Sequence[Card],
        **kwargs: Any
    ) -> "QuizSession":
        """
        Rebuild a session from ``snapshot``.

        Cards deleted since the snapshot was taken are skipped.

        Args:
            snapshot: Output of ``snapshot()``
            cards: Current cards (e.g. ``store.cards``)
            **kwargs: Extra QuizSession arguments (store, rng, ...)
        """
        by_id = {card.id: card for card in cards}
        card_ids = list(snapshot.get("card_ids", []))
        ordered = [by_id[card_id] for card_id in card_ids if card_id in by_id]
        next_index = sum(1 for card_id in card_ids[:snapshot.get("next_index", 0)] if card_id in by_id)

        kwargs.setdefault("deck_ids", snapshot.get("deck_ids"))
        # Saved order is kept even when the caller passes shuffle=True
        kwargs["shuffle"] = False
        session = cls(ordered, Mode(snapshot["mode"]), **kwargs)
        if session.is_empty:
            return session

        session.score = int(snapshot.get("score", 0))
        session.attempts = int(snapshot.get("attempts", 0))
        session.history = [
            QuizOutcome(
                card=by_id[entry["card_id"]],
                candidate=entry.get("candidate"),
                expected=entry.get("expected"),
                correct=bool(entry.get("correct")),
            )
            for entry in snapshot.get("history", [])
            if entry.get("card_id") in by_id
        ]

        # Index within the (possibly filtered) session cards
        done = {card.id for card in ordered[:next_index]}
        session.current_index = sum(1 for card in session.cards if card.id in done)
        if session.current_index >= len(session.cards):
            session._clear_prompt()
            session.phase = Phase.COMPLETE
        else:
            session._present()
        return session
