"""Hangman round: letter guessing for a single word."""

from enum import Enum
from typing import Optional, Set

from ..config import Config
from ..errors import ValidationError
from ..utils.parsing import TextParser


class HangmanStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


class HangmanRound:
    """
    Guessing state for one word.
    
    Letters are compared case-insensitively. Characters that are not
    letters (spaces, hyphens, apostrophes) are shown from the start and
    never need to be guessed.
    """
    
    def __init__(self, word: str, max_attempts: Optional[int] = None):
        self.word = TextParser.normalize_field(word).lower()
        if not self.word:
            raise ValidationError("Hangman needs a non-empty word")
        
        self.max_attempts = max_attempts if max_attempts is not None else Config.HANGMAN_ATTEMPTS
        self.remaining_attempts = self.max_attempts
        self.guessed_letters: Set[str] = set()
        self.status = HangmanStatus.IN_PROGRESS
    
    @property
    def required_letters(self) -> Set[str]:
        return {ch for ch in self.word if ch.isalpha()}
    
    @property
    def wrong_guesses(self) -> int:
        return self.max_attempts - self.remaining_attempts
    
    @property
    def is_over(self) -> bool:
        return self.status is not HangmanStatus.IN_PROGRESS
    
    @property
    def masked_word(self) -> str:
        """The word with unguessed letters as underscores, space separated."""
        return " ".join(
            ch if (not ch.isalpha() or ch in self.guessed_letters) else "_"
            for ch in self.word
        )
    
    def guess(self, letter: str) -> HangmanStatus:
        """
        Guess one letter.
        
        Repeated guesses and guesses after the round is over change nothing.
        
        Args:
            letter: A single letter
            
        Returns:
            Status after the guess
        """
        if not letter or len(letter) != 1 or not letter.isalpha():
            raise ValidationError("Guess exactly one letter")
        
        letter = letter.lower()
        if self.is_over or letter in self.guessed_letters:
            return self.status
        
        self.guessed_letters.add(letter)
        
        if letter not in self.word:
            self.remaining_attempts -= 1
            if self.remaining_attempts <= 0:
                self.status = HangmanStatus.LOST
        elif self.required_letters <= self.guessed_letters:
            self.status = HangmanStatus.WON
        
        return self.status
