"""Text parsing utilities for consistent text processing across the application."""

import html
import re
import unicodedata
from typing import Any, Optional


class TextParser:
    """
    Centralized text normalization.
    
    Every text field entering the store passes through here, so word
    comparison, duplicate detection and answer grading agree on what
    "the same text" means.
    """
    
    HTML_TAG_PATTERN = re.compile(r'<[^>]+>')
    WHITESPACE_PATTERN = re.compile(r'\s+')
    
    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """
        Normalize text to NFC form for consistent Unicode handling.
        
        Prevents issues with characters like é being represented as
        either a single codepoint (NFC) or base + combining accent (NFD).
        """
        if not text:
            return ""
        return unicodedata.normalize('NFC', str(text))
    
    @classmethod
    def normalize_field(cls, value: Optional[Any]) -> str:
        """
        Normalize a card field: None becomes "", text is NFC-normalized and trimmed.
        
        Args:
            value: Raw field value
            
        Returns:
            Clean string
        """
        if value is None:
            return ""
        return cls.normalize_unicode(str(value)).strip()
    
    @classmethod
    def answer_key(cls, text: Optional[str]) -> str:
        """Comparison key for answers and words: trimmed and case-folded."""
        return cls.normalize_field(text).casefold()
    
    @classmethod
    def answers_match(cls, candidate: Optional[str], expected: Optional[str]) -> bool:
        """Case-insensitive, whitespace-trimmed equality."""
        return cls.answer_key(candidate) == cls.answer_key(expected)
    
    @classmethod
    def clean_for_tts(cls, text: str) -> str:
        """
        Clean text for TTS processing.
        
        Removes HTML and normalizes whitespace.
        
        Args:
            text: Raw text
            
        Returns:
            Cleaned text ready for TTS
        """
        if not text:
            return ""
        
        text = html.unescape(str(text))
        text = cls.HTML_TAG_PATTERN.sub('', text)
        text = cls.WHITESPACE_PATTERN.sub(' ', text).strip()
        return cls.normalize_unicode(text)
