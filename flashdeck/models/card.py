"""Data models for flashdeck."""

import uuid
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from ..utils.parsing import TextParser


# Fields compared and merged during duplicate resolution, in display order
COMPARABLE_FIELDS = (
    "definition",
    "example",
    "article",
    "plural",
    "past_tense",
    "future_tense",
    "past_participle",
)

# Free-text fields a caller may set on a card
TEXT_FIELDS = ("word",) + COMPARABLE_FIELDS + ("image_filename",)


def new_id() -> str:
    """Generate a stable unique identifier."""
    return uuid.uuid4().hex


@dataclass
class Card:
    """One flashcard: prompt word, answer definition, grammar and mastery counters."""
    
    # Основні дані
    word: str
    definition: str
    example: str = ""
    
    # Grammar metadata
    article: str = ""
    plural: str = ""
    past_tense: str = ""
    future_tense: str = ""
    past_participle: str = ""
    
    # Opaque media reference (file name under the media dir)
    image_filename: str = ""
    
    deck_ids: FrozenSet[str] = frozenset()
    
    # Mastery
    success_count: int = 0
    times_shown: int = 0
    times_correct: int = 0
    
    id: str = field(default_factory=new_id)
    
    @property
    def learning_percentage(self) -> int:
        """
        Mastery as a percentage in [0, 100].
        
        Successes are measured against the number of times the card was
        shown; a card with more successes than recorded showings counts
        as fully learned.
        """
        denominator = max(self.times_shown, self.success_count)
        if denominator <= 0:
            return 0
        return min(100, round(100 * self.success_count / denominator))
    
    def filled_fields(self) -> List[str]:
        """Names of comparable fields with non-empty values."""
        return [name for name in COMPARABLE_FIELDS if TextParser.normalize_field(getattr(self, name))]
    
    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the persisted snapshot."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["deck_ids"] = sorted(self.deck_ids)
        return data
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """Build a card from a snapshot entry; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["deck_ids"] = frozenset(values.get("deck_ids") or ())
        for name in TEXT_FIELDS:
            if name in values:
                values[name] = TextParser.normalize_field(values[name])
        for name in ("success_count", "times_shown", "times_correct"):
            values[name] = int(values.get(name) or 0)
        if not values.get("id"):
            values.pop("id", None)
        return cls(**values)


@dataclass
class Deck:
    """Named grouping of cards; top-level or one level of sub-deck."""
    
    name: str
    parent_id: Optional[str] = None
    is_editable: bool = True
    id: str = field(default_factory=new_id)
    
    # Derived by the store after every mutation, never persisted
    cards: List[Card] = field(default_factory=list, compare=False, repr=False)
    
    @property
    def is_sub_deck(self) -> bool:
        return self.parent_id is not None
    
    @property
    def is_system_deck(self) -> bool:
        return not self.is_editable
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "is_editable": self.is_editable,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deck":
        deck = cls(
            name=TextParser.normalize_field(data.get("name")),
            parent_id=data.get("parent_id") or None,
            is_editable=bool(data.get("is_editable", True)),
        )
        if data.get("id"):
            deck.id = data["id"]
        return deck


@dataclass(frozen=True)
class CandidateFields:
    """
    Proposed data for a new card, already trimmed.
    
    Used both for inserting and as the "incoming" side of a duplicate
    comparison.
    """
    
    word: str
    definition: str
    example: str = ""
    article: str = ""
    plural: str = ""
    past_tense: str = ""
    future_tense: str = ""
    past_participle: str = ""
    image_filename: str = ""
    deck_ids: FrozenSet[str] = frozenset()
    
    @classmethod
    def build(cls, word: Any, definition: Any, deck_ids: Optional[Iterable[str]] = None, **attrs: Any) -> "CandidateFields":
        """Normalize (trim) every text field; unknown attributes raise TypeError."""
        text = {name: TextParser.normalize_field(value) for name, value in attrs.items()}
        return cls(
            word=TextParser.normalize_field(word),
            definition=TextParser.normalize_field(definition),
            deck_ids=frozenset(deck_ids or ()),
            **text,
        )
    
    def with_deck_ids(self, deck_ids: Iterable[str]) -> "CandidateFields":
        return replace(self, deck_ids=frozenset(deck_ids))
    
    def to_card(self) -> Card:
        """Create a fresh card (new id, zeroed counters) from these fields."""
        return Card(
            word=self.word,
            definition=self.definition,
            example=self.example,
            article=self.article,
            plural=self.plural,
            past_tense=self.past_tense,
            future_tense=self.future_tense,
            past_participle=self.past_participle,
            image_filename=self.image_filename,
            deck_ids=self.deck_ids,
        )
