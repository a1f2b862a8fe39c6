"""
Card Store - canonical collection of flashcards and decks.

Provides CRUD, duplicate detection and deck-hierarchy queries. Every
mutation persists the full snapshot through the repository right after
the in-memory change.
"""

from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..config import Config
from ..errors import NotFoundError, ValidationError
from ..models.card import TEXT_FIELDS, CandidateFields, Card, Deck
from ..utils.logger import setup_logger
from ..utils.parsing import TextParser
from .duplicates import (
    DuplicateDetected,
    ResolutionAction,
    compare_cards,
    resolve_duplicate,
)
from .repository import BaseRepository, MemoryRepository

logger = setup_logger(__name__)

AddResult = Union[Card, DuplicateDetected]


class CardStore:
    """
    Store for decks and cards.
    
    Not safe for concurrent mutation; callers serialize access (in practice
    everything runs on the UI thread).
    
    Usage:
        store = CardStore(JSONRepository())
        result = store.add_card("huis", "house")
        if isinstance(result, DuplicateDetected):
            store.apply_resolution(result, ResolutionAction.MERGE_ADDITIONAL_FIELDS)
    """
    
    def __init__(
        self,
        repository: Optional[BaseRepository] = None,
        default_deck_name: Optional[str] = None
    ):
        """
        Initialize the store and load the last saved snapshot.
        
        Args:
            repository: Snapshot storage (defaults to an in-memory repository)
            default_deck_name: Name of the fallback deck (Config.DEFAULT_DECK_NAME)
        """
        self.repository = repository or MemoryRepository()
        self.default_deck_name = default_deck_name or Config.DEFAULT_DECK_NAME
        
        self._decks: List[Deck] = []
        self._cards: List[Card] = []
        self._change_callbacks: List[Callable[[], None]] = []
        self._default_deck_id: str = ""
        
        self.load()
    
    # ==================== Persistence ====================
    
    def load(self) -> None:
        """Replace in-memory state with the repository snapshot."""
        snapshot = self.repository.load()
        self._decks = [Deck.from_dict(d) for d in snapshot.get("decks", [])]
        self._cards = [Card.from_dict(c) for c in snapshot.get("cards", [])]
        
        default = next((d for d in self._decks if d.name == self.default_deck_name), None)
        created_default = default is None
        if default is None:
            default = Deck(name=self.default_deck_name, is_editable=False)
            self._decks.insert(0, default)
        default.is_editable = False
        default.parent_id = None
        self._default_deck_id = default.id
        
        # Drop references to decks that no longer exist
        known = {d.id for d in self._decks}
        self._cards = [
            replace(card, deck_ids=self._membership(card.deck_ids & known))
            for card in self._cards
        ]
        self._refresh_associations()
        
        logger.debug("Loaded %d decks and %d cards", len(self._decks), len(self._cards))
        if created_default:
            self.save()
    
    def snapshot(self) -> Dict[str, Any]:
        """Serializable snapshot of all decks and cards."""
        return {
            "decks": [d.to_dict() for d in self._decks],
            "cards": [c.to_dict() for c in self._cards],
        }
    
    def save(self) -> bool:
        """Persist the current snapshot. Failures are logged, not raised."""
        success = self.repository.save(self.snapshot())
        if not success:
            logger.warning("Store snapshot was not persisted")
        return success
    
    def on_change(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked after every mutation."""
        self._change_callbacks.append(callback)
    
    def _commit(self) -> None:
        """Rebuild derived deck contents, persist, notify observers."""
        self._refresh_associations()
        self.save()
        for callback in self._change_callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Change callback %r failed", callback)
    
    def _refresh_associations(self) -> None:
        by_id = {d.id: d for d in self._decks}
        for deck in self._decks:
            deck.cards = []
        for card in self._cards:
            for deck_id in card.deck_ids:
                deck = by_id.get(deck_id)
                if deck is not None:
                    deck.cards.append(card)
    
    def _membership(self, deck_ids: Iterable[str]) -> frozenset:
        """A card always belongs to at least one deck."""
        ids = frozenset(deck_ids)
        return ids if ids else frozenset({self._default_deck_id})
    
    # ==================== Decks ====================
    
    @property
    def default_deck(self) -> Deck:
        return self.get_deck(self._default_deck_id)
    
    @property
    def decks(self) -> List[Deck]:
        return list(self._decks)
    
    def get_deck(self, deck_id: str) -> Deck:
        """Get a deck by id, raising NotFoundError if it does not exist."""
        for deck in self._decks:
            if deck.id == deck_id:
                return deck
        raise NotFoundError(f"Deck {deck_id!r} not found")
    
    def has_deck(self, deck_id: str) -> bool:
        return any(d.id == deck_id for d in self._decks)
    
    def create_deck(self, name: str, parent_id: Optional[str] = None) -> Deck:
        """
        Create a deck.
        
        Args:
            name: Deck name (trimmed, must not be empty)
            parent_id: Optional top-level deck to nest under
            
        Returns:
            The new deck
            
        Raises:
            ValidationError: empty name, or parent is itself a sub-deck
            NotFoundError: parent does not exist
        """
        clean_name = TextParser.normalize_field(name)
        if not clean_name:
            raise ValidationError("Deck name must not be empty")
        
        if parent_id is not None:
            parent = self.get_deck(parent_id)
            if parent.is_sub_deck:
                raise ValidationError("Sub-decks cannot have sub-decks of their own")
        
        deck = Deck(name=clean_name, parent_id=parent_id)
        self._decks.append(deck)
        logger.debug("Created deck %r", clean_name)
        self._commit()
        return deck
    
    def rename_deck(self, deck_id: str, name: str) -> Deck:
        """Rename an editable deck."""
        deck = self.get_deck(deck_id)
        clean_name = TextParser.normalize_field(name)
        if not clean_name:
            raise ValidationError("Deck name must not be empty")
        if not deck.is_editable:
            raise ValidationError(f"Deck {deck.name!r} cannot be renamed")
        
        deck.name = clean_name
        self._commit()
        return deck
    
    def delete_deck(self, deck_id: str) -> None:
        """
        Delete a deck.
        
        Cards lose membership of the deck and fall back to the default deck
        when they belong to no other. Sub-decks of a deleted deck become
        top-level decks.
        
        Raises:
            ValidationError: the deck is the default deck (nothing changes)
            NotFoundError: the deck does not exist
        """
        deck = self.get_deck(deck_id)
        if deck.id == self._default_deck_id or not deck.is_editable:
            raise ValidationError(f"Deck {deck.name!r} cannot be deleted")
        
        self._decks = [d for d in self._decks if d.id != deck.id]
        for other in self._decks:
            if other.parent_id == deck.id:
                other.parent_id = None
        self._cards = [
            replace(card, deck_ids=self._membership(card.deck_ids - {deck.id}))
            if deck.id in card.deck_ids else card
            for card in self._cards
        ]
        logger.debug("Deleted deck %r", deck.name)
        self._commit()
    
    def get_top_level_decks(self) -> List[Deck]:
        """Decks without a parent, in creation order."""
        return [d for d in self._decks if d.parent_id is None]
    
    def get_sub_decks(self, deck_id: str) -> List[Deck]:
        """Decks whose parent is ``deck_id``, in creation order."""
        return [d for d in self._decks if d.parent_id == deck_id]
    
    def get_selectable_decks(self, include_default: bool = False) -> List[Deck]:
        """
        Decks for assignment pickers: each top-level deck followed by its sub-decks.
        
        The default deck is left out unless ``include_default`` is set, since
        cards fall back to it automatically.
        """
        result: List[Deck] = []
        for deck in self.get_top_level_decks():
            if deck.id == self._default_deck_id and not include_default:
                continue
            result.append(deck)
            result.extend(self.get_sub_decks(deck.id))
        return result
    
    # ==================== Cards ====================
    
    @property
    def cards(self) -> List[Card]:
        return list(self._cards)
    
    @property
    def count(self) -> int:
        return len(self._cards)
    
    def get_card(self, card_id: str) -> Card:
        """Get a card by id, raising NotFoundError if it does not exist."""
        return self._cards[self._card_index(card_id)]
    
    def has_card(self, card_id: str) -> bool:
        return any(c.id == card_id for c in self._cards)
    
    def _card_index(self, card_id: str) -> int:
        for index, card in enumerate(self._cards):
            if card.id == card_id:
                return index
        raise NotFoundError(f"Card {card_id!r} not found")
    
    def _resolve_deck_ids(self, deck_ids: Optional[Iterable[str]]) -> frozenset:
        ids = frozenset(deck_ids or ())
        for deck_id in ids:
            if not self.has_deck(deck_id):
                raise NotFoundError(f"Deck {deck_id!r} not found")
        return self._membership(ids)
    
    @staticmethod
    def _validate_required(word: str, definition: str) -> None:
        if not word:
            raise ValidationError("Word must not be empty")
        if not definition:
            raise ValidationError("Definition must not be empty")
    
    def find_duplicate(self, word: str, deck_ids: Iterable[str]) -> Optional[Card]:
        """
        Find a card with the same word (case-insensitive) in any of ``deck_ids``.
        
        Args:
            word: Word to look up
            deck_ids: Decks the new card would join
            
        Returns:
            First matching card in store order, or None
        """
        key = TextParser.answer_key(word)
        targets = frozenset(deck_ids)
        for card in self._cards:
            if TextParser.answer_key(card.word) == key and card.deck_ids & targets:
                return card
        return None
    
    def add_card(
        self,
        word: str,
        definition: str,
        example: str = "",
        deck_ids: Optional[Iterable[str]] = None,
        **attrs: Any
    ) -> AddResult:
        """
        Add a card, or report a duplicate without inserting anything.
        
        Args:
            word: Prompt text
            definition: Answer text
            example: Optional usage sentence
            deck_ids: Decks to join (default deck if empty)
            **attrs: article, plural, past_tense, future_tense,
                     past_participle, image_filename
        
        Returns:
            The new Card, or DuplicateDetected when the word already exists
            in one of the target decks
            
        Raises:
            ValidationError: empty word/definition or unknown attribute
            NotFoundError: unknown deck id
        """
        unknown = set(attrs) - set(TEXT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown card fields: {', '.join(sorted(unknown))}")
        
        candidate = CandidateFields.build(word, definition, deck_ids, example=example, **attrs)
        return self.add_candidate(candidate)
    
    def validate_candidate(self, candidate: CandidateFields) -> None:
        """Raise ValidationError if ``candidate`` lacks a word or definition."""
        self._validate_required(candidate.word, candidate.definition)
    
    def add_candidate(self, candidate: CandidateFields) -> AddResult:
        """Add pre-built candidate fields (see ``add_card``)."""
        self.validate_candidate(candidate)
        candidate = candidate.with_deck_ids(self._resolve_deck_ids(candidate.deck_ids))
        
        existing = self.find_duplicate(candidate.word, candidate.deck_ids)
        if existing is not None:
            logger.debug("Duplicate word %r detected", candidate.word)
            return DuplicateDetected(
                existing=existing,
                incoming=candidate,
                comparison=compare_cards(existing, candidate),
            )
        
        card = candidate.to_card()
        self._cards.append(card)
        logger.debug("Added card %r", card.word)
        self._commit()
        return card
    
    def add_cards(
        self,
        entries: Sequence[Dict[str, Any]],
        deck_ids: Optional[Iterable[str]] = None
    ) -> List[AddResult]:
        """
        Add several cards to the same decks.
        
        Each entry is a dict of ``add_card`` keyword arguments. Duplicates are
        reported per entry, the rest are inserted.
        """
        shared = list(deck_ids or ())
        results = []
        for entry in entries:
            data = dict(entry)
            data.setdefault("deck_ids", shared)
            results.append(self.add_card(**data))
        return results
    
    def apply_resolution(self, duplicate: DuplicateDetected, action: ResolutionAction) -> Optional[Card]:
        """
        Resolve a reported duplicate and persist the outcome.
        
        Returns:
            The resulting card, or None when the candidate was cancelled
        """
        current = self.get_card(duplicate.existing.id)
        resolved = resolve_duplicate(current, duplicate.incoming, action)
        
        if resolved is None or resolved is current:
            return resolved
        
        resolved = replace(resolved, deck_ids=self._resolve_deck_ids(resolved.deck_ids))
        self._cards[self._card_index(current.id)] = resolved
        logger.debug("Resolved duplicate %r with %s", resolved.word, action.value)
        self._commit()
        return resolved
    
    def update_card(self, card_id: str, deck_ids: Optional[Iterable[str]] = None, **fields: Any) -> Card:
        """
        Replace the given fields of a card in place.
        
        Identity and mastery counters are never changed here.
        
        Raises:
            NotFoundError: unknown card or deck id
            ValidationError: unknown field, or word/definition left empty
        """
        index = self._card_index(card_id)
        unknown = set(fields) - set(TEXT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown card fields: {', '.join(sorted(unknown))}")
        
        updates: Dict[str, Any] = {
            name: TextParser.normalize_field(value) for name, value in fields.items()
        }
        if deck_ids is not None:
            updates["deck_ids"] = self._resolve_deck_ids(deck_ids)
        
        updated = replace(self._cards[index], **updates)
        self._validate_required(updated.word, updated.definition)
        
        self._cards[index] = updated
        self._commit()
        return updated
    
    def delete_card(self, card_id: str) -> None:
        """Remove a card from the store."""
        index = self._card_index(card_id)
        removed = self._cards.pop(index)
        logger.debug("Deleted card %r", removed.word)
        self._commit()
    
    def cards_for_decks(self, deck_ids: Iterable[str], include_sub_decks: bool = True) -> List[Card]:
        """
        Cards belonging to any of the given decks, in store order, without repeats.
        
        Args:
            deck_ids: Selected decks
            include_sub_decks: Also include cards of the selected decks' sub-decks
        """
        selected = set(deck_ids)
        for deck_id in list(selected):
            self.get_deck(deck_id)
            if include_sub_decks:
                selected.update(d.id for d in self.get_sub_decks(deck_id))
        return [card for card in self._cards if card.deck_ids & selected]
    
    def search(self, query: str) -> List[Card]:
        """Cards whose word or definition contains ``query`` (case-insensitive)."""
        key = TextParser.answer_key(query)
        if not key:
            return []
        return [
            card for card in self._cards
            if key in TextParser.answer_key(card.word) or key in TextParser.answer_key(card.definition)
        ]
    
    # ==================== Mastery ====================
    
    def increment_success(self, card_id: str) -> Card:
        """Count one more correct completion of a card."""
        index = self._card_index(card_id)
        card = self._cards[index]
        self._cards[index] = replace(card, success_count=card.success_count + 1)
        self._commit()
        return self._cards[index]
    
    def record_card_shown(self, card_id: str, correct: bool) -> Card:
        """Record that a card was shown in a quiz and whether it was answered correctly."""
        index = self._card_index(card_id)
        card = self._cards[index]
        self._cards[index] = replace(
            card,
            times_shown=card.times_shown + 1,
            times_correct=card.times_correct + (1 if correct else 0),
        )
        self._commit()
        return self._cards[index]
    
    def get_statistics(self) -> Dict[str, Any]:
        """
        Get store statistics.
        
        Returns:
            Dictionary with stats
        """
        total = len(self._cards)
        percentages = [c.learning_percentage for c in self._cards]
        return {
            "total_cards": total,
            "total_decks": len(self._decks),
            "mastered_cards": sum(1 for p in percentages if p == 100),
            "average_learning_percentage": round(sum(percentages) / total) if total else 0,
        }
    
    def import_statistics(
        self,
        card_id: str,
        success_count: int = 0,
        times_shown: int = 0,
        times_correct: int = 0
    ) -> Card:
        """Overwrite mastery counters with values carried over from an export."""
        index = self._card_index(card_id)
        self._cards[index] = replace(
            self._cards[index],
            success_count=max(0, int(success_count)),
            times_shown=max(0, int(times_shown)),
            times_correct=max(0, int(times_correct)),
        )
        self._commit()
        return self._cards[index]
