"""
Duplicate resolution - field-level comparison of an existing card with
incoming data, and the actions a caller can take on the result.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from ..models.card import COMPARABLE_FIELDS, CandidateFields, Card
from ..utils.parsing import TextParser


class ResolutionAction(Enum):
    """What to do with a candidate whose word already exists."""
    KEEP_EXISTING = "keep_existing"
    REPLACE_WITH_NEW = "replace_with_new"
    MERGE_ADDITIONAL_FIELDS = "merge_additional_fields"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Comparison:
    """Field-by-field comparison of an existing card with incoming data."""
    
    existing_filled_fields: int
    new_filled_fields: int
    # field name -> (existing value, incoming value)
    field_differences: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    new_fields_count: int = 0
    
    @property
    def has_more_information(self) -> bool:
        return self.new_fields_count > 0
    
    @property
    def is_exact_match(self) -> bool:
        return not self.field_differences


@dataclass(frozen=True)
class DuplicateDetected:
    """
    Returned by ``CardStore.add_card`` instead of inserting.
    
    Not an error: the caller picks a ResolutionAction and hands it back to
    ``CardStore.apply_resolution``.
    """
    
    existing: Card
    incoming: CandidateFields
    comparison: Comparison


def _value(source: Union[Card, CandidateFields], name: str) -> str:
    return TextParser.normalize_field(getattr(source, name, ""))


def compare_cards(existing: Card, incoming: CandidateFields) -> Comparison:
    """
    Compare the shared field set of an existing card and incoming data.
    
    A field is filled when its trimmed value is non-empty. A difference is
    recorded for every field whose trimmed values differ, including when
    one side is empty.
    
    Args:
        existing: Card already in the store
        incoming: Proposed fields
        
    Returns:
        Comparison summary
    """
    existing_filled = 0
    new_filled = 0
    new_fields = 0
    differences: Dict[str, Tuple[str, str]] = {}
    
    for name in COMPARABLE_FIELDS:
        old = _value(existing, name)
        new = _value(incoming, name)
        
        if old:
            existing_filled += 1
        if new:
            new_filled += 1
        if not old and new:
            new_fields += 1
        if old != new:
            differences[name] = (old, new)
    
    return Comparison(
        existing_filled_fields=existing_filled,
        new_filled_fields=new_filled,
        field_differences=differences,
        new_fields_count=new_fields,
    )


def resolve_duplicate(
    existing: Card,
    incoming: CandidateFields,
    action: ResolutionAction
) -> Optional[Card]:
    """
    Apply a resolution action without touching any store.
    
    Args:
        existing: Card already in the store
        incoming: Proposed fields
        action: Chosen resolution
        
    Returns:
        The resulting card, or None for CANCEL (discard the candidate)
    """
    if action is ResolutionAction.CANCEL:
        return None
    
    if action is ResolutionAction.KEEP_EXISTING:
        return existing
    
    if action is ResolutionAction.REPLACE_WITH_NEW:
        updates = {name: _value(incoming, name) for name in COMPARABLE_FIELDS}
        updates["word"] = incoming.word or existing.word
        updates["image_filename"] = incoming.image_filename
        updates["deck_ids"] = incoming.deck_ids or existing.deck_ids
        # id and mastery counters stay with the existing card
        return replace(existing, **updates)
    
    if action is ResolutionAction.MERGE_ADDITIONAL_FIELDS:
        updates = {}
        for name in COMPARABLE_FIELDS:
            if not _value(existing, name) and _value(incoming, name):
                updates[name] = _value(incoming, name)
        if not existing.image_filename and incoming.image_filename:
            updates["image_filename"] = incoming.image_filename
        updates["deck_ids"] = existing.deck_ids | incoming.deck_ids
        return replace(existing, **updates)
    
    raise ValueError(f"Unknown resolution action: {action!r}")
