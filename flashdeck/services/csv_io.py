"""
CSV export/import of cards.

Columns match the mobile app's export screen; ``Decks`` holds deck names
separated by ``;``.
"""

import io
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from ..errors import FlashDeckError, ValidationError
from ..models.card import CandidateFields, Card
from ..utils.logger import setup_logger
from ..utils.parsing import TextParser
from .card_store import AddResult, CardStore
from .duplicates import DuplicateDetected

logger = setup_logger(__name__)

DECK_SEPARATOR = ";"

# CSV column -> card attribute
COLUMN_MAP = {
    "Word": "word",
    "Definition": "definition",
    "Example": "example",
    "Article": "article",
    "Plural": "plural",
    "Past Tense": "past_tense",
    "Future Tense": "future_tense",
    "Past Participle": "past_participle",
    "Decks": "deck_ids",
    "Success Count": "success_count",
    "Times Shown": "times_shown",
    "Times Correct": "times_correct",
}
CSV_COLUMNS = list(COLUMN_MAP)
REQUIRED_COLUMNS = ("Word", "Definition")
COUNTER_COLUMNS = ("Success Count", "Times Shown", "Times Correct")


@dataclass
class ImportResult:
    """Outcome of a CSV import."""
    imported: List[Card] = field(default_factory=list)
    duplicates: List[DuplicateDetected] = field(default_factory=list)
    # (1-based CSV line number, message)
    errors: List[Tuple[int, str]] = field(default_factory=list)


def export_cards_to_csv(
    store: CardStore,
    deck_ids: Optional[Iterable[str]] = None,
    sep: str = ","
) -> str:
    """
    Export cards as CSV text.
    
    Args:
        store: Source store
        deck_ids: Only export cards of these decks (all cards if None)
        sep: Column separator
        
    Returns:
        CSV content with a header row
    """
    cards = store.cards if deck_ids is None else store.cards_for_decks(deck_ids)
    names = {deck.id: deck.name for deck in store.decks}
    deck_order = {deck.id: i for i, deck in enumerate(store.decks)}
    
    rows = []
    for card in cards:
        row = {}
        for column, attribute in COLUMN_MAP.items():
            if attribute == "deck_ids":
                ordered = sorted(card.deck_ids, key=lambda d: deck_order.get(d, len(deck_order)))
                row[column] = DECK_SEPARATOR.join(names[d] for d in ordered if d in names)
            else:
                row[column] = getattr(card, attribute)
        rows.append(row)
    
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return df.to_csv(index=False, sep=sep)


def _parse_counter(value: str) -> int:
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError):
        return 0


def _split_deck_names(store: CardStore, names_field: str) -> Tuple[List[str], List[str]]:
    """
    Map ``;``-separated deck names to ids.

    Returns:
        (ids of existing decks, names of decks that do not exist yet)
    """
    by_name = {deck.name.casefold(): deck.id for deck in store.decks}
    known: List[str] = []
    missing: List[str] = []
    for raw_name in names_field.split(DECK_SEPARATOR):
        name = TextParser.normalize_field(raw_name)
        if not name:
            continue
        key = name.casefold()
        if key in by_name:
            if by_name[key] not in known:
                known.append(by_name[key])
        elif key not in {m.casefold() for m in missing}:
            missing.append(name)
    return known, missing


def _import_row(store: CardStore, values: Dict[str, str], names_field: str) -> AddResult:
    """
    Add one CSV row.

    Decks named in the row are created only once the row is known to be
    insertable, so a rejected row or a duplicate leaves the decks as they were.
    """
    known, missing = _split_deck_names(store, names_field)
    candidate = CandidateFields.build(deck_ids=known, **values)
    store.validate_candidate(candidate)

    if missing and store.find_duplicate(candidate.word, known) is None:
        created = [store.create_deck(name).id for name in missing]
        candidate = candidate.with_deck_ids(known + created)
    return store.add_candidate(candidate)


def import_cards_from_csv(store: CardStore, text: str, sep: str = ",") -> ImportResult:
    """
    Import cards from CSV text.
    
    Rows that fail validation are reported in ``errors``; words that already
    exist are returned in ``duplicates`` for the caller to resolve.
    
    Args:
        store: Target store
        text: CSV content with a header row
        sep: Column separator
        
    Returns:
        ImportResult
        
    Raises:
        ValidationError: the header lacks the Word or Definition column
    """
    result = ImportResult()
    if not text or not text.strip():
        return result
    
    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=sep,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError:
        return result
    
    df.columns = df.columns.str.strip()
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValidationError(f"CSV is missing required columns: {', '.join(missing)}")
    
    for position, (_, row) in enumerate(df.iterrows()):
        line_number = position + 2
        values = {
            attribute: row.get(column, "")
            for column, attribute in COLUMN_MAP.items()
            if column not in COUNTER_COLUMNS and attribute != "deck_ids"
        }
        try:
            added = _import_row(store, values, str(row.get("Decks", "")))
        except FlashDeckError as e:
            result.errors.append((line_number, str(e)))
            continue
        
        if isinstance(added, DuplicateDetected):
            result.duplicates.append(added)
            continue
        
        counters = [_parse_counter(row.get(column, "")) for column in COUNTER_COLUMNS]
        if any(counters):
            added = store.import_statistics(added.id, *counters)
        result.imported.append(added)
    
    logger.info(
        "CSV import: %d imported, %d duplicates, %d errors",
        len(result.imported), len(result.duplicates), len(result.errors)
    )
    return result
