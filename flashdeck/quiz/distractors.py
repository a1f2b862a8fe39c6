"""Wrong-answer generation for multiple-choice and true/false questions."""

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models.card import Card
from ..utils.parsing import TextParser

_rng = random.Random()


@dataclass(frozen=True)
class TrueFalseQuestion:
    """A word shown with a definition that may or may not be its own."""
    word: str
    definition: str
    is_correct: bool
    card_id: str


def generate_options(
    correct: str,
    pool: Sequence[Card],
    count: int,
    rng: Optional[random.Random] = None
) -> List[str]:
    """
    Build a shuffled slate of answer options.
    
    The slate always contains ``correct``. Distractors are definitions of
    uniformly sampled pool cards that differ from ``correct`` and from each
    other. When the pool holds fewer distinct definitions than needed the
    slate is simply shorter (possibly just ``correct``).
    
    Args:
        correct: The right answer
        pool: Cards to draw distractors from
        count: Desired number of options, including the correct one
        rng: Random source (injected for deterministic tests)
        
    Returns:
        Options in random order
    """
    rng = rng or _rng
    options = [correct]
    seen = {correct}
    
    # Sampling stops once every distinct definition has been drawn
    remaining = {c.definition for c in pool if c.definition and c.definition != correct}
    while len(options) < count and remaining:
        definition = rng.choice(pool).definition
        if definition in remaining and definition not in seen:
            options.append(definition)
            seen.add(definition)
            remaining.discard(definition)
    
    rng.shuffle(options)
    return options


def make_true_false_question(
    card: Card,
    pool: Sequence[Card],
    rng: Optional[random.Random] = None
) -> TrueFalseQuestion:
    """
    Pair a card's word with either its own definition or another card's.
    
    Both cases are equally likely. Without another distinct definition in
    the pool the card's own definition is used.
    """
    rng = rng or _rng
    show_correct = rng.random() < 0.5
    
    if not show_correct:
        others = [
            c.definition for c in pool
            if c.id != card.id and c.definition
            and not TextParser.answers_match(c.definition, card.definition)
        ]
        if others:
            return TrueFalseQuestion(card.word, rng.choice(others), False, card.id)
    
    return TrueFalseQuestion(card.word, card.definition, True, card.id)
