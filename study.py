"""
flashdeck: terminal study session
---------------------------------

Runs a Test or Spelling quiz over the saved flashcards.
"""

import argparse
import sys

from flashdeck.config import Config, SettingsManager
from flashdeck.quiz import Mode, QuizSession
from flashdeck.services import CardStore, JSONRepository
from flashdeck.utils import setup_logger

PLAYABLE_MODES = {
    "test": Mode.TEST,
    "spelling": Mode.SPELLING,
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Quiz yourself on your flashcards.")
    parser.add_argument("--mode", choices=sorted(PLAYABLE_MODES), default="test")
    parser.add_argument("--deck", help="Deck name (all cards if omitted)")
    parser.add_argument("--store", default=Config.STORE_FILE, help="Path to the flashcard store")
    parser.add_argument("--settings", default=Config.SETTINGS_FILE, help="Path to the settings file")
    return parser.parse_args(argv)


def main(argv=None) -> bool:
    """Main entry point."""
    args = parse_args(argv)
    setup_logger(level=Config.LOG_LEVEL)
    settings = SettingsManager(args.settings)
    
    store = CardStore(JSONRepository(args.store), settings.get("DEFAULT_DECK_NAME"))
    cards = store.cards
    if args.deck:
        deck = next((d for d in store.decks if d.name.casefold() == args.deck.casefold()), None)
        if deck is None:
            print(f"❌ Deck '{args.deck}' not found!")
            return False
        cards = store.cards_for_decks([deck.id])
    
    session = QuizSession(cards, PLAYABLE_MODES[args.mode], store=store, **settings.session_options())
    if session.is_empty:
        print("No cards to study. Add some cards first.")
        return False
    
    print(f"{Config.LABEL} | {args.mode} | {session.total} cards")
    while not session.is_complete:
        card = session.current_card
        print(f"\n[{session.current_index + 1}/{session.total}] {card.definition}")
        outcome = session.submit_answer(input("Word: "))
        print("✓ Correct!" if outcome.correct else f"✗ It was: {card.word}")
        session.advance()
    
    summary = session.summary()
    print(f"\nScore: {summary.score}/{summary.attempts} ({summary.percentage}%)")
    for card in summary.incorrect_cards:
        print(f"  review: {card.word} - {card.definition}")
    return True


if __name__ == "__main__":
    try:
        success = main()
        sys.exit(0 if success else 1)
    except (KeyboardInterrupt, EOFError):
        print("\n[!] Aborted by user.")
        sys.exit(1)
