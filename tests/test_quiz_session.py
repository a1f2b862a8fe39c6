import random

import pytest

from flashdeck.config import SettingsManager
from flashdeck.errors import InvalidStateTransition, ValidationError
from flashdeck.models import Card
from flashdeck.quiz import HangmanStatus, Mode, Phase, QuizSession
from flashdeck.services import DuplicateDetected


def test_empty_session_is_not_complete():
    session = QuizSession([], Mode.TEST)
    assert session.phase is Phase.EMPTY
    assert session.is_empty
    assert not session.is_complete
    assert session.current_card is None
    assert session.percentage == 0

    with pytest.raises(InvalidStateTransition):
        session.submit_answer("huis")
    with pytest.raises(InvalidStateTransition):
        session.advance()
    session.reset()
    assert session.phase is Phase.EMPTY


@pytest.mark.parametrize("mode", [Mode.TEST, Mode.SPELLING])
@pytest.mark.parametrize("size", [1, 2, 5])
def test_full_cycle_completes(dutch_cards, rng, mode, size):
    cards = dutch_cards[:size]
    session = QuizSession(cards, mode, rng=rng)
    for _ in cards:
        session.submit_answer(session.current_card.word)
        session.advance()
    assert session.phase is Phase.COMPLETE
    assert session.attempts == size
    assert session.score == size
    assert session.percentage == 100
    assert session.progress == 1.0


def test_recall_grading_is_trimmed_and_case_insensitive(dutch_cards):
    session = QuizSession(dutch_cards, Mode.TEST)
    outcome = session.submit_answer("  HUIS ")
    assert outcome.correct
    assert outcome.expected == "huis"
    session.advance()
    assert not session.submit_answer("hond").correct


def test_percentage_rounds(dutch_cards):
    session = QuizSession(dutch_cards[:3], Mode.SPELLING)
    for answer in ["huis", "kat", "wrong"]:
        session.submit_answer(answer)
        session.advance()
    assert (session.score, session.attempts) == (2, 3)
    assert session.percentage == 67
    summary = session.summary()
    assert summary.percentage == 67
    assert [c.word for c in summary.incorrect_cards] == ["boek"]


def test_submit_twice_is_rejected_without_change(dutch_cards):
    session = QuizSession(dutch_cards, Mode.TEST)
    session.submit_answer("huis")
    with pytest.raises(InvalidStateTransition):
        session.submit_answer("huis")
    assert session.attempts == 1
    assert session.phase is Phase.GRADED


def test_advance_before_grading_is_rejected(dutch_cards):
    session = QuizSession(dutch_cards, Mode.TEST)
    with pytest.raises(InvalidStateTransition) as excinfo:
        session.advance()
    assert excinfo.value.phase is Phase.PRESENTING
    assert session.current_index == 0


def test_look_cover_check_needs_reveal(dutch_cards):
    session = QuizSession(dutch_cards, Mode.LOOK_COVER_CHECK)
    with pytest.raises(InvalidStateTransition):
        session.submit_answer("huis")
    assert session.phase is Phase.PRESENTING

    session.reveal()
    assert session.phase is Phase.ANSWERING
    session.reveal()
    assert session.phase is Phase.ANSWERING
    assert session.submit_answer("huis").correct

    with pytest.raises(InvalidStateTransition):
        session.reveal()


def test_reveal_is_noop_for_modes_that_answer_from_the_prompt(dutch_cards):
    session = QuizSession(dutch_cards, Mode.SPELLING)
    session.reveal()
    assert session.phase is Phase.PRESENTING


def test_study_swipes_grade_and_advance(dutch_cards):
    session = QuizSession(dutch_cards[:2], Mode.STUDY)
    outcome = session.submit_answer(True)
    assert outcome.correct
    assert session.phase is Phase.PRESENTING
    assert session.current_card.word == "kat"

    with pytest.raises(ValidationError):
        session.submit_answer("yes")
    session.submit_answer(False)
    assert session.is_complete
    assert (session.score, session.attempts) == (1, 2)


def test_true_false_grades_against_question(dutch_cards, rng):
    session = QuizSession(dutch_cards, Mode.TRUE_FALSE, rng=rng)
    for _ in dutch_cards:
        question = session.current_question
        assert question.word == session.current_card.word
        assert session.submit_answer(question.is_correct).correct
        session.advance()
    assert session.percentage == 100


def test_battle_quiz_options_and_damage(dutch_cards, rng):
    session = QuizSession(dutch_cards, Mode.BATTLE_QUIZ, rng=rng)
    card = session.current_card
    assert len(session.current_options) == 4
    assert card.definition in session.current_options

    enemy_health = session.battle.enemy.health
    outcome = session.submit_answer(card.definition)
    assert outcome.correct
    assert outcome.battle_event.damage_dealt == 25
    assert session.battle.enemy.health == enemy_health - 25


def test_battle_quiz_ends_when_player_is_defeated(rng):
    cards = [Card(word=f"woord{i}", definition=f"word {i}") for i in range(20)]
    session = QuizSession(cards, Mode.BATTLE_QUIZ, rng=rng)
    while not session.is_complete:
        session.submit_answer("nothing")
        session.advance()
    assert session.battle.player.is_defeated
    assert session.attempts < len(cards)
    assert session.score == 0


def test_article_mode_skips_cards_without_article(dutch_cards):
    session = QuizSession(dutch_cards, Mode.ARTICLE, articles=["de", "het"])
    assert session.total == 4
    assert session.current_options == ["de", "het"]
    assert session.submit_answer("HET").correct
    session.advance()
    assert not session.submit_answer("het").correct


def test_hangman_win_grades_the_card(store, stored_cards):
    session = QuizSession(stored_cards[:1], Mode.HANGMAN, store=store, hangman_attempts=6)
    with pytest.raises(InvalidStateTransition):
        session.submit_answer("huis")

    assert session.guess_letter("h") is HangmanStatus.IN_PROGRESS
    assert session.phase is Phase.ANSWERING
    for letter in "uis":
        session.guess_letter(letter)
    assert session.phase is Phase.GRADED
    assert session.last_outcome.correct
    assert store.get_card(stored_cards[0].id).success_count == 1

    with pytest.raises(InvalidStateTransition):
        session.guess_letter("x")
    session.advance()
    assert session.is_complete


def test_hangman_loss(dutch_cards):
    session = QuizSession(dutch_cards[1:2], Mode.HANGMAN, hangman_attempts=6)
    for letter in "bcdef":
        session.guess_letter(letter)
    assert session.phase is Phase.ANSWERING
    assert session.guess_letter("g") is HangmanStatus.LOST
    assert session.phase is Phase.GRADED
    assert session.score == 0
    assert session.attempts == 1


def test_letter_guesses_only_in_hangman(dutch_cards):
    session = QuizSession(dutch_cards, Mode.TEST)
    with pytest.raises(InvalidStateTransition):
        session.guess_letter("h")


def test_grading_updates_store(store, stored_cards):
    session = QuizSession(stored_cards, Mode.SPELLING, store=store)
    session.submit_answer("huis")
    session.advance()
    session.submit_answer("hond")

    first = store.get_card(stored_cards[0].id)
    second = store.get_card(stored_cards[1].id)
    assert (first.success_count, first.times_shown, first.times_correct) == (1, 1, 1)
    assert (second.success_count, second.times_shown, second.times_correct) == (0, 1, 0)


def test_card_deleted_mid_session_is_not_recorded(store, stored_cards):
    session = QuizSession(stored_cards, Mode.SPELLING, store=store)
    store.delete_card(stored_cards[0].id)
    assert session.submit_answer("huis").correct
    assert session.score == 1


def test_reset_zeroes_counters_and_keeps_cards(dutch_cards):
    session = QuizSession(dutch_cards, Mode.TEST, rng=random.Random(5))
    session.submit_answer("huis")
    session.advance()
    session.submit_answer("wrong")

    session.reset()
    assert session.phase is Phase.PRESENTING
    assert (session.current_index, session.score, session.attempts) == (0, 0, 0)
    assert session.history == []
    assert sorted(c.id for c in session.cards) == sorted(c.id for c in dutch_cards)


def test_shuffle_uses_injected_rng(dutch_cards):
    first = QuizSession(dutch_cards, Mode.TEST, rng=random.Random(9), shuffle=True)
    second = QuizSession(dutch_cards, Mode.TEST, rng=random.Random(9), shuffle=True)
    assert [c.id for c in first.cards] == [c.id for c in second.cards]


def test_snapshot_and_restore(store, stored_cards):
    session = QuizSession(stored_cards, Mode.SPELLING, store=store, deck_ids=[store.default_deck.id])
    session.submit_answer("huis")

    snapshot = session.snapshot()
    assert snapshot["mode"] == "spelling"
    assert snapshot["next_index"] == 1
    assert snapshot["deck_ids"] == [store.default_deck.id]

    restored = QuizSession.restore(snapshot, store.cards, store=store)
    assert restored.phase is Phase.PRESENTING
    assert restored.current_card.word == "kat"
    assert (restored.score, restored.attempts) == (1, 1)
    assert [o.card.word for o in restored.history] == ["huis"]


def test_restore_skips_deleted_cards(store, stored_cards):
    session = QuizSession(stored_cards, Mode.SPELLING, store=store)
    session.submit_answer("huis")
    session.advance()
    snapshot = session.snapshot()

    store.delete_card(stored_cards[1].id)
    restored = QuizSession.restore(snapshot, store.cards)
    assert [c.word for c in restored.cards] == ["huis", "boek"]
    assert restored.current_card.word == "boek"


def test_restore_finished_session_is_complete(store, stored_cards):
    session = QuizSession(stored_cards[:1], Mode.SPELLING)
    session.submit_answer("huis")
    restored = QuizSession.restore(session.snapshot(), store.cards)
    assert restored.is_complete


def test_add_then_duplicate_then_quiz(store):
    card = store.add_card("huis", "house")
    assert store.get_top_level_decks()[0].cards == [card]

    duplicate = store.add_card("Huis", "home")
    assert isinstance(duplicate, DuplicateDetected)
    assert duplicate.comparison.field_differences == {"definition": ("house", "home")}
    assert duplicate.comparison.new_fields_count == 0

    session = QuizSession(store.cards_for_decks([store.default_deck.id]), Mode.TEST, store=store)
    session.submit_answer("Huis")
    session.advance()
    assert session.is_complete
    assert store.get_card(card.id).success_count == 1


@pytest.fixture
def settings(tmp_path, monkeypatch):
    for key in SettingsManager.DEFAULTS:
        monkeypatch.delenv(f"FLASHDECK_{key}", raising=False)
    SettingsManager.reset_instance()
    yield SettingsManager(str(tmp_path / "settings.json"))
    SettingsManager.reset_instance()


def test_restore_with_settings_session_options(store, stored_cards, settings):
    options = settings.session_options()
    assert options["shuffle"] is True

    session = QuizSession(stored_cards, Mode.SPELLING, store=store, rng=random.Random(2), **options)
    session.submit_answer(session.current_card.word)
    snapshot = session.snapshot()

    restored = QuizSession.restore(snapshot, store.cards, store=store, **options)
    assert [c.id for c in restored.cards] == snapshot["card_ids"]
    assert restored.current_index == 1
    assert (restored.score, restored.attempts) == (1, 1)


@pytest.mark.parametrize("score,attempts,expected", [
    (1, 8, 13),
    (3, 8, 38),
    (1, 2, 50),
    (1, 3, 33),
    (2, 3, 67),
    (0, 4, 0),
])
def test_percentage_rounds_halves_up(score, attempts, expected):
    cards = [Card(word=f"woord{i}", definition=f"word {i}") for i in range(attempts)]
    session = QuizSession(cards, Mode.SPELLING)
    for i, card in enumerate(cards):
        session.submit_answer(card.word if i < score else "wrong")
        session.advance()
    assert (session.score, session.attempts) == (score, attempts)
    assert session.percentage == expected


def test_study_session_rejects_advance_after_swipe(dutch_cards):
    session = QuizSession(dutch_cards, Mode.STUDY)
    session.submit_answer(True)
    with pytest.raises(InvalidStateTransition):
        session.advance()
    assert session.current_index == 1
