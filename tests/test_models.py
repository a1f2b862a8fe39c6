import pytest

from flashdeck.models import CandidateFields, Card, Deck


@pytest.mark.parametrize("times_shown", [0, 1, 5, 20])
def test_learning_percentage_is_monotonic_and_bounded(times_shown):
    previous = -1
    for success_count in range(30):
        card = Card(word="huis", definition="house", success_count=success_count, times_shown=times_shown)
        assert 0 <= card.learning_percentage <= 100
        assert card.learning_percentage >= previous
        previous = card.learning_percentage


def test_learning_percentage_values():
    assert Card(word="a", definition="b").learning_percentage == 0
    assert Card(word="a", definition="b", success_count=1, times_shown=4).learning_percentage == 25
    assert Card(word="a", definition="b", success_count=3).learning_percentage == 100


def test_card_round_trips_through_dict():
    card = Card(word="huis", definition="house", plural="huizen", deck_ids=frozenset({"b", "a"}), success_count=2)
    data = card.to_dict()
    assert data["deck_ids"] == ["a", "b"]
    assert Card.from_dict(data) == card


def test_card_from_dict_tolerates_old_snapshots():
    card = Card.from_dict({"id": "x1", "word": " kat ", "definition": "cat", "audio": "kat.m4a"})
    assert card.id == "x1"
    assert card.word == "kat"
    assert card.success_count == 0
    assert card.deck_ids == frozenset()


def test_deck_from_dict():
    deck = Deck.from_dict({"id": "d1", "name": "Verbs", "parent_id": "d0"})
    assert deck.is_sub_deck
    assert deck.is_editable
    assert deck.to_dict() == {"id": "d1", "name": "Verbs", "parent_id": "d0", "is_editable": True}


def test_candidate_fields_trim_and_build_card():
    candidate = CandidateFields.build(" huis ", " house", deck_ids=["a"], plural=" huizen ")
    card = candidate.to_card()
    assert (card.word, card.definition, card.plural) == ("huis", "house", "huizen")
    assert card.deck_ids == {"a"}
    assert card.success_count == 0
    assert card.filled_fields() == ["definition", "plural"]
