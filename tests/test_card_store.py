import pytest

from flashdeck.errors import NotFoundError, ValidationError
from flashdeck.models import Card
from flashdeck.services import CardStore, DuplicateDetected, MemoryRepository, ResolutionAction


def test_new_store_has_default_deck(store):
    decks = store.get_top_level_decks()
    assert [d.name for d in decks] == ["Uncategorized"]
    assert decks[0].is_editable is False


@pytest.mark.parametrize("name", ["Animals", "  Verbs  ", "Huis en tuin"])
def test_create_deck_trims_name_and_has_no_parent(store, name):
    deck = store.create_deck(name)
    assert deck.name == name.strip()
    assert deck.parent_id is None
    assert deck in store.get_top_level_decks()


@pytest.mark.parametrize("name", ["", "   ", "\n\t"])
def test_create_deck_rejects_empty_name(store, name):
    before = store.snapshot()
    with pytest.raises(ValidationError):
        store.create_deck(name)
    assert store.snapshot() == before


def test_sub_decks_are_one_level_deep(store):
    parent = store.create_deck("Dutch")
    child = store.create_deck("Verbs", parent_id=parent.id)
    assert store.get_sub_decks(parent.id) == [child]
    with pytest.raises(ValidationError):
        store.create_deck("Irregular", parent_id=child.id)
    with pytest.raises(NotFoundError):
        store.create_deck("Orphan", parent_id="missing")


def test_selectable_decks_group_sub_decks_under_parent(store):
    dutch = store.create_deck("Dutch")
    german = store.create_deck("German")
    verbs = store.create_deck("Verbs", parent_id=dutch.id)
    nouns = store.create_deck("Nouns", parent_id=dutch.id)

    assert store.get_selectable_decks() == [dutch, verbs, nouns, german]
    assert store.get_selectable_decks(include_default=True)[0] is store.default_deck


def test_add_card_trims_and_defaults_to_default_deck(store):
    card = store.add_card("  huis ", " house ", example=" Het huis is groot. ", article=" het ")
    assert card.word == "huis"
    assert card.definition == "house"
    assert card.example == "Het huis is groot."
    assert card.article == "het"
    assert card.success_count == 0
    assert card.deck_ids == {store.default_deck.id}
    assert store.get_top_level_decks()[0].cards == [card]


@pytest.mark.parametrize("word,definition", [("", "house"), ("huis", "  "), ("  ", "")])
def test_add_card_requires_word_and_definition(store, word, definition):
    with pytest.raises(ValidationError):
        store.add_card(word, definition)
    assert store.count == 0


def test_add_card_rejects_unknown_deck_and_fields(store):
    with pytest.raises(NotFoundError):
        store.add_card("huis", "house", deck_ids=["nope"])
    with pytest.raises(ValidationError):
        store.add_card("huis", "house", colour="red")
    assert store.count == 0


def test_duplicate_word_is_reported_not_inserted(store):
    original = store.add_card("huis", "house")
    result = store.add_card("Huis", "home")

    assert isinstance(result, DuplicateDetected)
    assert result.existing == original
    assert result.comparison.field_differences == {"definition": ("house", "home")}
    assert result.comparison.new_fields_count == 0
    assert store.count == 1
    assert store.get_card(original.id).definition == "house"


def test_duplicate_detection_is_scoped_to_target_decks(store):
    animals = store.create_deck("Animals")
    store.add_card("kat", "cat", deck_ids=[animals.id])
    other = store.add_card("kat", "cat", deck_ids=[store.default_deck.id])
    assert isinstance(other, Card)
    assert store.count == 2


def test_duplicate_in_any_overlapping_deck(store):
    animals = store.create_deck("Animals")
    pets = store.create_deck("Pets")
    store.add_card("kat", "cat", deck_ids=[animals.id])
    result = store.add_card("KAT", "cat", deck_ids=[pets.id, animals.id])
    assert isinstance(result, DuplicateDetected)
    assert result.comparison.is_exact_match


def test_apply_resolution_merge_and_replace(store):
    original = store.add_card("huis", "house")
    store.increment_success(original.id)

    duplicate = store.add_card("huis", "home", plural="huizen")
    merged = store.apply_resolution(duplicate, ResolutionAction.MERGE_ADDITIONAL_FIELDS)
    assert merged.definition == "house"
    assert merged.plural == "huizen"
    assert store.get_card(original.id) == merged

    duplicate = store.add_card("huis", "home")
    replaced = store.apply_resolution(duplicate, ResolutionAction.REPLACE_WITH_NEW)
    assert replaced.id == original.id
    assert replaced.success_count == 1
    assert replaced.definition == "home"
    assert replaced.plural == ""
    assert store.count == 1


def test_apply_resolution_keep_and_cancel_leave_store_unchanged(store, repository):
    store.add_card("huis", "house")
    duplicate = store.add_card("huis", "home")
    saves = repository.save_count

    assert store.apply_resolution(duplicate, ResolutionAction.KEEP_EXISTING) == duplicate.existing
    assert store.apply_resolution(duplicate, ResolutionAction.CANCEL) is None
    assert repository.save_count == saves
    assert store.cards[0].definition == "house"


def test_update_card_keeps_identity_and_mastery(store):
    card = store.add_card("huis", "house")
    store.increment_success(card.id)
    deck = store.create_deck("Home")

    updated = store.update_card(card.id, definition="home", deck_ids=[deck.id])
    assert updated.id == card.id
    assert updated.success_count == 1
    assert updated.definition == "home"
    assert updated.deck_ids == {deck.id}
    assert deck.cards == [updated]


def test_update_card_validation(store):
    card = store.add_card("huis", "house")
    with pytest.raises(ValidationError):
        store.update_card(card.id, word="  ")
    with pytest.raises(NotFoundError):
        store.update_card("missing", word="x")
    assert store.get_card(card.id).word == "huis"


def test_delete_default_deck_fails_and_changes_nothing(store, repository):
    store.add_card("huis", "house")
    before = store.snapshot()
    saves = repository.save_count
    with pytest.raises(ValidationError):
        store.delete_deck(store.default_deck.id)
    assert store.snapshot() == before
    assert repository.save_count == saves


def test_delete_deck_reassigns_cards(store):
    animals = store.create_deck("Animals")
    pets = store.create_deck("Pets")
    only_animals = store.add_card("kat", "cat", deck_ids=[animals.id])
    both = store.add_card("hond", "dog", deck_ids=[animals.id, pets.id])

    store.delete_deck(animals.id)

    assert not store.has_deck(animals.id)
    assert store.get_card(only_animals.id).deck_ids == {store.default_deck.id}
    assert store.get_card(both.id).deck_ids == {pets.id}


def test_delete_deck_promotes_sub_decks(store):
    parent = store.create_deck("Dutch")
    child = store.create_deck("Verbs", parent_id=parent.id)
    store.delete_deck(parent.id)
    assert store.get_deck(child.id).parent_id is None
    assert child in store.get_top_level_decks()


def test_delete_missing_deck_raises(store):
    with pytest.raises(NotFoundError):
        store.delete_deck("missing")


def test_cards_for_decks_includes_sub_decks_once(store):
    parent = store.create_deck("Dutch")
    child = store.create_deck("Verbs", parent_id=parent.id)
    a = store.add_card("lopen", "to walk", deck_ids=[child.id])
    b = store.add_card("huis", "house", deck_ids=[parent.id, child.id])

    assert store.cards_for_decks([parent.id]) == [a, b]
    assert store.cards_for_decks([parent.id], include_sub_decks=False) == [b]


def test_mastery_counters(store):
    card = store.add_card("huis", "house")
    store.record_card_shown(card.id, correct=True)
    store.record_card_shown(card.id, correct=False)
    card = store.increment_success(card.id)
    assert (card.times_shown, card.times_correct, card.success_count) == (2, 1, 1)
    assert card.learning_percentage == 50
    assert store.get_statistics()["average_learning_percentage"] == 50


def test_every_mutation_persists(repository):
    store = CardStore(repository)
    saves = repository.save_count
    deck = store.create_deck("Animals")
    card = store.add_card("kat", "cat", deck_ids=[deck.id])
    store.update_card(card.id, example="De kat slaapt.")
    store.delete_card(card.id)
    assert repository.save_count == saves + 4


def test_store_reloads_saved_snapshot(repository):
    store = CardStore(repository)
    deck = store.create_deck("Animals")
    card = store.add_card("kat", "cat", deck_ids=[deck.id], article="de")
    store.increment_success(card.id)

    reloaded = CardStore(repository)
    assert [d.name for d in reloaded.decks] == ["Uncategorized", "Animals"]
    assert reloaded.get_card(card.id) == store.get_card(card.id)
    assert reloaded.get_deck(deck.id).cards[0].success_count == 1


def test_failed_save_is_not_raised(caplog):
    class BrokenRepository(MemoryRepository):
        def save(self, snapshot):
            return False

    store = CardStore(BrokenRepository())
    card = store.add_card("huis", "house")
    assert store.get_card(card.id).word == "huis"
    assert "not persisted" in caplog.text


def test_change_callbacks(store):
    calls = []
    store.on_change(lambda: calls.append("changed"))
    store.on_change(lambda: 1 / 0)
    store.add_card("huis", "house")
    assert calls == ["changed"]


def test_search(store, stored_cards):
    assert store.search("HUI") == [stored_cards[0]]
    assert store.search("oo") == [stored_cards[2]]
    assert store.search("  ") == []
