import random

import pytest

from flashdeck.models import Card
from flashdeck.services import CardStore, MemoryRepository


@pytest.fixture
def repository():
    return MemoryRepository()


@pytest.fixture
def store(repository):
    return CardStore(repository)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def dutch_cards():
    return [
        Card(word="huis", definition="house", article="het"),
        Card(word="kat", definition="cat", article="de"),
        Card(word="boek", definition="book", article="het"),
        Card(word="fiets", definition="bicycle", article="de"),
        Card(word="lopen", definition="to walk"),
    ]


@pytest.fixture
def stored_cards(store):
    words = [("huis", "house"), ("kat", "cat"), ("boek", "book")]
    return [store.add_card(word, definition) for word, definition in words]
