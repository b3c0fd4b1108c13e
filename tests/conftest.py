"""Shared fixtures: card stores built from column lists."""

import pytest

from kansync.model.card import Card, ColumnId
from kansync.model.store import CardStore

OWNER = "alice@example.com"


def _make_card(card_id, column=ColumnId.TODO, position=0, title=None, owner=OWNER):
    """Build a Card with sensible defaults."""
    return Card(
        id=card_id,
        owner=owner,
        title=title or f"Card {card_id}",
        column_id=ColumnId(column),
        position=position,
        created_at=f"2024-01-01T00:00:{position:02d}+00:00",
    )


def _make_store(**columns):
    """Build a dense store: make_store(todo=["a", "b"], progress=["c"])."""
    cards = []
    for name, ids in columns.items():
        for position, card_id in enumerate(ids):
            cards.append(_make_card(card_id, ColumnId(name), position))
    return CardStore(cards)


@pytest.fixture
def make_card():
    return _make_card


@pytest.fixture
def make_store():
    return _make_store


@pytest.fixture
def board():
    """Three cards in todo, two in progress, none complete."""
    return _make_store(todo=["a", "b", "c"], progress=["d", "e"])
