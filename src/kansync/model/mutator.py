"""Optimistic card mutations.

Each operation changes the store synchronously, re-establishes dense
positions (0..n-1) for every column it touched and returns a Mutation
naming the rows that now differ from what the shared store holds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from kansync.ids import new_id
from kansync.model.card import Card, ColumnId, utcnow
from kansync.model.intents import Intent, MoveIntent, ReorderIntent
from kansync.model.store import CardStore

logger = logging.getLogger(__name__)


@dataclass
class Mutation:
    """Result of an optimistic mutation.

    ``card`` is the card the intent was about (for a delete, its last
    state). ``changed`` lists every card whose column or position was
    rewritten, ``card`` first when it is among them.
    """

    card: Card | None
    changed: list[Card] = field(default_factory=list)

    @property
    def displaced(self) -> list[Card]:
        """Changed cards other than the primary one."""
        if self.card is None:
            return list(self.changed)
        return [c for c in self.changed if c.id != self.card.id]


def densify(store: CardStore, column: ColumnId, order: list[str]) -> list[Card]:
    """Assign positions 0..n-1 in ``order`` and put every card in ``column``.

    Returns the cards that actually changed.
    """
    changed = []
    for index, card_id in enumerate(order):
        card = store.get(card_id)
        if card is None:
            continue
        if card.position == index and card.column_id is column:
            continue
        card = replace(card, position=index, column_id=column)
        store.upsert(card)
        changed.append(card)
    return changed


def add_card(
    store: CardStore,
    owner: str,
    column: ColumnId,
    title: str,
    description: str | None = None,
    card_id: str | None = None,
) -> Card:
    """Append a new card to the end of ``column``."""
    column = ColumnId(column)
    card = Card(
        id=card_id or new_id(),
        owner=owner,
        title=title,
        column_id=column,
        position=len(store.cards_in(column)),
        description=description,
        created_at=utcnow(),
    )
    store.upsert(card)
    return card


def edit_card(store: CardStore, card_id: str, title: str, description: str | None = None) -> Card | None:
    """Change a card's text. Position and column are untouched."""
    card = store.get(card_id)
    if card is None:
        logger.debug("edit of unknown card %s ignored", card_id)
        return None
    card = replace(card, title=title, description=description)
    store.upsert(card)
    return card


def delete_card(store: CardStore, card_id: str) -> Mutation | None:
    """Remove a card and close the gap it leaves."""
    card = store.remove(card_id)
    if card is None:
        logger.debug("delete of unknown card %s ignored", card_id)
        return None
    changed = densify(store, card.column_id, store.ids_in(card.column_id))
    return Mutation(card, changed)


def move_card(store: CardStore, intent: MoveIntent) -> Mutation | None:
    """Move a card to ``intent.target_index`` of ``intent.to_column``.

    The card's current column in the store is the source, whatever the
    intent says; it can differ when a remote event landed since the
    intent was built.
    """
    card = store.get(intent.card_id)
    if card is None:
        logger.debug("move of unknown card %s ignored", intent.card_id)
        return None
    source = card.column_id
    target = ColumnId(intent.to_column)
    if source is not ColumnId(intent.from_column):
        logger.debug("move of %s: expected in %s, found in %s", card.id, intent.from_column, source)

    target_ids = [i for i in store.ids_in(target) if i != card.id]
    index = max(0, min(intent.target_index, len(target_ids)))
    target_ids.insert(index, card.id)

    changed = densify(store, target, target_ids)
    if source is not target:
        changed += densify(store, source, store.ids_in(source))

    moved = store.get(card.id)
    changed.sort(key=lambda c: c.id != moved.id)
    return Mutation(moved, changed)


def reorder_cards(store: CardStore, intent: ReorderIntent) -> Mutation | None:
    """Rewrite a column's order. Rejects anything but a permutation of it."""
    column = ColumnId(intent.column)
    current = store.ids_in(column)
    ids = list(intent.ids)
    if len(set(ids)) != len(ids) or sorted(ids) != sorted(current):
        logger.debug("stale reorder of %s rejected: %s vs %s", column.value, ids, current)
        return None
    return Mutation(None, densify(store, column, ids))


def apply_intent(store: CardStore, intent: Intent) -> Mutation | None:
    """Dispatch an intent to the matching mutation."""
    if isinstance(intent, MoveIntent):
        return move_card(store, intent)
    if isinstance(intent, ReorderIntent):
        return reorder_cards(store, intent)
    raise TypeError(f"not an intent: {intent!r}")
