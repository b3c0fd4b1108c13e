"""Session-local collections with change notification.

The stores hold the current view of one user's rows. Writes are
synchronous and visible to the next read. Nothing here repairs
ordering; callers (the mutator and the reconciler) own that.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

from kansync.model.card import COLUMNS, Card, ColumnId, TodoItem

ANY = "*"

Callback = Callable[[Any, str, Any, Any], None]


class Watchable:
    """Keyed watcher registry shared by the stores."""

    def __init__(self) -> None:
        self._watchers: dict[str, list[Callback]] = {}

    def watch(self, key: str, callback: Callback) -> Callable[[], None]:
        """Watch a key for changes. Returns an unwatch callable."""
        key = str(key.value if isinstance(key, ColumnId) else key)
        self._watchers.setdefault(key, []).append(callback)

        def unwatch() -> None:
            callbacks = self._watchers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unwatch

    def _emit(self, keys: Iterable[str], old: Any, new: Any) -> None:
        """Fire watchers for each key once, then the wildcard watchers."""
        seen: list[str] = []
        for key in keys:
            if key not in seen:
                seen.append(key)
        seen.append(ANY)
        for key in seen:
            for cb in list(self._watchers.get(key, ())):
                cb(self, key, old, new)


class CardStore(Watchable):
    """Cards keyed by id, with per-column ordered views."""

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        super().__init__()
        self._cards: dict[str, Card] = {}
        for card in cards:
            self._cards[card.id] = card

    def get(self, card_id: str) -> Card | None:
        return self._cards.get(card_id)

    def cards_in(self, column: ColumnId) -> list[Card]:
        """Cards of a column sorted by position.

        Ties (only possible mid-way through a burst of remote events)
        fall back to creation time, then id.
        """
        column = ColumnId(column)
        cards = [c for c in self._cards.values() if c.column_id is column]
        cards.sort(key=lambda c: (c.position, c.created_at, c.id))
        return cards

    def ids_in(self, column: ColumnId) -> list[str]:
        return [c.id for c in self.cards_in(column)]

    def index_of(self, card_id: str) -> int | None:
        """Index of a card within its column's ordered view."""
        card = self._cards.get(card_id)
        if card is None:
            return None
        return self.ids_in(card.column_id).index(card_id)

    def upsert(self, card: Card) -> None:
        old = self._cards.get(card.id)
        if old == card:
            return
        self._cards[card.id] = card
        keys = [card.column_id.value]
        if old is not None:
            keys.insert(0, old.column_id.value)
        self._emit(keys, old, card)

    def remove(self, card_id: str) -> Card | None:
        old = self._cards.pop(card_id, None)
        if old is not None:
            self._emit([old.column_id.value], old, None)
        return old

    def replace_all(self, cards: Iterable[Card]) -> None:
        """Swap the whole contents, notifying every column once."""
        self._cards = {card.id: card for card in cards}
        self._emit([c.value for c in COLUMNS], None, None)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._cards.values()))

    def __len__(self) -> int:
        return len(self._cards)

    def __repr__(self) -> str:
        counts = ", ".join(f"{c.value}={len(self.cards_in(c))}" for c in COLUMNS)
        return f"<CardStore [{counts}]>"


class TodoStore(Watchable):
    """Todo items keyed by id, listed in creation order."""

    def __init__(self) -> None:
        super().__init__()
        self._items: dict[str, TodoItem] = {}

    def get(self, todo_id: str) -> TodoItem | None:
        return self._items.get(todo_id)

    def items(self) -> list[TodoItem]:
        return sorted(self._items.values(), key=lambda t: (t.created_at, t.id))

    def upsert(self, item: TodoItem) -> None:
        old = self._items.get(item.id)
        if old == item:
            return
        self._items[item.id] = item
        self._emit([item.id], old, item)

    def remove(self, todo_id: str) -> TodoItem | None:
        old = self._items.pop(todo_id, None)
        if old is not None:
            self._emit([todo_id], old, None)
        return old

    def replace_all(self, items: Iterable[TodoItem]) -> None:
        self._items = {item.id: item for item in items}
        self._emit([], None, None)

    def __contains__(self, todo_id: object) -> bool:
        return todo_id in self._items

    def __len__(self) -> int:
        return len(self._items)


class NoteBuffer(Watchable):
    """The single free-text note of a user."""

    def __init__(self, content: str = "") -> None:
        super().__init__()
        self._content = content

    @property
    def content(self) -> str:
        return self._content

    @content.setter
    def content(self, value: str) -> None:
        old = self._content
        if old == value:
            return
        self._content = value
        self._emit(["content"], old, value)


class SessionState:
    """Everything one signed-in user sees. Built per session, never shared."""

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self.cards = CardStore()
        self.todos = TodoStore()
        self.notes = NoteBuffer()

    def __repr__(self) -> str:
        return f"<SessionState {self.owner} {self.cards!r} todos={len(self.todos)}>"
