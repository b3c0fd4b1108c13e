"""A signed-in user's sync session.

The session owns the local stores, the write path and the change-feed
consumers for one user. It is built on sign-in, opened, and closed on
sign-out; nothing about it is global.

Local actions are optimistic: they change the stores and return at
once, and the matching remote writes run in the background. Remote
events flow in through the reconciler on the same event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace

from kansync.backend.base import Backend, Subscription
from kansync.drag import DRAG_THRESHOLD, DragController
from kansync.ids import new_id
from kansync.model.card import (
    Card,
    ColumnId,
    RowError,
    TodoItem,
    card_from_row,
    note_from_row,
    todo_from_row,
    utcnow,
)
from kansync.model.intents import Intent, MoveIntent, ReorderIntent
from kansync.model.mutator import (
    Mutation,
    add_card,
    apply_intent,
    delete_card,
    edit_card,
)
from kansync.model.store import SessionState
from kansync.persistence import NOTE_DELAY, NoteWriter, PersistenceClient
from kansync.reconciler import Reconciler

logger = logging.getLogger(__name__)

TABLES = ("cards", "todos", "notes")

CLOSE_TIMEOUT = 5.0


@dataclass(frozen=True)
class User:
    """What the auth provider hands over: an id and a bearer credential."""

    id: str
    token: str | None = None


def _map_rows(table: str, rows: list[dict], mapper, owner: str) -> list:
    items = []
    for row in rows:
        try:
            item = mapper(row)
        except RowError as e:
            logger.warning("skipping malformed %s row: %s", table, e)
            continue
        if item.owner != owner:
            logger.warning("dropping %s row owned by %s", table, item.owner)
            continue
        items.append(item)
    return items


class Session:
    """Local state plus its persistence and change feeds for one user."""

    def __init__(
        self,
        backend: Backend,
        user: User | str,
        note_delay: float = NOTE_DELAY,
        drag_threshold: int = DRAG_THRESHOLD,
    ):
        self.user = user if isinstance(user, User) else User(user)
        self.backend = backend
        self.state = SessionState(self.user.id)
        self.persistence = PersistenceClient(backend, self.user.id)
        self.reconciler = Reconciler(self.state)
        self.notes_writer = NoteWriter(self.persistence.save_note, delay=note_delay)
        self.drag = DragController(self.state.cards, self.apply, threshold=drag_threshold)
        self.loading = False
        self._subscriptions: list[Subscription] = []
        self._consumers: list[asyncio.Task] = []

    @property
    def cards(self):
        return self.state.cards

    @property
    def todos(self):
        return self.state.todos

    @property
    def is_open(self) -> bool:
        return bool(self._subscriptions)

    # -- lifecycle --

    async def open(self) -> None:
        """Load the user's rows, then start listening for changes."""
        await self.load()
        for table in TABLES:
            sub = self.backend.subscribe(table, self.user.id)
            self._subscriptions.append(sub)
            task = asyncio.get_running_loop().create_task(self.reconciler.consume(table, sub))
            self._consumers.append(task)

    async def load(self) -> None:
        """Fetch every table. Failures are logged and leave that part empty."""
        self.loading = True
        try:
            cards, todos, notes = await asyncio.gather(
                *(self.backend.select(table, self.user.id) for table in TABLES)
            )
        finally:
            self.loading = False

        if cards.ok:
            self.state.cards.replace_all(_map_rows("cards", cards.data, card_from_row, self.user.id))
        else:
            logger.error("loading cards failed: %s", cards.error)
        if todos.ok:
            self.state.todos.replace_all(_map_rows("todos", todos.data, todo_from_row, self.user.id))
        else:
            logger.error("loading todos failed: %s", todos.error)
        if notes.ok:
            rows = _map_rows("notes", notes.data, note_from_row, self.user.id)
            self.state.notes.content = rows[0].content if rows else ""
        else:
            logger.error("loading notes failed: %s", notes.error)

    async def refetch(self) -> None:
        """Reload everything from the shared store.

        Events missed while a feed was down are not replayed; this is
        the way to catch up.
        """
        await self.load()

    async def close(self, timeout: float | None = CLOSE_TIMEOUT) -> None:
        """Flush pending notes, stop the feeds and wait for writes.

        Writes still in flight after timeout seconds are left behind.
        """
        self.drag.cancel()
        self.notes_writer.flush()
        for sub in self._subscriptions:
            sub.close()
        for task in self._consumers:
            task.cancel()
        await asyncio.gather(*self._consumers, return_exceptions=True)
        self._subscriptions.clear()
        self._consumers.clear()
        await self.persistence.drain(timeout)

    async def __aenter__(self) -> Session:
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # -- cards --

    def add_card(self, column: ColumnId, title: str, description: str | None = None) -> Card:
        card = add_card(self.state.cards, self.user.id, column, title, description)
        self.persistence.save_new_card(card)
        return card

    def edit_card(self, card_id: str, title: str, description: str | None = None) -> Card | None:
        card = edit_card(self.state.cards, card_id, title, description)
        if card is not None:
            self.persistence.save_card_text(card)
        return card

    def delete_card(self, card_id: str) -> Card | None:
        mutation = delete_card(self.state.cards, card_id)
        if mutation is None:
            return None
        self.persistence.save_delete(mutation)
        return mutation.card

    def move_card(self, card_id: str, to_column: ColumnId, index: int) -> Mutation | None:
        card = self.state.cards.get(card_id)
        if card is None:
            return None
        return self.apply(MoveIntent(card_id, card.column_id, ColumnId(to_column), index))

    def reorder_cards(self, column: ColumnId, ids: list[str]) -> Mutation | None:
        return self.apply(ReorderIntent(ColumnId(column), tuple(ids)))

    def apply(self, intent: Intent, persist: bool = True) -> Mutation | None:
        """Apply an ordering intent locally and, unless told not to, persist it."""
        mutation = apply_intent(self.state.cards, intent)
        if mutation is None or not persist:
            return mutation
        if isinstance(intent, ReorderIntent):
            self.persistence.save_order(intent.column, self.state.cards.cards_in(intent.column))
        else:
            self.persistence.save_mutation(mutation)
        return mutation

    # -- todos and notes --

    def add_todo(self, text: str) -> TodoItem:
        todo = TodoItem(id=new_id(), owner=self.user.id, text=text, created_at=utcnow())
        self.state.todos.upsert(todo)
        self.persistence.save_new_todo(todo)
        return todo

    def toggle_todo(self, todo_id: str) -> TodoItem | None:
        todo = self.state.todos.get(todo_id)
        if todo is None:
            return None
        todo = replace(todo, completed=not todo.completed)
        self.state.todos.upsert(todo)
        self.persistence.save_todo_completed(todo)
        return todo

    def delete_todo(self, todo_id: str) -> TodoItem | None:
        todo = self.state.todos.remove(todo_id)
        if todo is not None:
            self.persistence.save_todo_delete(todo_id)
        return todo

    def set_notes(self, content: str) -> None:
        self.state.notes.content = content
        self.notes_writer.push(content)

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<Session {self.user.id} {state}>"
