"""Remote writes for optimistic changes.

Local state is changed first; the writes here follow as background
tasks. A failed write is logged and forgotten: no retry and no
rollback, so local and remote can disagree until the next remote event
for that row or a refetch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from kansync.backend.base import Backend, Result
from kansync.model.card import Card, ColumnId, TodoItem, card_to_row, todo_to_row, utcnow
from kansync.model.mutator import Mutation

logger = logging.getLogger(__name__)

NOTE_DELAY = 0.3


class PersistenceClient:
    """Turns mutations into insert/update/delete calls on a Backend.

    Writes are independent tasks, each its own round trip. Writes to
    the same row are chained so they land in the order they were made;
    writes to different rows never wait on each other.
    """

    def __init__(self, backend: Backend, owner: str):
        self.backend = backend
        self.owner = owner
        self.failures = 0
        self._tasks: set[asyncio.Task] = set()
        self._tails: dict[str, asyncio.Task] = {}

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def submit(self, what: str, key: str, call: Callable[[], Awaitable[Result]]) -> asyncio.Task:
        """Start a write to the row named by key in the background and return its task."""
        previous = self._tails.get(key)
        task = asyncio.get_running_loop().create_task(self._write(what, call, previous))
        self._tasks.add(task)
        self._tails[key] = task

        def _done(done: asyncio.Task) -> None:
            self._tasks.discard(done)
            if self._tails.get(key) is done:
                del self._tails[key]

        task.add_done_callback(_done)
        return task

    async def _write(
        self,
        what: str,
        call: Callable[[], Awaitable[Result]],
        previous: asyncio.Task | None,
    ) -> bool:
        if previous is not None:
            await asyncio.wait([previous])
        result = await call()
        if result.error is not None:
            self.failures += 1
            logger.error("%s failed: %s", what, result.error)
            return False
        return True

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for every write submitted so far.

        Returns False if writes were still in flight after timeout seconds.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self._tasks:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                logger.warning("%d write(s) still in flight", len(self._tasks))
                return False
            await asyncio.wait(list(self._tasks), timeout=remaining)
        return True

    # -- cards --

    def save_new_card(self, card: Card) -> None:
        row = card_to_row(card)
        self.submit(f"add card {card.id}", f"cards:{card.id}", lambda: self.backend.insert("cards", row))

    def save_card_text(self, card: Card) -> None:
        partial = {"title": card.title, "description": card.description}
        self._update_card(f"update card {card.id}", partial, card.id)

    def save_mutation(self, mutation: Mutation) -> None:
        """Write every row a move re-indexed.

        The primary card gets its column and position, displaced
        siblings only their position.
        """
        for card in mutation.changed:
            if mutation.card is not None and card.id == mutation.card.id:
                partial = {"column_id": card.column_id.value, "position": card.position}
                what = f"move card {card.id}"
            else:
                partial = {"position": card.position}
                what = f"reposition card {card.id}"
            self._update_card(what, partial, card.id)

    def save_delete(self, mutation: Mutation) -> None:
        card_id = mutation.card.id
        self.submit(f"delete card {card_id}", f"cards:{card_id}", lambda: self.backend.delete("cards", card_id))
        for card in mutation.displaced:
            self._update_card(f"reposition card {card.id}", {"position": card.position}, card.id)

    def save_order(self, column: ColumnId, cards: list[Card]) -> None:
        """Batch-write the position of every card in a column."""
        for card in cards:
            self._update_card(f"reorder {column.value} card {card.id}", {"position": card.position}, card.id)

    def _update_card(self, what: str, partial: dict, card_id: str) -> None:
        self._update_row("cards", what, partial, card_id)

    def _update_row(self, table: str, what: str, partial: dict, match: str) -> None:
        self.submit(what, f"{table}:{match}", lambda: self.backend.update(table, partial, match))

    # -- todos and notes --

    def save_new_todo(self, todo: TodoItem) -> None:
        row = todo_to_row(todo)
        self.submit(f"add todo {todo.id}", f"todos:{todo.id}", lambda: self.backend.insert("todos", row))

    def save_todo_completed(self, todo: TodoItem) -> None:
        self._update_row("todos", f"toggle todo {todo.id}", {"completed": todo.completed}, todo.id)

    def save_todo_delete(self, todo_id: str) -> None:
        self.submit(f"delete todo {todo_id}", f"todos:{todo_id}", lambda: self.backend.delete("todos", todo_id))

    def save_note(self, content: str) -> None:
        row = {"owner": self.owner, "content": content, "updated_at": utcnow()}
        self.submit("update notes", f"notes:{self.owner}", lambda: self.backend.upsert("notes", row))


class NoteWriter:
    """Coalesces rapid note edits into one write.

    Each edit replaces the buffered text and restarts a ``delay``-second
    quiet period. Once the quiet period passes with no further edit,
    exactly one write with the latest text is sent.
    """

    def __init__(self, send: Callable[[str], None], delay: float = NOTE_DELAY):
        self.send = send
        self.delay = delay
        self.writes = 0
        self._value: str | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: str) -> None:
        self._value = value
        if self._handle is not None:
            self._handle.cancel()
        self._handle = asyncio.get_running_loop().call_later(self.delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        value, self._value = self._value, None
        if value is None:
            return
        self.writes += 1
        self.send(value)

    def flush(self) -> None:
        """Send the buffered text now, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def cancel(self) -> None:
        """Drop the buffered text without writing it."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._value = None
