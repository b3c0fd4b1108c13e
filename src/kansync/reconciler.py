"""Apply change-feed events to a session's stores.

Each event is a per-row replace, insert or delete. Positions are taken
as the remote store has them: every writer re-densifies before it
writes, so no repair happens here. Whatever reaches the store last wins.
"""

from __future__ import annotations

import logging

from kansync.backend.base import Subscription
from kansync.events import Created, Deleted, RowEvent, Updated, parse_change
from kansync.model.card import RowError
from kansync.model.store import SessionState

logger = logging.getLogger(__name__)


class Reconciler:
    """Routes typed events for cards, todos and notes into a SessionState."""

    def __init__(self, state: SessionState):
        self.state = state
        self.applied = 0

    def _owned(self, table: str, event: RowEvent) -> bool:
        if isinstance(event, Deleted):
            if table == "notes" and event.key != self.state.owner:
                logger.warning("dropping notes delete for %s", event.key)
                return False
            return True
        if event.row.owner != self.state.owner:
            logger.warning("dropping %s row owned by %s", table, event.row.owner)
            return False
        return True

    def apply_card(self, event: RowEvent) -> None:
        cards = self.state.cards
        if isinstance(event, (Created, Updated)):
            cards.upsert(event.row)
        elif isinstance(event, Deleted):
            cards.remove(event.key)

    def apply_todo(self, event: RowEvent) -> None:
        todos = self.state.todos
        if isinstance(event, (Created, Updated)):
            todos.upsert(event.row)
        elif isinstance(event, Deleted):
            todos.remove(event.key)

    def apply_note(self, event: RowEvent) -> None:
        if isinstance(event, (Created, Updated)):
            self.state.notes.content = event.row.content
        elif isinstance(event, Deleted):
            self.state.notes.content = ""

    def handle(self, table: str, payload: dict) -> bool:
        """Parse and apply one raw payload. Returns False if it was skipped."""
        try:
            event = parse_change(table, payload)
        except RowError as e:
            logger.warning("skipping malformed %s event: %s", table, e)
            return False
        if not self._owned(table, event):
            return False
        if table == "cards":
            self.apply_card(event)
        elif table == "todos":
            self.apply_todo(event)
        else:
            self.apply_note(event)
        self.applied += 1
        return True

    async def consume(self, table: str, subscription: Subscription) -> None:
        """Apply events from a subscription until it is closed."""
        try:
            async for payload in subscription:
                self.handle(table, payload)
        except Exception:
            logger.exception("%s change feed consumer failed", table)
