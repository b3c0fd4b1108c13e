"""Drag session state machine.

Turns pointer and keyboard gestures into ordering intents. The
controller knows nothing about widgets: the UI feeds it presses,
pointer positions and hover targets, and it hands intents to a
dispatch callable (normally ``Session.apply``).

    IDLE → DRAGGING → {DROPPED, CANCELLED} → IDLE
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from kansync.model.card import COLUMNS, ColumnId
from kansync.model.intents import Intent, MoveIntent, ReorderIntent
from kansync.model.store import CardStore

logger = logging.getLogger(__name__)

DRAG_THRESHOLD = 5

Dispatch = Callable[..., object]


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED = "dropped"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ColumnTarget:
    """Hovering over a column's background: append at its end."""

    column: ColumnId


@dataclass(frozen=True)
class CardTarget:
    """Hovering over a card: insert before it."""

    card_id: str


HoverTarget = ColumnTarget | CardTarget

STEPS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


class DragController:
    """One drag at a time over a CardStore.

    Cross-column moves are dispatched for persistence straight away.
    Same-column moves are applied locally only; the columns they touch
    are remembered and flushed as one ReorderIntent each when the drag
    ends, so a column's new order is persisted as a single batch.
    """

    def __init__(self, store: CardStore, dispatch: Dispatch, threshold: int = DRAG_THRESHOLD):
        self.store = store
        self.dispatch = dispatch
        self.threshold = threshold
        self.state = DragState.IDLE
        self.outcome: DragState | None = None
        self.card_id: str | None = None
        self.origin: ColumnId | None = None
        self._press: tuple[str, int, int] | None = None
        self._target: HoverTarget | None = None
        self._pending: list[ColumnId] = []

    @property
    def active(self) -> bool:
        return self.state is DragState.DRAGGING

    @property
    def armed(self) -> bool:
        """A press is waiting to cross the activation threshold."""
        return self._press is not None

    # -- pointer gestures --

    def press(self, card_id: str, x: int, y: int) -> None:
        """Pointer went down on a card."""
        if self.active:
            return
        self._press = (card_id, x, y)

    def pointer_move(self, x: int, y: int) -> bool:
        """Pointer moved while pressed. Returns True if this started the drag."""
        if self._press is None:
            return False
        card_id, x0, y0 = self._press
        if abs(x - x0) <= self.threshold and abs(y - y0) <= self.threshold:
            return False
        self._press = None
        return self.begin(card_id)

    def release(self) -> bool:
        """Pointer went up before a drag started. Returns True for a click."""
        clicked = self._press is not None
        self._press = None
        return clicked

    # -- session lifecycle --

    def begin(self, card_id: str) -> bool:
        """Start dragging a card. Keyboard pickup calls this directly."""
        if self.active:
            return False
        card = self.store.get(card_id)
        if card is None:
            logger.debug("drag of unknown card %s not started", card_id)
            return False
        self.state = DragState.DRAGGING
        self.outcome = None
        self.card_id = card_id
        self.origin = card.column_id
        self._target = None
        self._pending = []
        return True

    def hover(self, target: HoverTarget | None) -> None:
        """The pointer is over a new target; move the card there provisionally."""
        if not self.active or target is None or target == self._target:
            return
        self._target = target
        self._place(target)

    def drop(self, target: HoverTarget | None) -> None:
        """Release over target. No valid target cancels."""
        if not self.active:
            return
        if target is None:
            self.cancel()
            return
        self.hover(target)
        if self.active:
            self._finish(DragState.DROPPED)

    def put_down(self) -> None:
        """Keyboard drop: keep the card where the last step put it."""
        if self.active:
            self._finish(DragState.DROPPED)

    def cancel(self) -> None:
        """Abandon the drag. Provisional placement is kept, not rolled back."""
        if not self.active:
            self._press = None
            return
        self._finish(DragState.CANCELLED)

    # -- keyboard gestures --

    def step(self, direction: str) -> None:
        """Move the dragged card one slot (up/down) or one column (left/right)."""
        if not self.active:
            return
        card = self.store.get(self.card_id)
        if card is None:
            self.cancel()
            return
        dx, dy = STEPS[direction]
        ids = self.store.ids_in(card.column_id)
        index = ids.index(card.id)
        if dx:
            col_idx = COLUMNS.index(card.column_id) + dx
            if not 0 <= col_idx < len(COLUMNS):
                return
            column = COLUMNS[col_idx]
            index = min(index, len(self.store.cards_in(column)))
        else:
            column = card.column_id
            index += dy
            if not 0 <= index < len(ids):
                return
        self._target = None
        self._move_to(card.id, card.column_id, column, index)

    def nudge(self, card_id: str, direction: str) -> None:
        """One-shot keyboard move: pick up, step once, drop."""
        if not self.begin(card_id):
            return
        self.step(direction)
        self.put_down()

    # -- internals --

    def _placement(self, target: HoverTarget) -> tuple[ColumnId, int] | None:
        if isinstance(target, ColumnTarget):
            return target.column, len(self.store.cards_in(target.column))
        if target.card_id == self.card_id:
            return None
        other = self.store.get(target.card_id)
        if other is None:
            return None
        return other.column_id, self.store.index_of(other.id)

    def _place(self, target: HoverTarget) -> None:
        card = self.store.get(self.card_id)
        if card is None:
            logger.debug("dragged card %s vanished", self.card_id)
            self.cancel()
            return
        placement = self._placement(target)
        if placement is None:
            return
        column, index = placement
        self._move_to(card.id, card.column_id, column, index)

    def _move_to(self, card_id: str, current: ColumnId, column: ColumnId, index: int) -> None:
        if column is current:
            index = min(index, len(self.store.cards_in(column)) - 1)
            if index == self.store.index_of(card_id):
                return
            self.dispatch(MoveIntent(card_id, current, column, index), persist=False)
            if column not in self._pending:
                self._pending.append(column)
            return
        self.dispatch(MoveIntent(card_id, current, column, index))

    def _flush(self) -> list[Intent]:
        intents = [ReorderIntent(column, tuple(self.store.ids_in(column))) for column in self._pending]
        self._pending = []
        for intent in intents:
            self.dispatch(intent)
        return intents

    def _finish(self, outcome: DragState) -> None:
        self.state = outcome
        self._flush()
        self.outcome = outcome
        self.state = DragState.IDLE
        self.card_id = None
        self.origin = None
        self._target = None
        self._press = None
