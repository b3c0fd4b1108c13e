"""Column widgets for kansync UI."""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Rule, Static

from kansync.drag import CardTarget, ColumnTarget, HoverTarget
from kansync.model.card import COLUMN_TITLES, ColumnId
from kansync.session import Session
from kansync.ui.card import AddCard, CardWidget
from kansync.ui.drag import DropTarget
from kansync.ui.watcher import StoreWatcherMixin

NUDGE_KEYS = {
    "shift+up": "up",
    "shift+down": "down",
    "shift+left": "left",
    "shift+right": "right",
}


class ColumnWidget(StoreWatcherMixin, DropTarget, Vertical):
    """A single column on the board."""

    DEFAULT_CSS = """
    ColumnWidget {
        width: 1fr;
        height: auto;
        min-height: 100%;
        padding: 0 1;
        border-right: tall $surface-lighten-1;
    }
    ColumnWidget > .column-title {
        width: 100%;
        text-align: center;
        text-style: bold;
    }
    ColumnWidget > Rule.-horizontal {
        margin: 0;
    }
    """

    def __init__(self, column: ColumnId, session: Session):
        self._init_watcher()
        super().__init__(id=f"column-{column.value}")
        self.column = column
        self.session = session
        self._widgets: dict[str, CardWidget] = {}

    def compose(self) -> ComposeResult:
        yield Static(COLUMN_TITLES[self.column], classes="column-title")
        yield Rule()
        for card in self.session.cards.cards_in(self.column):
            widget = CardWidget(card, self.session)
            self._widgets[card.id] = widget
            yield widget
        yield AddCard(self.column, self.session)

    def on_mount(self) -> None:
        self.store_watch(self.session.cards, self.column.value, self._on_cards_changed)

    def _on_cards_changed(self, store, key, old, new) -> None:
        self.schedule_refresh(self._sync_cards)

    def _sync_cards(self) -> None:
        """Make the card children match the column's ordered view."""
        if not self.is_attached:
            return
        ids = self.session.cards.ids_in(self.column)
        wanted = set(ids)

        for card_id in list(self._widgets):
            if card_id not in wanted:
                self._widgets.pop(card_id).remove()

        add_card = self.query_one(AddCard)
        for card_id in ids:
            if card_id not in self._widgets:
                widget = CardWidget(self.session.cards.get(card_id), self.session)
                self.mount(widget, before=add_card)
                self._widgets[card_id] = widget

        anchor = add_card
        for card_id in reversed(ids):
            self.move_child(self._widgets[card_id], before=anchor)
            anchor = self._widgets[card_id]

        for widget in self._widgets.values():
            widget.refresh_card()

    # -- DropTarget --

    def drop_target_at(self, x: int, y: int) -> HoverTarget | None:
        for card_id, widget in self._widgets.items():
            if widget.region.contains(x, y):
                return CardTarget(card_id)
        return ColumnTarget(self.column)

    # -- keyboard --

    def on_key(self, event) -> None:
        """Arrow key focus movement and shift+arrow card nudges."""
        if event.key not in ("up", "down", *NUDGE_KEYS):
            return
        focused = self.screen.focused
        focusable = [c for c in self.children if c.can_focus]
        if focused not in focusable:
            return

        if event.key in NUDGE_KEYS:
            if not isinstance(focused, CardWidget):
                return
            card_id = focused.card_id
            self.session.drag.nudge(card_id, NUDGE_KEYS[event.key])
            self.call_after_refresh(self._refocus_card, card_id)
        else:
            idx = focusable.index(focused)
            if event.key == "up" and idx > 0:
                focusable[idx - 1].focus()
            elif event.key == "down" and idx < len(focusable) - 1:
                focusable[idx + 1].focus()

        event.prevent_default()
        event.stop()

    def _refocus_card(self, card_id: str) -> None:
        """Focus a card by id wherever it ended up on the screen."""
        for card in self.screen.query(CardWidget):
            if card.card_id == card_id:
                card.focus()
                return
