"""Card widgets for kansync UI."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

from kansync.drag import DragController
from kansync.model.card import Card, ColumnId
from kansync.session import Session
from kansync.ui.drag import DraggableMixin


class CardWidget(DraggableMixin, Static, can_focus=True):
    """A single card in a column."""

    BINDINGS = [
        ("enter", "edit_card"),
        ("delete", "delete_card"),
    ]

    DEFAULT_CSS = """
    CardWidget {
        width: 100%;
        height: auto;
        padding: 0 1;
        margin-bottom: 1;
        background: $surface;
    }
    CardWidget:focus {
        background: $primary;
    }
    CardWidget.dragging {
        opacity: 0.4;
    }
    """

    def __init__(self, card: Card, session: Session):
        Static.__init__(self, card.title or card.id)
        self._init_draggable()
        self.card_id = card.id
        self.session = session
        self.title_text = card.title or card.id

    @property
    def drag(self) -> DragController:
        return self.session.drag

    def refresh_card(self) -> None:
        """Pull the latest title from the store."""
        card = self.session.cards.get(self.card_id)
        if card is None:
            return
        title = card.title or card.id
        if title != self.title_text:
            self.title_text = title
            self.update(title)
        self.set_class(self.drag.active and self.drag.card_id == self.card_id, "dragging")

    def draggable_clicked(self) -> None:
        self.action_edit_card()

    def action_edit_card(self) -> None:
        card = self.session.cards.get(self.card_id)
        if card is not None:
            self.app.push_screen(EditCardModal(card), self._on_edit_closed)

    def _on_edit_closed(self, result: tuple[str, str] | None) -> None:
        if result is None:
            return
        title, description = result
        if title:
            self.session.edit_card(self.card_id, title, description or None)

    def action_delete_card(self) -> None:
        self.session.delete_card(self.card_id)


class AddCard(Input):
    """Input at the bottom of a column that appends a new card."""

    DEFAULT_CSS = """
    AddCard {
        width: 100%;
        border: dashed $surface-lighten-2;
    }
    """

    def __init__(self, column: ColumnId, session: Session):
        super().__init__(placeholder="+ add card")
        self.column = column
        self.session = session

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        title = event.value.strip()
        if title:
            self.session.add_card(self.column, title)
        self.value = ""


class EditCardModal(ModalScreen[tuple[str, str] | None]):
    """Modal for editing a card's title and description."""

    CSS = """
    EditCardModal {
        align: center middle;
    }
    #dialog {
        width: 70;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }
    #buttons {
        width: 100%;
        height: 3;
        align: center middle;
    }
    Button {
        margin: 0 2;
    }
    """

    BINDINGS = [("escape", "dismiss_none", "Cancel")]

    def __init__(self, card: Card):
        super().__init__()
        self.card = card

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Input(self.card.title, placeholder="Title", id="title")
            yield Input(self.card.description or "", placeholder="Description", id="description")
            with Horizontal(id="buttons"):
                yield Button("Save", id="save", variant="primary")
                yield Button("Cancel", id="cancel")

    def _result(self) -> tuple[str, str]:
        title = self.query_one("#title", Input).value.strip()
        description = self.query_one("#description", Input).value.strip()
        return title, description

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(self._result())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(self._result() if event.button.id == "save" else None)

    def action_dismiss_none(self) -> None:
        self.dismiss(None)
