"""Board screen showing the three columns and the side panel."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import Footer, Static

from kansync.model.card import COLUMNS
from kansync.session import Session
from kansync.ui.card import CardWidget
from kansync.ui.column import ColumnWidget
from kansync.ui.drag import DragRouter
from kansync.ui.side import SidePanel


class BoardScreen(DragRouter, Screen):
    """Main board screen."""

    CSS = """
    BoardScreen {
        layers: base overlay;
    }
    #board-header {
        height: 1;
        background: $primary-background;
    }
    #board-title {
        width: 1fr;
        text-style: bold;
        padding: 0 1;
    }
    #columns {
        width: 1fr;
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel_drag", "Cancel drag", show=False),
        ("ctrl+r", "refetch", "Reload"),
    ]

    def __init__(self, session: Session):
        super().__init__()
        self.session = session
        self._init_drag_router(session.drag)

    def compose(self) -> ComposeResult:
        with Horizontal(id="board-header"):
            yield Static(f"kansync: {self.session.user.id}", id="board-title")
        with Horizontal(id="body"):
            with Horizontal(id="columns"):
                for column in COLUMNS:
                    yield ColumnWidget(column, self.session)
            yield SidePanel(self.session)
        yield Footer()

    def on_mount(self) -> None:
        self.call_after_refresh(self._focus_first_card)

    def _focus_first_card(self) -> None:
        for col in self.query(ColumnWidget):
            cards = col.query(CardWidget)
            if cards:
                cards.first().focus()
                return

    async def action_refetch(self) -> None:
        await self.session.refetch()
        self.notify("Reloaded from the shared store")
