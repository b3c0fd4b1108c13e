"""Main Textual application for kansync."""

from textual.app import App

from kansync.backend import Backend, SqliteBackend
from kansync.session import Session, User
from kansync.ui.board import BoardScreen


class KansyncApp(App):
    """Synced three-column kanban board TUI."""

    TITLE = "kansync"
    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(self, settings: dict, backend: Backend | None = None):
        super().__init__()
        self.settings = settings
        self._own_backend = backend is None
        self.backend = backend
        self.session: Session | None = None

    async def on_mount(self) -> None:
        if self.backend is None:
            self.backend = SqliteBackend(
                self.settings["database"],
                poll_interval=self.settings["poll_interval_ms"] / 1000,
            )
        self.session = Session(
            self.backend,
            User(self.settings["user"]),
            note_delay=self.settings["note_delay_ms"] / 1000,
            drag_threshold=self.settings["drag_threshold"],
        )
        await self.session.open()
        self.push_screen(BoardScreen(self.session))

    async def action_quit(self) -> None:
        """Flush the note, wait for writes and quit."""
        if self.session is not None:
            await self.session.close()
            self.session = None
        if self._own_backend and self.backend is not None:
            await self.backend.close()
        self.exit()
