"""Side panel: the user's todo list and free-text note."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Checkbox, Input, Rule, Static, TextArea

from kansync.model.card import TodoItem
from kansync.session import Session
from kansync.ui.watcher import StoreWatcherMixin


class TodoRow(Horizontal):
    """One todo: a checkbox plus a delete marker."""

    DEFAULT_CSS = """
    TodoRow {
        height: auto;
    }
    TodoRow > Checkbox {
        width: 1fr;
        border: none;
    }
    TodoRow > Button {
        width: 3;
        min-width: 3;
        height: 1;
        border: none;
    }
    """

    def __init__(self, todo: TodoItem, session: Session):
        super().__init__()
        self.todo_id = todo.id
        self.session = session
        self._todo = todo

    def compose(self) -> ComposeResult:
        yield Checkbox(self._todo.text, self._todo.completed)
        yield Button("✕", id="todo-delete")

    def update_todo(self, todo: TodoItem) -> None:
        self._todo = todo
        checkbox = self.query_one(Checkbox)
        checkbox.label = todo.text
        if checkbox.value != todo.completed:
            with checkbox.prevent(Checkbox.Changed):
                checkbox.value = todo.completed

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        event.stop()
        todo = self.session.todos.get(self.todo_id)
        if todo is not None and todo.completed != event.value:
            self.session.toggle_todo(self.todo_id)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.session.delete_todo(self.todo_id)


class TodoPanel(StoreWatcherMixin, Vertical):
    """Todo list with an input for new items."""

    DEFAULT_CSS = """
    TodoPanel {
        height: auto;
    }
    TodoPanel > #todo-title {
        text-style: bold;
    }
    """

    def __init__(self, session: Session):
        self._init_watcher()
        super().__init__(id="todos")
        self.session = session
        self._rows: dict[str, TodoRow] = {}

    def compose(self) -> ComposeResult:
        yield Static("Todo", id="todo-title")
        for todo in self.session.todos.items():
            row = TodoRow(todo, self.session)
            self._rows[todo.id] = row
            yield row
        yield Input(placeholder="+ add todo", id="todo-input")

    def on_mount(self) -> None:
        self.store_watch(self.session.todos, "*", self._on_todos_changed)

    def _on_todos_changed(self, store, key, old, new) -> None:
        self.schedule_refresh(self._sync_rows)

    def _sync_rows(self) -> None:
        if not self.is_attached:
            return
        items = self.session.todos.items()
        wanted = {todo.id for todo in items}
        for todo_id in list(self._rows):
            if todo_id not in wanted:
                self._rows.pop(todo_id).remove()
        anchor = self.query_one("#todo-input", Input)
        for todo in items:
            row = self._rows.get(todo.id)
            if row is None:
                row = TodoRow(todo, self.session)
                self._rows[todo.id] = row
                self.mount(row, before=anchor)
            elif row.is_mounted:
                row.update_todo(todo)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        text = event.value.strip()
        if text:
            self.session.add_todo(text)
        event.input.value = ""


class NotesArea(StoreWatcherMixin, Vertical):
    """Free-text note, saved a moment after typing starts."""

    DEFAULT_CSS = """
    NotesArea {
        height: 1fr;
    }
    NotesArea > #notes-title {
        text-style: bold;
    }
    NotesArea > TextArea {
        height: 1fr;
    }
    """

    def __init__(self, session: Session):
        self._init_watcher()
        super().__init__(id="notes")
        self.session = session

    def compose(self) -> ComposeResult:
        yield Static("Notes", id="notes-title")
        yield TextArea(self.session.state.notes.content, id="notes-text")

    def on_mount(self) -> None:
        self.store_watch(self.session.state.notes, "content", self._on_notes_changed)

    def _on_notes_changed(self, store, key, old, new) -> None:
        # Local typing is pending a write; a remote echo must not clobber it.
        if self.session.notes_writer.pending:
            return
        text_area = self.query_one(TextArea)
        if text_area.text != new:
            text_area.load_text(new)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        event.stop()
        text = event.text_area.text
        if text != self.session.state.notes.content:
            self.session.set_notes(text)


class SidePanel(Vertical):
    DEFAULT_CSS = """
    SidePanel {
        width: 32;
        padding: 0 1;
    }
    """

    def __init__(self, session: Session):
        super().__init__(id="side")
        self.session = session

    def compose(self) -> ComposeResult:
        yield TodoPanel(self.session)
        yield Rule()
        yield NotesArea(self.session)
