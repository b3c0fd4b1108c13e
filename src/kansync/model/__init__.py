"""Card model, session stores and optimistic mutations."""

from kansync.model.card import (
    COLUMN_TITLES,
    COLUMNS,
    Card,
    ColumnId,
    Note,
    RowError,
    TodoItem,
    card_from_row,
    card_to_row,
    note_from_row,
    todo_from_row,
    todo_to_row,
)
from kansync.model.intents import Intent, MoveIntent, ReorderIntent
from kansync.model.mutator import (
    Mutation,
    add_card,
    apply_intent,
    delete_card,
    densify,
    edit_card,
    move_card,
    reorder_cards,
)
from kansync.model.store import CardStore, NoteBuffer, SessionState, TodoStore

__all__ = [
    "COLUMNS",
    "COLUMN_TITLES",
    "Card",
    "CardStore",
    "ColumnId",
    "Intent",
    "MoveIntent",
    "Mutation",
    "Note",
    "NoteBuffer",
    "ReorderIntent",
    "RowError",
    "SessionState",
    "TodoItem",
    "TodoStore",
    "add_card",
    "apply_intent",
    "card_from_row",
    "card_to_row",
    "delete_card",
    "densify",
    "edit_card",
    "move_card",
    "note_from_row",
    "reorder_cards",
    "todo_from_row",
    "todo_to_row",
]
