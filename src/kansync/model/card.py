"""Row types for kansync boards and their mapping to shared-store rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class RowError(ValueError):
    """A row from the shared store does not fit the expected shape."""


class ColumnId(str, Enum):
    TODO = "todo"
    PROGRESS = "progress"
    COMPLETE = "complete"


COLUMNS: tuple[ColumnId, ...] = (ColumnId.TODO, ColumnId.PROGRESS, ColumnId.COMPLETE)

COLUMN_TITLES = {
    ColumnId.TODO: "To Do",
    ColumnId.PROGRESS: "In Progress",
    ColumnId.COMPLETE: "Done",
}


def utcnow() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def parse_column(value: Any) -> ColumnId:
    """Coerce a column id or its string value, raising RowError if unknown."""
    try:
        return ColumnId(value)
    except ValueError:
        raise RowError(f"unknown column {value!r}") from None


@dataclass(frozen=True)
class Card:
    id: str
    owner: str
    title: str
    column_id: ColumnId
    position: int
    description: str | None = None
    created_at: str = ""


@dataclass(frozen=True)
class TodoItem:
    id: str
    owner: str
    text: str
    completed: bool = False
    created_at: str = ""


@dataclass(frozen=True)
class Note:
    owner: str
    content: str = ""
    updated_at: str = ""


def _require(row: dict, *keys: str) -> None:
    if not isinstance(row, dict):
        raise RowError(f"expected a row mapping, got {type(row).__name__}")
    missing = [k for k in keys if row.get(k) is None]
    if missing:
        raise RowError(f"row is missing {', '.join(missing)}")


def card_from_row(row: dict) -> Card:
    """Map a ``cards`` row to a Card."""
    _require(row, "id", "owner", "column_id", "position")
    position = row["position"]
    if isinstance(position, bool) or not isinstance(position, int) or position < 0:
        raise RowError(f"invalid position {position!r} for card {row['id']}")
    return Card(
        id=str(row["id"]),
        owner=str(row["owner"]),
        title=row.get("title") or "",
        column_id=parse_column(row["column_id"]),
        position=position,
        description=row.get("description"),
        created_at=row.get("created_at") or "",
    )


def card_to_row(card: Card) -> dict:
    """Map a Card to a full ``cards`` row."""
    return {
        "id": card.id,
        "owner": card.owner,
        "title": card.title,
        "description": card.description,
        "column_id": card.column_id.value,
        "position": card.position,
        "created_at": card.created_at,
    }


def todo_from_row(row: dict) -> TodoItem:
    """Map a ``todos`` row to a TodoItem."""
    _require(row, "id", "owner")
    return TodoItem(
        id=str(row["id"]),
        owner=str(row["owner"]),
        text=row.get("text") or "",
        completed=bool(row.get("completed")),
        created_at=row.get("created_at") or "",
    )


def todo_to_row(todo: TodoItem) -> dict:
    return {
        "id": todo.id,
        "owner": todo.owner,
        "text": todo.text,
        "completed": todo.completed,
        "created_at": todo.created_at,
    }


def note_from_row(row: dict) -> Note:
    """Map a ``notes`` row to a Note."""
    _require(row, "owner")
    return Note(
        owner=str(row["owner"]),
        content=row.get("content") or "",
        updated_at=row.get("updated_at") or "",
    )
