"""Typed change-feed events.

Raw feed payloads look like ``{"eventType": "UPDATE", "new": {...},
"old": {"id": ...}}``. They are mapped here, at the boundary, into
Created/Updated/Deleted carrying typed rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from kansync.backend.base import DELETE, INSERT, UPDATE, key_column
from kansync.model.card import Card, Note, RowError, TodoItem, card_from_row, note_from_row, todo_from_row

Row = Card | TodoItem | Note

ROW_MAPPERS: dict[str, Callable[[dict], Any]] = {
    "cards": card_from_row,
    "todos": todo_from_row,
    "notes": note_from_row,
}


@dataclass(frozen=True)
class Created:
    row: Row


@dataclass(frozen=True)
class Updated:
    row: Row


@dataclass(frozen=True)
class Deleted:
    key: str


RowEvent = Created | Updated | Deleted


def parse_change(table: str, payload: dict) -> RowEvent:
    """Map a raw feed payload for table into a typed event.

    Raises RowError if the payload does not have the expected shape.
    """
    if not isinstance(payload, dict):
        raise RowError(f"payload is not a mapping: {payload!r}")
    mapper = ROW_MAPPERS.get(table)
    if mapper is None:
        raise RowError(f"no row type for table {table!r}")

    event_type = payload.get("eventType")
    if event_type == INSERT:
        return Created(mapper(payload.get("new")))
    if event_type == UPDATE:
        return Updated(mapper(payload.get("new")))
    if event_type == DELETE:
        old = payload.get("old") or {}
        key = old.get(key_column(table)) if isinstance(old, dict) else None
        if key is None:
            raise RowError(f"{table} delete without {key_column(table)}")
        return Deleted(str(key))
    raise RowError(f"unknown event type {event_type!r}")
