"""Tests for mapping shared-store rows to typed records."""

import pytest

from kansync.model.card import (
    Card,
    ColumnId,
    RowError,
    TodoItem,
    card_from_row,
    card_to_row,
    note_from_row,
    parse_column,
    todo_from_row,
    todo_to_row,
)


def _card_row(**overrides):
    row = {
        "id": "k7",
        "owner": "alice@example.com",
        "title": "draft",
        "description": None,
        "column_id": "progress",
        "position": 2,
        "created_at": "2024-01-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


def test_card_from_row():
    card = card_from_row(_card_row())
    assert card == Card(
        id="k7",
        owner="alice@example.com",
        title="draft",
        column_id=ColumnId.PROGRESS,
        position=2,
        created_at="2024-01-01T00:00:00+00:00",
    )


def test_card_to_row_matches_schema():
    row = card_to_row(card_from_row(_card_row()))
    assert row == _card_row()


def test_card_from_row_missing_fields():
    row = _card_row()
    del row["column_id"]
    with pytest.raises(RowError, match="column_id"):
        card_from_row(row)


@pytest.mark.parametrize("position", [-1, "2", 1.5, True, None])
def test_card_from_row_bad_position(position):
    with pytest.raises(RowError):
        card_from_row(_card_row(position=position))


def test_card_from_row_unknown_column():
    with pytest.raises(RowError, match="unknown column"):
        card_from_row(_card_row(column_id="backlog"))


def test_card_from_row_not_a_mapping():
    with pytest.raises(RowError):
        card_from_row(None)


def test_card_title_defaults_to_empty():
    assert card_from_row(_card_row(title=None)).title == ""


def test_parse_column():
    assert parse_column("todo") is ColumnId.TODO
    assert parse_column(ColumnId.COMPLETE) is ColumnId.COMPLETE


def test_todo_row_mapping():
    todo = todo_from_row({"id": "t1", "owner": "me", "text": "milk", "completed": 1})
    assert todo == TodoItem("t1", "me", "milk", completed=True)
    assert todo_to_row(todo)["completed"] is True


def test_note_from_row():
    note = note_from_row({"owner": "me", "content": None})
    assert note.content == ""

    with pytest.raises(RowError):
        note_from_row({"content": "orphan"})
