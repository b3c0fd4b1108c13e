"""Tests for the session-local stores."""

from dataclasses import replace

from kansync.model.card import ColumnId, TodoItem
from kansync.model.store import CardStore, NoteBuffer, SessionState, TodoStore


def test_cards_in_sorted_by_position(make_card):
    store = CardStore([make_card("b", position=1), make_card("a", position=0), make_card("c", position=2)])
    assert store.ids_in(ColumnId.TODO) == ["a", "b", "c"]


def test_cards_in_ties_fall_back_to_created_then_id(make_card):
    early = make_card("z", position=0)
    late = replace(make_card("a", position=1), position=0)
    store = CardStore([late, early])
    assert store.ids_in(ColumnId.TODO) == ["z", "a"]


def test_cards_in_filters_column(board):
    assert board.ids_in(ColumnId.PROGRESS) == ["d", "e"]
    assert board.ids_in(ColumnId.COMPLETE) == []


def test_cards_in_accepts_string_column(board):
    assert board.ids_in("progress") == ["d", "e"]


def test_index_of(board):
    assert board.index_of("c") == 2
    assert board.index_of("d") == 0
    assert board.index_of("missing") is None


def test_upsert_emits_old_and_new_column(board):
    calls = []
    board.watch("todo", lambda store, key, old, new: calls.append(key))
    board.watch("progress", lambda store, key, old, new: calls.append(key))

    board.upsert(replace(board.get("a"), column_id=ColumnId.PROGRESS))

    assert calls == ["todo", "progress"]


def test_upsert_same_card_is_silent(board):
    calls = []
    board.watch("*", lambda *a: calls.append(a))
    board.upsert(board.get("a"))
    assert calls == []


def test_wildcard_fires_after_keys(board):
    calls = []
    board.watch("*", lambda store, key, old, new: calls.append(key))
    board.watch("todo", lambda store, key, old, new: calls.append(key))
    board.remove("b")
    assert calls == ["todo", "*"]


def test_unwatch(board):
    calls = []
    unwatch = board.watch("todo", lambda *a: calls.append(a))
    unwatch()
    board.remove("a")
    assert calls == []


def test_watch_accepts_column_id(board):
    calls = []
    board.watch(ColumnId.TODO, lambda store, key, old, new: calls.append(key))
    board.remove("a")
    assert calls == ["todo"]


def test_remove_returns_card(board):
    card = board.remove("a")
    assert card.id == "a"
    assert "a" not in board
    assert board.remove("a") is None


def test_replace_all_notifies_every_column(board, make_card):
    calls = []
    board.watch("*", lambda store, key, old, new: calls.append(key))
    board.replace_all([make_card("x")])
    assert calls == ["todo", "progress", "complete", "*"]
    assert len(board) == 1


def test_iter_is_a_snapshot(board):
    for card in board:
        board.remove(card.id)
    assert len(board) == 0


def test_todo_store_creation_order():
    todos = TodoStore()
    todos.upsert(TodoItem("2", "me", "second", created_at="2024-01-02"))
    todos.upsert(TodoItem("1", "me", "first", created_at="2024-01-01"))
    assert [t.text for t in todos.items()] == ["first", "second"]


def test_todo_store_emits_on_item_key():
    todos = TodoStore()
    calls = []
    todos.watch("t1", lambda store, key, old, new: calls.append((old, new)))
    item = TodoItem("t1", "me", "buy milk")
    todos.upsert(item)
    todos.remove("t1")
    assert calls == [(None, item), (item, None)]


def test_note_buffer_emits_only_on_change():
    notes = NoteBuffer()
    calls = []
    notes.watch("content", lambda store, key, old, new: calls.append((old, new)))
    notes.content = "hello"
    notes.content = "hello"
    assert calls == [("", "hello")]


def test_session_state_is_per_owner():
    one = SessionState("alice")
    two = SessionState("bob")
    assert one.cards is not two.cards
    assert one.owner == "alice"
