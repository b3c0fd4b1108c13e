"""Tests for the SQLite backend and its polled change feed."""

import pytest

from kansync.backend.sqlite import SqliteBackend

OWNER = "alice@example.com"


def _card(card_id="c1", owner=OWNER, position=0):
    return {"id": card_id, "owner": owner, "title": "t", "column_id": "todo", "position": position}


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "store" / "board.db"


def test_creates_database(db_path):
    SqliteBackend(db_path)
    assert db_path.exists()


@pytest.mark.asyncio
async def test_row_calls(db_path):
    backend = SqliteBackend(db_path)
    assert (await backend.insert("cards", _card())).ok
    assert (await backend.update("cards", {"position": 3, "title": "x"}, "c1")).ok

    result = await backend.select("cards", OWNER)
    assert result.data[0]["position"] == 3
    assert result.data[0]["title"] == "x"
    assert result.data[0]["created_at"]

    assert (await backend.delete("cards", "c1")).data[0]["id"] == "c1"
    assert (await backend.delete("cards", "c1")).data == []
    assert (await backend.select("cards", OWNER)).data == []


@pytest.mark.asyncio
async def test_duplicate_insert_is_error(db_path):
    backend = SqliteBackend(db_path)
    await backend.insert("cards", _card())
    result = await backend.insert("cards", _card())
    assert not result.ok
    assert "duplicate" in str(result.error)


@pytest.mark.asyncio
async def test_unknown_column_is_error(db_path):
    backend = SqliteBackend(db_path)
    await backend.insert("cards", _card())
    result = await backend.update("cards", {"colour": "red"}, "c1")
    assert not result.ok
    assert "colour" in str(result.error)


@pytest.mark.asyncio
async def test_todo_completed_is_bool(db_path):
    backend = SqliteBackend(db_path)
    await backend.insert("todos", {"id": "t1", "owner": OWNER, "text": "milk", "completed": True})
    result = await backend.select("todos", OWNER)
    assert result.data[0]["completed"] is True


@pytest.mark.asyncio
async def test_feed_crosses_backend_instances(db_path):
    """Two backends on one file see each other's writes through the log."""
    reader = SqliteBackend(db_path, poll_interval=60)
    writer = SqliteBackend(db_path)

    await writer.insert("cards", _card("old"))
    sub = reader.subscribe("cards", OWNER)
    other = reader.subscribe("cards", "bob")

    await writer.insert("cards", _card("new"))
    await writer.update("cards", {"position": 2}, "new")
    await writer.insert("cards", _card("bobs", owner="bob"))
    await reader.poll()
    await reader.close()

    events = [p async for p in sub]
    assert [(e["eventType"], e["new"]["id"]) for e in events] == [("INSERT", "new"), ("UPDATE", "new")]
    assert [p["new"]["id"] async for p in other] == ["bobs"]


@pytest.mark.asyncio
async def test_notes_upsert_events(db_path):
    backend = SqliteBackend(db_path, poll_interval=60)
    sub = backend.subscribe("notes", OWNER)
    await backend.upsert("notes", {"owner": OWNER, "content": "a", "updated_at": "now"})
    await backend.upsert("notes", {"owner": OWNER, "content": "b", "updated_at": "later"})
    await backend.poll()
    await backend.close()

    events = [p async for p in sub]
    assert [e["eventType"] for e in events] == ["INSERT", "UPDATE"]
    assert events[1]["new"]["content"] == "b"
    assert events[1]["old"] == {"owner": OWNER}


@pytest.mark.asyncio
async def test_delete_event_has_key_only(db_path):
    backend = SqliteBackend(db_path, poll_interval=60)
    await backend.insert("cards", _card())
    sub = backend.subscribe("cards", OWNER)
    await backend.delete("cards", "c1")
    await backend.poll()
    await backend.close()

    (event,) = [p async for p in sub]
    assert event["eventType"] == "DELETE"
    assert event["new"] is None
    assert event["old"] == {"id": "c1"}
