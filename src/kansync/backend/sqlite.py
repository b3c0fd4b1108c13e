"""SQLite-backed shared store.

Every write appends to a ``changes`` log in the same transaction. A
poller reads the log past its cursor and fans entries out to the open
subscriptions, so separate processes sharing the database file see each
other's writes as a push feed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from pathlib import Path

from kansync.backend.base import (
    DELETE,
    INSERT,
    UPDATE,
    Backend,
    BackendError,
    Result,
    Subscription,
    change_payload,
    key_column,
)
from kansync.model.card import utcnow

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.2

TABLE_COLUMNS = {
    "cards": ("id", "owner", "title", "description", "column_id", "position", "created_at"),
    "todos": ("id", "owner", "text", "completed", "created_at"),
    "notes": ("owner", "content", "updated_at"),
}

SCHEMA = """
CREATE TABLE IF NOT EXISTS cards (
    id TEXT PRIMARY KEY,
    owner TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    description TEXT,
    column_id TEXT NOT NULL,
    position INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS cards_owner ON cards (owner, column_id, position);
CREATE TABLE IF NOT EXISTS todos (
    id TEXT PRIMARY KEY,
    owner TEXT NOT NULL,
    text TEXT NOT NULL DEFAULT '',
    completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS notes (
    owner TEXT PRIMARY KEY,
    content TEXT NOT NULL DEFAULT '',
    updated_at TEXT
);
CREATE TABLE IF NOT EXISTS changes (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    tbl TEXT NOT NULL,
    owner TEXT NOT NULL,
    event_type TEXT NOT NULL,
    row_key TEXT NOT NULL,
    row_json TEXT
);
"""


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection in WAL mode with dict-like rows."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


def _to_dict(table: str, row: sqlite3.Row | None) -> dict | None:
    if row is None:
        return None
    data = dict(row)
    if table == "todos":
        data["completed"] = bool(data["completed"])
    return data


def _check_columns(table: str, keys) -> None:
    unknown = set(keys) - set(TABLE_COLUMNS[table])
    if unknown:
        raise BackendError(f"unknown {table} columns: {', '.join(sorted(unknown))}")


def _fetch(conn: sqlite3.Connection, table: str, key: str) -> dict | None:
    sql = f"SELECT * FROM {table} WHERE {key_column(table)} = ?"
    return _to_dict(table, conn.execute(sql, (key,)).fetchone())


def _log(conn: sqlite3.Connection, table: str, event: str, key: str, row: dict | None, owner: str) -> None:
    conn.execute(
        "INSERT INTO changes (tbl, owner, event_type, row_key, row_json) VALUES (?, ?, ?, ?, ?)",
        (table, owner, event, key, json.dumps(row) if row is not None else None),
    )


class SqliteBackend(Backend):
    """Shared store in a single SQLite file."""

    def __init__(self, db_path: str | Path, poll_interval: float = POLL_INTERVAL):
        super().__init__()
        self.db_path = str(db_path)
        self.poll_interval = poll_interval
        self._cursor: int | None = None
        self._poller: asyncio.Task | None = None
        self._poll_lock = asyncio.Lock()
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with _connect(self.db_path) as conn:
            conn.executescript(SCHEMA)
        conn.close()

    async def _run(self, fn, *args) -> Result:
        """Run a blocking write/read in a thread and wrap failures."""

        def _call():
            conn = _connect(self.db_path)
            try:
                with conn:
                    return fn(conn, *args)
            finally:
                conn.close()

        try:
            rows = await asyncio.to_thread(_call)
        except (sqlite3.Error, BackendError) as e:
            error = e if isinstance(e, BackendError) else BackendError(str(e))
            return Result(error=error)
        return Result(rows)

    # -- row calls --

    async def select(self, table: str, owner: str) -> Result:
        def _select(conn):
            key_column(table)
            rows = conn.execute(f"SELECT * FROM {table} WHERE owner = ?", (owner,)).fetchall()
            return [_to_dict(table, r) for r in rows]

        return await self._run(_select)

    async def insert(self, table: str, row: dict) -> Result:
        def _insert(conn):
            key = row.get(key_column(table))
            if key is None:
                raise BackendError(f"{table} row has no {key_column(table)}")
            values = {"created_at": utcnow(), **row} if "created_at" in TABLE_COLUMNS[table] else dict(row)
            _check_columns(table, values)
            names = ", ".join(values)
            marks = ", ".join("?" for _ in values)
            try:
                conn.execute(f"INSERT INTO {table} ({names}) VALUES ({marks})", tuple(values.values()))
            except sqlite3.IntegrityError:
                raise BackendError(f"duplicate key {key!r} in {table}") from None
            stored = _fetch(conn, table, key)
            _log(conn, table, INSERT, key, stored, stored["owner"])
            return [stored]

        return await self._run(_insert)

    async def update(self, table: str, partial: dict, match: str) -> Result:
        def _update(conn):
            _check_columns(table, partial)
            if not partial:
                return []
            assignments = ", ".join(f"{name} = ?" for name in partial)
            cur = conn.execute(
                f"UPDATE {table} SET {assignments} WHERE {key_column(table)} = ?",
                (*partial.values(), match),
            )
            if cur.rowcount == 0:
                return []
            stored = _fetch(conn, table, match)
            _log(conn, table, UPDATE, match, stored, stored["owner"])
            return [stored]

        return await self._run(_update)

    async def delete(self, table: str, match: str) -> Result:
        def _delete(conn):
            stored = _fetch(conn, table, match)
            if stored is None:
                return []
            conn.execute(f"DELETE FROM {table} WHERE {key_column(table)} = ?", (match,))
            _log(conn, table, DELETE, match, None, stored["owner"])
            return [stored]

        return await self._run(_delete)

    async def upsert(self, table: str, row: dict) -> Result:
        def _upsert(conn):
            key = row.get(key_column(table))
            if key is None:
                raise BackendError(f"{table} row has no {key_column(table)}")
            _check_columns(table, row)
            event = UPDATE if _fetch(conn, table, key) is not None else INSERT
            names = ", ".join(row)
            marks = ", ".join("?" for _ in row)
            conn.execute(f"INSERT OR REPLACE INTO {table} ({names}) VALUES ({marks})", tuple(row.values()))
            stored = _fetch(conn, table, key)
            _log(conn, table, event, key, stored, stored["owner"])
            return [stored]

        return await self._run(_upsert)

    # -- change feed --

    def subscribe(self, table: str, owner: str) -> Subscription:
        sub = super().subscribe(table, owner)
        if self._cursor is None:
            self._read_changes()
        if self._poller is None:
            self._poller = asyncio.get_running_loop().create_task(self._poll_forever())
        return sub

    def _read_changes(self) -> list[sqlite3.Row]:
        conn = _connect(self.db_path)
        try:
            if self._cursor is None:
                (self._cursor,) = conn.execute("SELECT COALESCE(MAX(seq), 0) FROM changes").fetchone()
                return []
            return conn.execute(
                "SELECT * FROM changes WHERE seq > ? ORDER BY seq",
                (self._cursor,),
            ).fetchall()
        finally:
            conn.close()

    async def poll(self) -> int:
        """Deliver log entries past the cursor. Returns how many were read."""
        async with self._poll_lock:
            entries = await asyncio.to_thread(self._read_changes)
            for entry in entries:
                self._cursor = entry["seq"]
                new = json.loads(entry["row_json"]) if entry["row_json"] else None
                payload = change_payload(entry["tbl"], entry["event_type"], new, entry["row_key"])
                self._publish(payload, entry["owner"])
        return len(entries)

    async def _poll_forever(self) -> None:
        while True:
            try:
                await self.poll()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("change feed poll failed")
            await asyncio.sleep(self.poll_interval)

    async def close(self) -> None:
        await super().close()
        if self._poller is not None:
            self._poller.cancel()
            try:
                await self._poller
            except asyncio.CancelledError:
                pass
            self._poller = None
