"""In-process shared store.

Sessions created in the same process against one MemoryBackend see
each other's writes through their change feeds, which is how the TUI
runs several boards side by side and how the tests exercise sync.
"""

from __future__ import annotations

import asyncio
import copy

from kansync.backend.base import (
    DELETE,
    INSERT,
    UPDATE,
    Backend,
    BackendError,
    Result,
    change_payload,
    key_column,
)
from kansync.model.card import utcnow


class MemoryBackend(Backend):
    """Tables as dicts of rows keyed by their key column."""

    def __init__(self) -> None:
        super().__init__()
        self.tables: dict[str, dict[str, dict]] = {"cards": {}, "todos": {}, "notes": {}}

    def _table(self, table: str) -> dict[str, dict]:
        key_column(table)
        return self.tables[table]

    async def select(self, table: str, owner: str) -> Result:
        await asyncio.sleep(0)
        try:
            rows = self._table(table)
        except BackendError as e:
            return Result(error=e)
        return Result([copy.deepcopy(r) for r in rows.values() if r.get("owner") == owner])

    async def insert(self, table: str, row: dict) -> Result:
        await asyncio.sleep(0)
        try:
            rows = self._table(table)
            key = row.get(key_column(table))
            if key is None:
                raise BackendError(f"{table} row has no {key_column(table)}")
            if key in rows:
                raise BackendError(f"duplicate key {key!r} in {table}")
        except BackendError as e:
            return Result(error=e)
        stored = {"created_at": utcnow(), **copy.deepcopy(row)}
        rows[key] = stored
        self._publish(change_payload(table, INSERT, stored, key), stored.get("owner"))
        return Result([copy.deepcopy(stored)])

    async def update(self, table: str, partial: dict, match: str) -> Result:
        await asyncio.sleep(0)
        try:
            rows = self._table(table)
        except BackendError as e:
            return Result(error=e)
        stored = rows.get(match)
        if stored is None:
            return Result()
        stored.update(copy.deepcopy(partial))
        self._publish(change_payload(table, UPDATE, stored, match), stored.get("owner"))
        return Result([copy.deepcopy(stored)])

    async def delete(self, table: str, match: str) -> Result:
        await asyncio.sleep(0)
        try:
            rows = self._table(table)
        except BackendError as e:
            return Result(error=e)
        stored = rows.pop(match, None)
        if stored is None:
            return Result()
        self._publish(change_payload(table, DELETE, None, match), stored.get("owner"))
        return Result([stored])

    async def upsert(self, table: str, row: dict) -> Result:
        await asyncio.sleep(0)
        try:
            rows = self._table(table)
            key = row.get(key_column(table))
            if key is None:
                raise BackendError(f"{table} row has no {key_column(table)}")
        except BackendError as e:
            return Result(error=e)
        event = UPDATE if key in rows else INSERT
        stored = copy.deepcopy(row)
        rows[key] = stored
        self._publish(change_payload(table, event, stored, key), stored.get("owner"))
        return Result([copy.deepcopy(stored)])
