"""Shared-store interface: row calls and per-table change feeds."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable

TABLE_KEYS = {
    "cards": "id",
    "todos": "id",
    "notes": "owner",
}

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


class BackendError(Exception):
    """A remote call failed. Returned in Result.error, not raised."""


@dataclass
class Result:
    data: list[dict] = field(default_factory=list)
    error: BackendError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def key_column(table: str) -> str:
    try:
        return TABLE_KEYS[table]
    except KeyError:
        raise BackendError(f"unknown table {table!r}") from None


def change_payload(table: str, event_type: str, new: dict | None, key: str) -> dict:
    """Build a feed payload the way the shared store emits it."""
    return {
        "table": table,
        "eventType": event_type,
        "new": dict(new) if new is not None else None,
        "old": {key_column(table): key},
    }


_CLOSED = object()


class Subscription:
    """Change feed for one table, filtered to one owner.

    Async-iterate to receive payloads in delivery order. Iteration ends
    once ``close()`` is called.
    """

    def __init__(self, table: str, owner: str, on_close: Callable[[Subscription], None] | None = None):
        self.table = table
        self.owner = owner
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, payload: dict) -> None:
        if not self._closed:
            self._queue.put_nowait(payload)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        if self._on_close is not None:
            self._on_close(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> dict:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Subscription {self.table} owner={self.owner} {state}>"


class Backend(ABC):
    """A shared store several sessions read, write and listen to.

    Every call is an independent round trip. Remote failures come back
    as ``Result.error``.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    @abstractmethod
    async def select(self, table: str, owner: str) -> Result:
        """All rows of table belonging to owner."""

    @abstractmethod
    async def insert(self, table: str, row: dict) -> Result:
        """Insert a row. Fails if its key already exists."""

    @abstractmethod
    async def update(self, table: str, partial: dict, match: str) -> Result:
        """Update fields of the row keyed by match. A missing row is a no-op."""

    @abstractmethod
    async def delete(self, table: str, match: str) -> Result:
        """Delete the row keyed by match. A missing row is a no-op."""

    @abstractmethod
    async def upsert(self, table: str, row: dict) -> Result:
        """Insert or fully replace a row by its key."""

    def subscribe(self, table: str, owner: str) -> Subscription:
        """Open a change feed for table, scoped to owner."""
        key_column(table)
        sub = Subscription(table, owner, on_close=self._release)
        self._subscriptions.append(sub)
        return sub

    def _release(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)

    def _publish(self, payload: dict, owner: str) -> None:
        """Fan a payload out to the matching open subscriptions."""
        for sub in list(self._subscriptions):
            if sub.table == payload["table"] and sub.owner == owner:
                sub.deliver(payload)

    async def close(self) -> None:
        for sub in list(self._subscriptions):
            sub.close()
