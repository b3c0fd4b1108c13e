"""Shared-store backends."""

from kansync.backend.base import Backend, BackendError, Result, Subscription
from kansync.backend.memory import MemoryBackend
from kansync.backend.sqlite import SqliteBackend

__all__ = [
    "Backend",
    "BackendError",
    "MemoryBackend",
    "Result",
    "SqliteBackend",
    "Subscription",
]
