"""Mixin that manages store watches with auto-cleanup and batching."""

from __future__ import annotations

from typing import Any, Callable

from kansync.model.store import Callback, Watchable


class StoreWatcherMixin:
    """Mixin for widgets that watch session stores.

    Subclasses should:
    - Call ``_init_watcher()`` in ``__init__``
    - Use ``self.store_watch(store, key, callback)`` instead of ``store.watch(...)``
    - Use ``self.schedule_refresh(fn)`` to coalesce a burst of changes into one call
    - Skip writing ``on_unmount`` -- the mixin handles cleanup
    """

    def _init_watcher(self) -> None:
        self._watches: list[Callable[[], None]] = []
        self._scheduled: set[Callable[[], Any]] = set()

    def store_watch(self, store: Watchable, key: str, callback: Callback) -> None:
        """Register a watch that is removed automatically on unmount."""
        self._watches.append(store.watch(key, callback))

    def schedule_refresh(self, fn: Callable[[], Any]) -> None:
        """Run fn once after the current burst of store changes."""
        if fn in self._scheduled:
            return
        self._scheduled.add(fn)

        def _run() -> None:
            self._scheduled.discard(fn)
            fn()

        self.call_later(_run)

    def on_unmount(self) -> None:
        for unwatch in self._watches:
            unwatch()
        self._watches.clear()
