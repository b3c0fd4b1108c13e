"""Tests for StoreWatcherMixin."""

from kansync.model.store import NoteBuffer
from kansync.ui.watcher import StoreWatcherMixin


class FakeWidget(StoreWatcherMixin):
    """Minimal stand-in for a Textual widget."""

    def __init__(self):
        self._init_watcher()
        self.later = []

    def call_later(self, fn):
        self.later.append(fn)


def test_watch_fires_callback():
    widget = FakeWidget()
    notes = NoteBuffer("red")
    calls = []
    widget.store_watch(notes, "content", lambda src, key, old, new: calls.append((old, new)))

    notes.content = "blue"
    assert calls == [("red", "blue")]


def test_on_unmount_cleans_up():
    widget = FakeWidget()
    notes = NoteBuffer("red")
    calls = []
    widget.store_watch(notes, "content", lambda src, key, old, new: calls.append(new))

    widget.on_unmount()

    notes.content = "blue"
    assert calls == []


def test_schedule_refresh_coalesces():
    widget = FakeWidget()
    runs = []

    def refresh():
        runs.append(1)

    widget.schedule_refresh(refresh)
    widget.schedule_refresh(refresh)
    assert len(widget.later) == 1

    widget.later.pop()()
    assert runs == [1]

    widget.schedule_refresh(refresh)
    assert len(widget.later) == 1
