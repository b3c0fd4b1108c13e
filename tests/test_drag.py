"""Tests for the drag state machine."""

import pytest

from kansync.drag import CardTarget, ColumnTarget, DragController, DragState
from kansync.model.card import ColumnId
from kansync.model.intents import MoveIntent, ReorderIntent
from kansync.model.mutator import apply_intent

TODO = ColumnId.TODO
PROGRESS = ColumnId.PROGRESS
COMPLETE = ColumnId.COMPLETE


@pytest.fixture
def drag(board):
    """A controller whose dispatch applies intents to the board and records them."""
    calls = []

    def dispatch(intent, persist=True):
        calls.append((intent, persist))
        return apply_intent(board, intent)

    controller = DragController(board, dispatch, threshold=5)
    controller.calls = calls
    return controller


# --- pointer threshold ---


def test_press_below_threshold_is_a_click(drag):
    drag.press("a", 10, 10)
    assert drag.armed
    assert drag.pointer_move(13, 12) is False
    assert drag.state is DragState.IDLE
    assert drag.release() is True
    assert not drag.armed


def test_crossing_threshold_starts_drag(drag):
    drag.press("a", 10, 10)
    assert drag.pointer_move(16, 10) is True
    assert drag.active
    assert drag.card_id == "a"
    assert drag.origin is TODO
    assert drag.release() is False


def test_pointer_move_without_press(drag):
    assert drag.pointer_move(100, 100) is False


def test_begin_unknown_card(drag):
    assert drag.begin("nope") is False
    assert drag.state is DragState.IDLE


def test_begin_while_active(drag):
    drag.begin("a")
    assert drag.begin("b") is False
    assert drag.card_id == "a"


# --- hover placement ---


def test_hover_column_appends(drag, board):
    drag.begin("a")
    drag.hover(ColumnTarget(PROGRESS))

    assert board.ids_in(PROGRESS) == ["d", "e", "a"]
    assert drag.calls == [(MoveIntent("a", TODO, PROGRESS, 2), True)]


def test_hover_card_inserts_before(drag, board):
    drag.begin("a")
    drag.hover(CardTarget("e"))
    assert board.ids_in(PROGRESS) == ["d", "a", "e"]


def test_hover_same_target_twice_dispatches_once(drag):
    drag.begin("a")
    drag.hover(ColumnTarget(PROGRESS))
    drag.hover(ColumnTarget(PROGRESS))
    assert len(drag.calls) == 1


def test_hover_self_is_ignored(drag):
    drag.begin("a")
    drag.hover(CardTarget("a"))
    assert drag.calls == []


def test_hover_when_idle_is_ignored(drag):
    drag.hover(ColumnTarget(PROGRESS))
    assert drag.calls == []


def test_same_column_hover_is_local_only(drag, board):
    drag.begin("a")
    drag.hover(CardTarget("c"))

    assert board.ids_in(TODO) == ["b", "c", "a"]
    assert all(persist is False for _, persist in drag.calls)


def test_same_column_column_target_moves_to_end(drag, board):
    drag.begin("a")
    drag.hover(ColumnTarget(TODO))
    assert board.ids_in(TODO) == ["b", "c", "a"]


# --- drop and cancel ---


def test_drop_same_column_flushes_one_reorder(drag, board):
    drag.begin("c")
    drag.hover(CardTarget("b"))
    drag.hover(CardTarget("a"))
    drag.drop(CardTarget("a"))

    assert board.ids_in(TODO) == ["c", "a", "b"]
    persisted = [intent for intent, persist in drag.calls if persist]
    assert persisted == [ReorderIntent(TODO, ("c", "a", "b"))]
    assert drag.outcome is DragState.DROPPED
    assert drag.state is DragState.IDLE


def test_drop_cross_column_no_reorder(drag, board):
    drag.begin("a")
    drag.drop(ColumnTarget(COMPLETE))

    assert board.ids_in(COMPLETE) == ["a"]
    assert drag.calls == [(MoveIntent("a", TODO, COMPLETE, 0), True)]
    assert drag.outcome is DragState.DROPPED


def test_drop_on_nothing_cancels_and_keeps_placement(drag, board):
    drag.begin("a")
    drag.hover(ColumnTarget(PROGRESS))
    drag.drop(None)

    assert drag.outcome is DragState.CANCELLED
    assert board.ids_in(PROGRESS) == ["d", "e", "a"]


def test_cancel_flushes_pending_reorder(drag, board):
    drag.begin("a")
    drag.hover(ColumnTarget(TODO))
    drag.cancel()

    assert drag.outcome is DragState.CANCELLED
    assert board.ids_in(TODO) == ["b", "c", "a"]
    assert drag.calls[-1] == (ReorderIntent(TODO, ("b", "c", "a")), True)


def test_cancel_when_idle_disarms(drag):
    drag.press("a", 0, 0)
    drag.cancel()
    assert not drag.armed
    assert drag.outcome is None


def test_drop_without_moving_persists_nothing(drag):
    drag.begin("a")
    drag.drop(CardTarget("a"))
    assert drag.calls == []
    assert drag.outcome is DragState.DROPPED


def test_card_vanishing_mid_drag_cancels(drag, board):
    drag.begin("a")
    board.remove("a")
    drag.hover(ColumnTarget(PROGRESS))
    assert drag.outcome is DragState.CANCELLED


# --- keyboard ---


def test_step_down_and_put_down(drag, board):
    drag.begin("a")
    drag.step("down")
    drag.step("down")
    drag.put_down()

    assert board.ids_in(TODO) == ["b", "c", "a"]
    persisted = [intent for intent, persist in drag.calls if persist]
    assert persisted == [ReorderIntent(TODO, ("b", "c", "a"))]


def test_step_past_edge_is_ignored(drag, board):
    drag.begin("a")
    drag.step("up")
    drag.step("left")
    assert drag.calls == []


def test_step_right_keeps_index(drag, board):
    drag.begin("c")
    drag.step("right")
    assert board.ids_in(PROGRESS) == ["d", "e", "c"]
    assert drag.calls == [(MoveIntent("c", TODO, PROGRESS, 2), True)]


def test_step_right_clamps_to_target_length(drag, board):
    drag.begin("e")
    drag.step("right")
    assert board.ids_in(COMPLETE) == ["e"]


def test_nudge_is_one_step(drag, board):
    drag.nudge("b", "up")
    assert board.ids_in(TODO) == ["b", "a", "c"]
    assert drag.state is DragState.IDLE
    assert drag.calls[-1] == (ReorderIntent(TODO, ("b", "a", "c")), True)


def test_nudge_unknown_card(drag):
    drag.nudge("nope", "up")
    assert drag.calls == []
