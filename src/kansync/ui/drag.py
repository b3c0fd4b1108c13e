"""Drag-and-drop plumbing between Textual mouse events and the DragController.

Three pieces:
- DraggableMixin: on card widgets, arms the controller and crosses the threshold
- DropTarget: on containers, maps a screen position to a hover target
- DragRouter: on the screen, owns the ghost and routes moves/releases

Cards are re-mounted as the store changes during a drag, so the screen,
not the card widget, owns the running drag.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.geometry import Offset
from textual.widgets import Static

from kansync.drag import DragController, HoverTarget

if TYPE_CHECKING:
    from textual.widget import Widget


class DragGhost(Static):
    """Floating overlay showing the card being dragged."""

    DEFAULT_CSS = """
    DragGhost {
        layer: overlay;
        height: auto;
        padding: 0 1;
        background: $primary;
        border: tall $primary-lighten-2;
    }
    """


class DropTarget:
    """Mixin for widgets that cards can hover over and drop on."""

    def drop_target_at(self, x: int, y: int) -> HoverTarget | None:
        """Return the hover target at screen position, or None to bubble up."""
        return None


class DraggableMixin:
    """Mixin for card widgets.

    Subclasses should:
    - Call _init_draggable() in __init__
    - Provide ``card_id`` and ``drag`` (the session's DragController)
    - Implement draggable_clicked() for click-without-drag behavior
    """

    def _init_draggable(self) -> None:
        self._press_pos: Offset | None = None

    @property
    def drag(self) -> DragController:
        raise NotImplementedError

    def on_mouse_down(self, event) -> None:
        if event.button != 1:
            return
        event.stop()
        event.prevent_default()
        self._press_pos = Offset(event.screen_x, event.screen_y)
        self.drag.press(self.card_id, event.screen_x, event.screen_y)
        self.capture_mouse()

    def on_mouse_move(self, event) -> None:
        if not self.drag.armed:
            return
        event.stop()
        event.prevent_default()
        if self.drag.pointer_move(event.screen_x, event.screen_y):
            self.release_mouse()
            self.screen.start_drag(self, self._press_pos)
            self._press_pos = None

    def on_mouse_up(self, event) -> None:
        event.stop()
        event.prevent_default()
        self.release_mouse()
        self._press_pos = None
        if self.drag.release():
            self.draggable_clicked()

    def draggable_clicked(self) -> None:
        """Called when mouse released without dragging. Override for click behavior."""
        raise NotImplementedError


class DragRouter:
    """Screen mixin that runs the pointer side of a drag."""

    def _init_drag_router(self, drag: DragController) -> None:
        self._drag_controller = drag
        self._ghost: DragGhost | None = None
        self._ghost_offset = Offset(0, 0)

    def start_drag(self, card: Widget, mouse_pos: Offset) -> None:
        """A card crossed the threshold: show the ghost and capture the mouse."""
        self.set_focus(None)
        card.add_class("dragging")
        region = card.region
        self._ghost_offset = Offset(mouse_pos.x - region.x, mouse_pos.y - region.y)
        self._ghost = DragGhost(card.title_text)
        self._ghost.styles.width = region.width
        self._ghost.styles.offset = (region.x, region.y)
        self.mount(self._ghost)
        self.capture_mouse()

    def on_mouse_move(self, event) -> None:
        if not self._drag_controller.active:
            return
        if self._ghost is not None:
            x = event.screen_x - self._ghost_offset.x
            y = event.screen_y - self._ghost_offset.y
            self._ghost.styles.offset = (x, y)
        self._drag_controller.hover(self._find_target(event.screen_x, event.screen_y))

    def on_mouse_up(self, event) -> None:
        if not self._drag_controller.active:
            return
        self._drag_controller.drop(self._find_target(event.screen_x, event.screen_y))
        self._drag_cleanup()

    def action_cancel_drag(self) -> None:
        if self._drag_controller.active:
            self._drag_controller.cancel()
            self._drag_cleanup()

    def _drag_cleanup(self) -> None:
        self.release_mouse()
        for widget in self.query(".dragging"):
            widget.remove_class("dragging")
        if self._ghost is not None:
            self._ghost.remove()
        self._ghost = None
        self._ghost_offset = Offset(0, 0)

    def _find_target(self, x: int, y: int) -> HoverTarget | None:
        """Ask the innermost DropTarget under the pointer, skipping the ghost."""
        try:
            widgets = self.get_widgets_at(x, y)
        except Exception:
            return None
        for widget, _region in widgets:
            if self._ghost is not None and (widget is self._ghost or self._ghost in widget.ancestors):
                continue
            candidate = widget
            while candidate is not None:
                if isinstance(candidate, DropTarget):
                    target = candidate.drop_target_at(x, y)
                    if target is not None:
                        return target
                candidate = candidate.parent
        return None
