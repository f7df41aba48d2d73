"""
Rectangle selection handler - manages drag gesture state and the creation menu.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..types import Point, SelectionRect, SelectionState

# Vertical distance between the menu and the top edge of the selection
MENU_OFFSET = 40.0


class SelectionEngine:
    """Turns pointer drags into a normalized selection rectangle.

    Coordinates are relative to the viewport origin at the time of each event.
    """

    def __init__(
        self,
        on_change: Optional[Callable[[SelectionState], None]] = None,
        annotation_mode: bool = False,
    ):
        self._state = SelectionState()
        self._annotation_mode = annotation_mode
        self._on_change = on_change

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def rect(self) -> Optional[SelectionRect]:
        """Current selection rectangle, None when nothing is selected."""
        return self._state.rect

    @property
    def dragging(self) -> bool:
        """Whether a drag is in progress."""
        return self._state.dragging

    @property
    def menu_anchor(self) -> Optional[Point]:
        """Position of the creation menu, None while it is not armed."""
        return self._state.menu_anchor

    @property
    def annotation_mode(self) -> bool:
        """Whether pointer gestures are interpreted as selection drags."""
        return self._annotation_mode

    @annotation_mode.setter
    def annotation_mode(self, value: bool):
        self._annotation_mode = value
        if not value:
            self.clear()

    def begin_selection(self, point: Point) -> bool:
        """Start a new drag. Ignored unless annotation mode is on."""
        if not self._annotation_mode:
            return False

        self._state = SelectionState(dragging=True, start=point, end=point)
        self._changed()
        return True

    def update_selection(self, point: Point) -> None:
        """Move the drag end point and recompute the rectangle."""
        if not self._state.dragging or self._state.start is None:
            return

        self._state.end = point
        self._state.rect = SelectionRect.from_points(self._state.start, point)
        self._changed()

    def end_selection(self, point: Optional[Point] = None) -> Optional[SelectionRect]:
        """Finish the drag and arm the creation menu.

        Returns:
            The finalized rectangle, or None if the drag selected nothing
        """
        if not self._state.dragging:
            return None

        if point is not None:
            self.update_selection(point)

        self._state.dragging = False
        rect = self._state.rect

        if rect is None or rect.is_degenerate:
            self.clear()
            return None

        self._state.menu_anchor = (rect.x, max(0.0, rect.y - MENU_OFFSET))
        self._changed()
        return rect

    def dismiss_menu(self) -> None:
        """Close the creation menu without choosing a kind."""
        self.clear()

    def clear(self) -> None:
        """Clear the current selection."""
        self._state = SelectionState()
        self._changed()

    def _changed(self) -> None:
        if self._on_change:
            self._on_change(self._state)
