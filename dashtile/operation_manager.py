"""
Operation Manager

Handles window selection and the interactive drag and resize sessions.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional

from .geometry import ResizeDirection

if TYPE_CHECKING:
    from .engine import GridLayoutEngine

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Interaction mode of the dashboard."""

    IDLE = auto()
    SELECTED = auto()
    DRAGGING = auto()
    RESIZING = auto()


class OpType(Enum):
    """Type of interactive operation."""

    DRAG = "drag"
    RESIZE = "resize"


@dataclass
class Session:
    """Current interaction state."""

    state: SessionState = SessionState.IDLE
    window_id: Optional[str] = None
    direction: Optional[ResizeDirection] = None


class OperationManager:
    """Selection / drag / resize state machine.

    Each state only accepts its legal inputs; anything else returns False
    and leaves the state untouched.

    Transitions:
    - IDLE/SELECTED -> SELECTED(id) or IDLE: secondary click toggles selection
    - SELECTED(id) -> DRAGGING(id): drag start on the selected window
    - DRAGGING -> SELECTED: drop (move/swap) or drag cancel
    - SELECTED(id) -> RESIZING(id, dir): press on a usable resize handle
    - RESIZING -> SELECTED: release commits, pointer leave cancels
    - any -> IDLE: background click or removal of the window
    """

    def __init__(self, engine: "GridLayoutEngine"):
        """Initialize operation manager.

        Args:
            engine: The engine whose placements the session operates on
        """
        self.engine = engine
        self.current = Session()

    def is_active(self) -> bool:
        """Check if a drag or resize is in progress."""
        return self.current.state in (SessionState.DRAGGING, SessionState.RESIZING)

    def get_state(self) -> SessionState:
        return self.current.state

    @property
    def selected_id(self) -> Optional[str]:
        """Id of the selected window, also while it is dragged or resized."""
        return self.current.window_id

    def toggle_select(self, window_id: str) -> bool:
        """Handle secondary activation (right click) on a window.

        Returns:
            True if the selection changed
        """
        if self.current.state not in (SessionState.IDLE, SessionState.SELECTED):
            return False
        if self.engine.get(window_id) is None:
            return False

        if self.current.window_id == window_id:
            self._transition(Session())
        else:
            self._transition(Session(SessionState.SELECTED, window_id))
        return True

    def start_drag(self, window_id: str) -> bool:
        """Start dragging a window. Only the selected window can be dragged."""
        if (
            self.current.state != SessionState.SELECTED
            or self.current.window_id != window_id
        ):
            logger.debug("Rejected drag of unselected window %s", window_id)
            return False

        self._transition(Session(SessionState.DRAGGING, window_id))
        return True

    def drop(self, row: int, col: int) -> bool:
        """Drop the dragged window on a cell and end the drag.

        Returns:
            True if the layout changed
        """
        if self.current.state != SessionState.DRAGGING:
            return False

        window_id = self.current.window_id
        changed = self.engine.move_or_swap(window_id, row, col)
        self._transition(Session(SessionState.SELECTED, window_id))
        return changed

    def end_drag(self) -> bool:
        """End a drag without dropping (native drag cancel)."""
        if self.current.state != SessionState.DRAGGING:
            return False

        self._transition(Session(SessionState.SELECTED, self.current.window_id))
        return True

    def start_resize(self, window_id: str, direction: ResizeDirection) -> bool:
        """Press on a resize handle of the selected window."""
        if (
            self.current.state != SessionState.SELECTED
            or self.current.window_id != window_id
        ):
            return False
        if not self.engine.can_resize(window_id, direction):
            return False

        self._transition(Session(SessionState.RESIZING, window_id, direction))
        return True

    def commit_resize(self) -> bool:
        """Pointer released anywhere: grow the window by one column.

        Returns:
            True if the window grew
        """
        if self.current.state != SessionState.RESIZING:
            return False

        window_id = self.current.window_id
        grew = self.engine.resize(window_id, self.current.direction)
        self._transition(Session(SessionState.SELECTED, window_id))
        return grew

    def cancel_resize(self) -> bool:
        """Abort the resize session without touching the layout."""
        if self.current.state != SessionState.RESIZING:
            return False

        self._transition(Session(SessionState.SELECTED, self.current.window_id))
        return True

    def pointer_leave(self, window_id: str) -> bool:
        """Pointer left a window's bounding box."""
        if self.current.window_id != window_id:
            return False
        return self.cancel_resize()

    def background_click(self) -> bool:
        """Click on empty grid background clears the selection."""
        if self.current.state == SessionState.IDLE:
            return False

        self._transition(Session())
        return True

    def delete_selected(self) -> bool:
        """Remove the selected window (delete key)."""
        if self.current.state != SessionState.SELECTED:
            return False

        # The engine calls window_removed(), which returns us to IDLE
        return self.engine.remove(self.current.window_id)

    def window_removed(self, window_id: str):
        """Forget a window that left the layout."""
        if self.current.window_id == window_id:
            self._transition(Session())

    def reset(self):
        """Return to IDLE without side effects on the layout."""
        if self.current.state != SessionState.IDLE:
            self._transition(Session())

    def _transition(self, new: Session):
        """Switch sessions, publishing operation and selection events."""
        from pubsub import pub
        from . import topics

        old = self.current
        self.current = new

        old_op = _operation_of(old)
        new_op = _operation_of(new)
        if old_op is not None and (old_op, old.window_id) != (new_op, new.window_id):
            pub.sendMessage(
                topics.OPERATION_ENDED, window_id=old.window_id, operation=old_op
            )
        if new_op is not None and (old_op, old.window_id) != (new_op, new.window_id):
            pub.sendMessage(
                topics.OPERATION_STARTED, window_id=new.window_id, operation=new_op
            )

        if old.window_id != new.window_id:
            pub.sendMessage(topics.SELECTION_CHANGED, window_id=new.window_id)


def _operation_of(session: Session) -> Optional[OpType]:
    if session.state == SessionState.DRAGGING:
        return OpType.DRAG
    if session.state == SessionState.RESIZING:
        return OpType.RESIZE
    return None
