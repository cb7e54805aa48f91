"""
Grid Layout Engine

Owns one workspace's window placements and applies the add, remove,
move/swap and resize commands while keeping the layout free of overlaps
and inside the grid.
"""

from __future__ import annotations
import dataclasses
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .geometry import (
    GridSpec,
    ResizeDirection,
    clamp_anchor,
    find_collision,
    find_free_cell,
    fits,
    intervals_overlap,
    is_cell_occupied,
    leftmost_col,
    rightmost_col,
    span,
)
from .operation_manager import OperationManager
from .placement import (
    DEFAULT_RESIZABLE_KINDS,
    WindowKind,
    WindowPlacement,
    new_window_id,
    snapshot,
)

logger = logging.getLogger(__name__)


class GridLayoutEngine:
    """
    Constrained grid layout manager for one workspace.

    Every mutating command publishes LAYOUT_CHANGED with the full placement
    snapshot. Commands never raise for bad input: rejected commands return
    False (or None for add) and leave the layout untouched.
    """

    def __init__(
        self,
        workspace_key: str,
        grid: Optional[GridSpec] = None,
        resizable_kinds: Optional[Iterable[WindowKind]] = None,
    ):
        """Initialize the engine.

        Args:
            workspace_key: Key of the workspace this engine belongs to
            grid: Grid dimensions, defaults to 5x2 with a max width of 3
            resizable_kinds: Kinds allowed to grow, defaults to office notes
        """
        self.workspace_key = workspace_key
        self.grid = grid or GridSpec()
        self.resizable_kinds = frozenset(
            resizable_kinds if resizable_kinds is not None else DEFAULT_RESIZABLE_KINDS
        )
        self.placements: List[WindowPlacement] = []
        self._issued_ids: Set[str] = set()

        # Selection / drag / resize session
        self.session = OperationManager(self)

    # Queries

    def get(self, window_id: Optional[str]) -> Optional[WindowPlacement]:
        """Get a placement by id."""
        for placement in self.placements:
            if placement.id == window_id:
                return placement
        return None

    def snapshot(self) -> List[dict]:
        """Serialize the current placements."""
        return snapshot(self.placements)

    def replace(self, placements: Iterable[WindowPlacement]):
        """Replace the whole collection without publishing a change.

        Used when loading or clearing a workspace. The caller is responsible
        for passing a valid layout.
        """
        self.placements = list(placements)
        self._issued_ids.update(p.id for p in self.placements)
        self.session.reset()

    # Commands

    def add(self, kind: WindowKind) -> Optional[WindowPlacement]:
        """Add a 1x1 window in the first free cell, scanning row-major.

        Returns:
            The new placement, or None if the kind is unknown or the grid is full
        """
        try:
            kind = WindowKind(kind)
        except ValueError:
            logger.debug("Rejected add of unknown window kind %r", kind)
            return None

        cell = find_free_cell(self.placements, self.grid)
        if cell is None:
            logger.warning(
                "Grid full, rejecting %s window in %s", kind.value, self.workspace_key
            )
            return None

        row, col = cell
        placement = WindowPlacement(
            id=self._next_id(), kind=kind, row=row, anchor_col=col
        )
        self.placements.append(placement)
        logger.debug("Added %s at (%d, %d)", placement.id, row, col)
        self._publish_change()
        return placement

    def remove(self, window_id: str) -> bool:
        """Remove a window. Neighbours are never shifted.

        Returns:
            True if a window was removed
        """
        placement = self.get(window_id)
        if placement is None:
            return False

        self.placements.remove(placement)
        self.session.window_removed(window_id)
        logger.debug("Removed %s", window_id)
        self._publish_change()
        return True

    def move_or_swap(self, window_id: str, target_row: int, target_col: int) -> bool:
        """Drop a window on a cell.

        The anchor is clamped so the window fits. If the dropped span hits
        another window, the two windows exchange positions; otherwise the
        window moves.

        Returns:
            True if the layout changed
        """
        dragged = self.get(window_id)
        if dragged is None or not self.grid.contains(target_row, target_col):
            logger.debug("Rejected drop of %s on (%s, %s)", window_id, target_row, target_col)
            return False

        row = clamp_anchor(target_row, dragged.height, self.grid.rows)
        anchor = clamp_anchor(target_col, dragged.width, self.grid.cols)

        target = find_collision(
            self.placements,
            span(row, dragged.height),
            span(anchor, dragged.width),
            exclude_id=dragged.id,
        )

        if target is None:
            positions = {dragged.id: (row, anchor)}
        else:
            # Exchange positions, each window keeping its own shape
            positions = {
                dragged.id: (
                    clamp_anchor(target.row, dragged.height, self.grid.rows),
                    clamp_anchor(target.anchor_col, dragged.width, self.grid.cols),
                ),
                target.id: (
                    clamp_anchor(dragged.row, target.height, self.grid.rows),
                    clamp_anchor(dragged.anchor_col, target.width, self.grid.cols),
                ),
            }

        if not self._layout_valid(positions):
            logger.debug(
                "Rejected drop of %s on (%d, %d): shapes do not fit",
                dragged.id,
                target_row,
                target_col,
            )
            return False

        if all(
            (p.row, p.anchor_col) == positions[p.id]
            for p in self.placements
            if p.id in positions
        ):
            return False

        for placement in self.placements:
            if placement.id in positions:
                placement.row, placement.anchor_col = positions[placement.id]

        self._publish_change()
        return True

    def can_resize(self, window_id: str, direction: ResizeDirection) -> bool:
        """Check if a window may grow by one column towards direction."""
        placement = self.get(window_id)
        if placement is None:
            return False
        if placement.kind not in self.resizable_kinds:
            return False
        if placement.width >= self.grid.max_width:
            return False

        if direction == ResizeDirection.LEFT:
            check_col = placement.leftmost_col - 1
        else:
            check_col = placement.rightmost_col + 1
        if check_col < 0 or check_col >= self.grid.cols:
            return False

        top, bottom = placement.row_span
        return not any(
            is_cell_occupied(self.placements, row, check_col, exclude_id=placement.id)
            for row in range(top, bottom + 1)
        )

    def resize(self, window_id: str, direction: ResizeDirection) -> bool:
        """Grow a window by one column, keeping the opposite edge fixed.

        Returns:
            True if the window grew, False if the resize was not allowed
        """
        if not self.can_resize(window_id, direction):
            logger.debug("Ignored %s resize of %s", direction.value, window_id)
            return False

        placement = self.get(window_id)
        new_width = min(placement.width + 1, self.grid.max_width)

        if direction == ResizeDirection.LEFT:
            new_leftmost = leftmost_col(placement.anchor_col, placement.width) - 1
            new_anchor = new_leftmost + (new_width - 1) // 2
        else:
            new_rightmost = rightmost_col(placement.anchor_col, placement.width) + 1
            new_anchor = new_rightmost - new_width // 2

        placement.width = new_width
        placement.anchor_col = clamp_anchor(new_anchor, new_width, self.grid.cols)
        logger.debug(
            "Resized %s to width %d (anchor %d)", window_id, new_width, placement.anchor_col
        )
        self._publish_change()
        return True

    # Session commands

    def select(self, window_id: str) -> bool:
        """Toggle selection of a window."""
        return self.session.toggle_select(window_id)

    def deselect(self) -> bool:
        """Clear the selection."""
        return self.session.background_click()

    def begin_resize(self, window_id: str, direction: ResizeDirection) -> bool:
        """Start a resize session on the selected window."""
        return self.session.start_resize(window_id, direction)

    def commit_resize(self) -> bool:
        """Commit the active resize session (pointer released)."""
        return self.session.commit_resize()

    def cancel_resize(self) -> bool:
        """Cancel the active resize session without mutation."""
        return self.session.cancel_resize()

    # Helpers

    def _next_id(self) -> str:
        window_id = new_window_id()
        while window_id in self._issued_ids:
            window_id = new_window_id()
        self._issued_ids.add(window_id)
        return window_id

    def _layout_valid(self, positions: Dict[str, Tuple[int, int]]) -> bool:
        """Check bounds and overlaps with some placements repositioned."""
        candidates = [
            dataclasses.replace(p, row=positions[p.id][0], anchor_col=positions[p.id][1])
            if p.id in positions
            else p
            for p in self.placements
        ]
        for i, a in enumerate(candidates):
            if a.id in positions and not fits(a, self.grid):
                return False
            for b in candidates[i + 1:]:
                if a.id not in positions and b.id not in positions:
                    continue
                if intervals_overlap(a.row_span, b.row_span) and intervals_overlap(
                    a.col_span, b.col_span
                ):
                    return False
        return True

    def _publish_change(self):
        from pubsub import pub
        from . import topics

        pub.sendMessage(
            topics.LAYOUT_CHANGED,
            workspace_key=self.workspace_key,
            placements=self.snapshot(),
        )
