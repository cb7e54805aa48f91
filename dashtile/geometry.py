"""
Grid Geometry Primitives

Pure span, collision and clamping math for the dashboard grid. A window's
position is stored as its middle ("anchor") column; the occupied span is
derived from the anchor and the width.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Iterable, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .placement import WindowPlacement

Span = Tuple[int, int]


class WindowEdges(IntFlag):
    """Grid border flags."""

    NONE = 0
    TOP = 1
    BOTTOM = 2
    LEFT = 4
    RIGHT = 8


class ResizeDirection(Enum):
    """Side a window grows towards."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class GridSpec:
    """Fixed grid dimensions."""

    cols: int = 5
    rows: int = 2
    max_width: int = 3

    def __post_init__(self):
        if self.cols < 1 or self.rows < 1 or self.max_width < 1:
            raise ValueError(f"Grid dimensions must be positive: {self}")
        if self.max_width > self.cols:
            raise ValueError(
                f"max_width ({self.max_width}) cannot exceed cols ({self.cols})"
            )

    def contains(self, row: int, col: int) -> bool:
        """Check if a cell lies inside the grid."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cells(self) -> Iterable[Tuple[int, int]]:
        """Iterate cells in row-major order."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield row, col


def leftmost_col(anchor_col: int, width: int) -> int:
    """First column covered by a window anchored at anchor_col."""
    return anchor_col - (width - 1) // 2


def rightmost_col(anchor_col: int, width: int) -> int:
    """Last column covered by a window anchored at anchor_col."""
    return anchor_col + width // 2


def span(anchor: int, size: int) -> Span:
    """Closed interval covered by a middle-anchored extent."""
    return leftmost_col(anchor, size), rightmost_col(anchor, size)


def intervals_overlap(a: Span, b: Span) -> bool:
    """Check if two closed integer intervals intersect."""
    return a[0] <= b[1] and b[0] <= a[1]


def clamp_anchor(desired_anchor: int, width: int, cols: int) -> int:
    """Shift an anchor so the span fits within [0, cols).

    Idempotent as long as width <= cols.
    """
    left = leftmost_col(desired_anchor, width)
    right = rightmost_col(desired_anchor, width)

    if left < 0:
        # Shift right to fit
        return desired_anchor - left
    if right >= cols:
        # Shift left to fit
        return desired_anchor - (right - cols + 1)
    return desired_anchor


def is_cell_occupied(
    placements: Iterable["WindowPlacement"],
    row: int,
    col: int,
    exclude_id: Optional[str] = None,
) -> bool:
    """Check if any placement other than exclude_id covers (row, col)."""
    return (
        find_collision(placements, (row, row), (col, col), exclude_id=exclude_id)
        is not None
    )


def find_collision(
    placements: Iterable["WindowPlacement"],
    rows: Span,
    cols: Span,
    exclude_id: Optional[str] = None,
) -> Optional["WindowPlacement"]:
    """Find the first placement whose area intersects the given spans.

    Args:
        placements: Placements to search, in collection order
        rows: Closed row interval of the probe area
        cols: Closed column interval of the probe area
        exclude_id: Placement id to ignore (usually the one being moved)

    Returns:
        The first intersecting placement, or None
    """
    for placement in placements:
        if placement.id == exclude_id:
            continue
        if intervals_overlap(placement.row_span, rows) and intervals_overlap(
            placement.col_span, cols
        ):
            return placement
    return None


def find_free_cell(
    placements: Iterable["WindowPlacement"], grid: GridSpec
) -> Optional[Tuple[int, int]]:
    """Find the first unoccupied cell scanning row-major from (0, 0)."""
    placements = list(placements)
    for row, col in grid.cells():
        if not is_cell_occupied(placements, row, col):
            return row, col
    return None


def fits(placement: "WindowPlacement", grid: GridSpec) -> bool:
    """Check if a placement lies entirely inside the grid."""
    left, right = placement.col_span
    top, bottom = placement.row_span
    return left >= 0 and right < grid.cols and top >= 0 and bottom < grid.rows
