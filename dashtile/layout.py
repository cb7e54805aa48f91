"""
Grid Layout

Maps placements to pixel geometry for the caller's renderer and maps
pointer positions back to cells, windows and resize handles.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from .geometry import GridSpec, ResizeDirection, WindowEdges
from .placement import WindowKind, WindowPlacement


@dataclass(frozen=True)
class PlacementView:
    """What a renderer needs to know about one window."""

    id: str
    kind: WindowKind
    row: int
    leftmost_col: int
    rightmost_col: int
    width: int
    height: int


@dataclass
class LayoutGeometry:
    """Calculated pixel geometry for a window."""

    x: int
    y: int
    width: int
    height: int
    tiled_edges: WindowEdges = WindowEdges.NONE

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


def describe(placement: WindowPlacement) -> PlacementView:
    """Expose a placement's span for rendering."""
    return PlacementView(
        id=placement.id,
        kind=placement.kind,
        row=placement.row,
        leftmost_col=placement.leftmost_col,
        rightmost_col=placement.rightmost_col,
        width=placement.width,
        height=placement.height,
    )


class GridLayout:
    """
    Fixed cell grid - each window covers width x height square cells.
    """

    def __init__(self, grid: Optional[GridSpec] = None, cell_size: int = 340, handle_width: int = 8):
        self.grid = grid or GridSpec()
        self.cell_size = cell_size
        self.handle_width = handle_width

    @property
    def name(self) -> str:
        return "grid"

    @property
    def total_width(self) -> int:
        return self.grid.cols * self.cell_size

    @property
    def total_height(self) -> int:
        return self.grid.rows * self.cell_size

    def geometry(self, placement: WindowPlacement) -> LayoutGeometry:
        """Pixel rectangle of one window."""
        left, right = placement.col_span
        top, bottom = placement.row_span

        # Calculate tiled edges
        edges = WindowEdges.NONE
        if left == 0:
            edges |= WindowEdges.LEFT
        if right == self.grid.cols - 1:
            edges |= WindowEdges.RIGHT
        if top == 0:
            edges |= WindowEdges.TOP
        if bottom == self.grid.rows - 1:
            edges |= WindowEdges.BOTTOM

        return LayoutGeometry(
            left * self.cell_size,
            top * self.cell_size,
            placement.width * self.cell_size,
            placement.height * self.cell_size,
            edges,
        )

    def calculate(self, placements: Iterable[WindowPlacement]) -> Dict[str, LayoutGeometry]:
        """Pixel geometry for every window, keyed by id."""
        return {p.id: self.geometry(p) for p in placements}

    def cell_at(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """Grid cell (row, col) under a pixel position."""
        if x < 0 or y < 0:
            return None
        row = int(y // self.cell_size)
        col = int(x // self.cell_size)
        if not self.grid.contains(row, col):
            return None
        return row, col

    def window_at(
        self, placements: Iterable[WindowPlacement], x: float, y: float
    ) -> Optional[WindowPlacement]:
        """Topmost window under a pixel position."""
        for placement in reversed(list(placements)):
            if self.geometry(placement).contains(x, y):
                return placement
        return None

    def handle_at(
        self, placement: WindowPlacement, x: float, y: float
    ) -> Optional[ResizeDirection]:
        """Resize handle of a window under a pixel position.

        Handles are strips handle_width pixels wide along the left and
        right edges.
        """
        geom = self.geometry(placement)
        if not geom.contains(x, y):
            return None
        if x < geom.x + self.handle_width:
            return ResizeDirection.LEFT
        if x >= geom.x + geom.width - self.handle_width:
            return ResizeDirection.RIGHT
        return None
