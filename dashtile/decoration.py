"""
Dashboard Frame Rendering with Cairo

Draws the grid, window frames, selection outline, resize handles and kind
labels. Window content is rendered by the host application on top.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Tuple
import cairo

from .geometry import ResizeDirection

if TYPE_CHECKING:
    from .engine import GridLayoutEngine
    from .layout import GridLayout, LayoutGeometry

Color = Tuple[int, int, int, int]


@dataclass
class DecorationStyle:
    """Colors and metrics for the dashboard frames."""

    background_color: Color = (0, 0, 0, 255)
    cell_border_color: Color = (51, 51, 51, 255)
    window_bg_color: Color = (10, 10, 10, 255)
    selected_border_color: Color = (200, 237, 252, 255)
    handle_color: Color = (200, 237, 252, 77)
    text_color: Color = (216, 222, 233, 255)
    font_family: str = "sans-serif"
    font_size: int = 13
    border_width: int = 1
    selected_border_width: int = 2
    label_padding: int = 8


class GridRenderer:
    """Renders a workspace's frames into an ARGB32 image surface."""

    def __init__(self, layout: "GridLayout", style: Optional[DecorationStyle] = None):
        """Initialize the renderer.

        Args:
            layout: Pixel layout of the grid
            style: Frame styling configuration
        """
        self.layout = layout
        self.style = style or DecorationStyle()

    def render(self, engine: "GridLayoutEngine") -> cairo.ImageSurface:
        """Draw the current layout of an engine."""
        surface = cairo.ImageSurface(
            cairo.FORMAT_ARGB32, self.layout.total_width, self.layout.total_height
        )
        ctx = cairo.Context(surface)

        # Clear background
        self._set_color(ctx, self.style.background_color)
        ctx.rectangle(0, 0, self.layout.total_width, self.layout.total_height)
        ctx.fill()

        # Empty cells get a thin border
        for row, col in self.layout.grid.cells():
            if self.layout.window_at(
                engine.placements,
                (col + 0.5) * self.layout.cell_size,
                (row + 0.5) * self.layout.cell_size,
            ):
                continue
            size = self.layout.cell_size
            self._stroke_inside(
                ctx,
                col * size,
                row * size,
                size,
                size,
                self.style.border_width,
                self.style.cell_border_color,
            )

        selected_id = engine.session.selected_id
        for placement in engine.placements:
            geom = self.layout.geometry(placement)
            selected = placement.id == selected_id

            self._set_color(ctx, self.style.window_bg_color)
            ctx.rectangle(geom.x, geom.y, geom.width, geom.height)
            ctx.fill()

            if selected:
                self._stroke_inside(
                    ctx,
                    geom.x,
                    geom.y,
                    geom.width,
                    geom.height,
                    self.style.selected_border_width,
                    self.style.selected_border_color,
                )
            else:
                self._stroke_inside(
                    ctx,
                    geom.x,
                    geom.y,
                    geom.width,
                    geom.height,
                    self.style.border_width,
                    self.style.cell_border_color,
                )

            self._render_label(ctx, placement.kind.label, geom)

            if selected:
                for direction in ResizeDirection:
                    if engine.can_resize(placement.id, direction):
                        self._render_handle(ctx, geom, direction)

        surface.flush()
        return surface

    def write_png(self, engine: "GridLayoutEngine", path: Path | str) -> Path:
        """Render and save as PNG."""
        path = Path(path)
        surface = self.render(engine)
        surface.write_to_png(str(path))
        return path

    def _render_label(self, ctx: cairo.Context, label: str, geom: "LayoutGeometry"):
        """Draw the kind label in the top-left corner, truncated to fit."""
        ctx.select_font_face(
            self.style.font_family, cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_NORMAL
        )
        ctx.set_font_size(self.style.font_size)
        self._set_color(ctx, self.style.text_color)

        max_width = geom.width - 2 * self.style.label_padding
        if max_width <= 0:
            return

        display = self._truncate(ctx, label, max_width)
        ctx.move_to(
            geom.x + self.style.label_padding,
            geom.y + self.style.label_padding + self.style.font_size,
        )
        ctx.show_text(display)

    def _truncate(self, ctx: cairo.Context, text: str, max_width: float) -> str:
        """Shorten text with an ellipsis until it fits max_width."""
        if ctx.text_extents(text).width <= max_width:
            return text

        # Binary search for the right length
        ellipsis = "..."
        available = max_width - ctx.text_extents(ellipsis).width

        left = 0
        right = len(text)
        while left < right:
            mid = (left + right + 1) // 2
            if ctx.text_extents(text[:mid]).width <= available:
                left = mid
            else:
                right = mid - 1

        return text[:left] + ellipsis

    def _render_handle(
        self, ctx: cairo.Context, geom: "LayoutGeometry", direction: ResizeDirection
    ):
        """Draw a translucent resize strip on one side of a window."""
        width = self.layout.handle_width
        x = geom.x if direction == ResizeDirection.LEFT else geom.x + geom.width - width
        self._set_color(ctx, self.style.handle_color)
        ctx.rectangle(x, geom.y, width, geom.height)
        ctx.fill()

    def _stroke_inside(
        self,
        ctx: cairo.Context,
        x: int,
        y: int,
        width: int,
        height: int,
        line_width: int,
        color: Color,
    ):
        """Stroke a rectangle so the line lies fully inside it."""
        half = line_width / 2
        self._set_color(ctx, color)
        ctx.set_line_width(line_width)
        ctx.rectangle(x + half, y + half, width - line_width, height - line_width)
        ctx.stroke()

    def _set_color(self, ctx: cairo.Context, color: Color):
        """Set Cairo color from RGBA tuple.

        Args:
            ctx: Cairo context
            color: (R, G, B, A) tuple with values 0-255
        """
        r, g, b, a = color
        ctx.set_source_rgba(r / 255.0, g / 255.0, b / 255.0, a / 255.0)
