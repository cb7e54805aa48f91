"""
Unit tests for GridLayout pixel geometry and hit testing.
"""

import pytest

from dashtile.geometry import GridSpec, ResizeDirection, WindowEdges
from dashtile.layout import GridLayout, LayoutGeometry, PlacementView, describe
from dashtile.placement import WindowKind


@pytest.mark.unit
class TestGridLayout:
    """Test the layout math."""

    @pytest.fixture
    def layout(self):
        return GridLayout(GridSpec(), cell_size=100, handle_width=8)

    def test_name_and_size(self, layout):
        assert layout.name == "grid"
        assert (layout.total_width, layout.total_height) == (500, 200)

    def test_default_cell_size(self):
        layout = GridLayout()
        assert (layout.total_width, layout.total_height) == (1700, 680)

    def test_geometry_single_cell(self, layout, place):
        geom = layout.geometry(place("a", 1, 2))
        assert (geom.x, geom.y, geom.width, geom.height) == (200, 100, 100, 100)
        assert geom.tiled_edges == WindowEdges.BOTTOM

    def test_geometry_uses_leftmost_column(self, layout, place):
        geom = layout.geometry(place("a", 0, 3, width=3))
        assert (geom.x, geom.width) == (200, 300)
        assert geom.tiled_edges == WindowEdges.TOP | WindowEdges.RIGHT

    def test_geometry_tall_window(self, layout, place):
        geom = layout.geometry(place("a", 0, 0, height=2))
        assert (geom.y, geom.height) == (0, 200)
        assert geom.tiled_edges == (
            WindowEdges.TOP | WindowEdges.BOTTOM | WindowEdges.LEFT
        )

    def test_calculate(self, layout, place):
        result = layout.calculate([place("a", 0, 0), place("b", 1, 4)])
        assert set(result) == {"a", "b"}
        assert result["b"] == LayoutGeometry(400, 100, 100, 100, WindowEdges.BOTTOM | WindowEdges.RIGHT)

    def test_calculate_empty(self, layout):
        assert layout.calculate([]) == {}

    def test_cell_at(self, layout):
        assert layout.cell_at(0, 0) == (0, 0)
        assert layout.cell_at(499, 199) == (1, 4)
        assert layout.cell_at(250.5, 120) == (1, 2)
        assert layout.cell_at(500, 0) is None
        assert layout.cell_at(-1, 10) is None
        assert layout.cell_at(10, 200) is None

    def test_window_at(self, layout, place):
        placements = [place("a", 0, 2, width=3), place("b", 1, 0)]
        assert layout.window_at(placements, 50, 50) is None
        assert layout.window_at(placements, 150, 50).id == "a"
        assert layout.window_at(placements, 399, 99).id == "a"
        assert layout.window_at(placements, 50, 150).id == "b"

    def test_handle_at(self, layout, place):
        p = place("a", 0, 2)
        assert layout.handle_at(p, 200, 50) == ResizeDirection.LEFT
        assert layout.handle_at(p, 207, 50) == ResizeDirection.LEFT
        assert layout.handle_at(p, 250, 50) is None
        assert layout.handle_at(p, 292, 50) == ResizeDirection.RIGHT
        assert layout.handle_at(p, 300, 50) is None


@pytest.mark.unit
class TestDescribe:
    def test_describe(self, place):
        view = describe(place("a", 1, 2, width=2, kind=WindowKind.PROJECTS_TIMELINE))
        assert view == PlacementView(
            id="a",
            kind=WindowKind.PROJECTS_TIMELINE,
            row=1,
            leftmost_col=2,
            rightmost_col=3,
            width=2,
            height=1,
        )
