"""
Tests for the dashboard wiring, configuration and CLI.
"""

import json
import logging

import pytest
from pubsub import pub

from dashtile import topics
from dashtile.binding_manager import XKB, Modifiers
from dashtile.dashboard import Dashboard, DashboardConfig, main, parse_color
from dashtile.geometry import ResizeDirection
from dashtile.operation_manager import SessionState
from dashtile.persistence import DEFAULT_COLLECTION, JsonFileWorkspaceStore
from dashtile.placement import WindowKind


@pytest.mark.unit
class TestParseColor:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("#ffffff", (255, 255, 255, 255)),
            ("333333", (51, 51, 51, 255)),
            ("#c8edfc4d", (200, 237, 252, 77)),
            ((1, 2, 3, 4), (1, 2, 3, 4)),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_color(value) == expected

    @pytest.mark.parametrize("value", ["#12", "#zzzzzz", (300, 0, 0, 0), (1, 2, 3), 5])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_color(value)


@pytest.mark.unit
class TestDashboardConfig:
    """Test configuration parsing."""

    def test_defaults(self):
        config = DashboardConfig()
        assert (config.cols, config.rows, config.max_width, config.cell_size) == (5, 2, 3, 340)
        assert config.selected_border_color == (200, 237, 252, 255)
        assert config.handle_color == (200, 237, 252, 77)
        assert config.store_dir is None

    def test_grid(self):
        grid = DashboardConfig(cols=4, rows=3, max_width=2).grid
        assert (grid.cols, grid.rows, grid.max_width) == (4, 3, 2)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_width": 6},
            {"rows": 0},
            {"cell_size": 0},
            {"handle_width": 60, "cell_size": 100},
            {"cell_border_color": "#12345"},
            {"resizable_kinds": ["clock"]},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            DashboardConfig(**kwargs)

    def test_resizable_kinds_from_strings(self):
        config = DashboardConfig(resizable_kinds=["projects-timeline"])
        assert config.resizable_kinds == [WindowKind.PROJECTS_TIMELINE]

    def test_decoration_style(self):
        style = DashboardConfig(text_color="#ffffff", label_font_size=20).decoration_style()
        assert style.text_color == (255, 255, 255, 255)
        assert style.font_size == 20

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DASHTILE_STORE_DIR", str(tmp_path))
        assert DashboardConfig.from_env().store_dir == str(tmp_path)
        assert DashboardConfig.from_env(store_dir="/elsewhere").store_dir == "/elsewhere"

    def test_from_env_unset(self, monkeypatch):
        monkeypatch.delenv("DASHTILE_STORE_DIR", raising=False)
        assert DashboardConfig.from_env(cols=4).store_dir is None


@pytest.fixture
def dashboard(memory_store, executor):
    return Dashboard(DashboardConfig(cell_size=100), memory_store, executor)


@pytest.fixture
def loaded(dashboard):
    """Dashboard showing office-1 with a list at (0, 0) and notes at (0, 2)."""
    dashboard.select_entity("office-1")
    dashboard.list_id = dashboard.add_window(WindowKind.PROJECTS_LIST).id
    notes = dashboard.add_window(WindowKind.OFFICE_NOTES)
    dashboard.engine.move_or_swap(notes.id, 0, 2)
    dashboard.notes_id = notes.id
    return dashboard


@pytest.mark.unit
class TestDashboard:
    """Test wiring and input routing."""

    def test_store_from_config(self, tmp_path):
        dashboard = Dashboard(DashboardConfig(store_dir=str(tmp_path)))
        assert isinstance(dashboard.persistence.store, JsonFileWorkspaceStore)
        dashboard.shutdown()

    def test_no_workspace(self, dashboard, tmp_path):
        assert dashboard.engine is None
        assert dashboard.add_window(WindowKind.OFFICE_NOTES) is None
        assert dashboard.secondary_click(50, 50) is False
        assert dashboard.primary_press(50, 50) is False
        assert dashboard.pointer_release(50, 50) is False
        assert dashboard.drag_start(50, 50) is False
        assert dashboard.drop(50, 50) is False
        assert dashboard.render_preview(tmp_path / "x.png") is None
        dashboard.pointer_motion(50, 50)

    def test_layout_fixture(self, loaded):
        cells = {p.id: (p.row, p.anchor_col) for p in loaded.engine.placements}
        assert cells == {loaded.list_id: (0, 0), loaded.notes_id: (0, 2)}

    def test_changes_are_persisted(self, loaded, memory_store):
        windows = memory_store.documents["dashboard-office-1"]["windows"]
        assert [w["id"] for w in windows] == [loaded.list_id, loaded.notes_id]

    def test_secondary_click_toggles(self, loaded):
        assert loaded.secondary_click(50, 50) is True
        assert loaded.engine.session.selected_id == loaded.list_id
        assert loaded.secondary_click(50, 50) is True
        assert loaded.engine.session.selected_id is None
        assert loaded.secondary_click(150, 50) is False

    def test_background_press_deselects(self, loaded):
        loaded.secondary_click(50, 50)
        assert loaded.primary_press(150, 150) is True
        assert loaded.engine.session.get_state() == SessionState.IDLE

    def test_press_on_unselected_window(self, loaded):
        loaded.secondary_click(50, 50)
        assert loaded.primary_press(295, 50) is False
        assert loaded.engine.session.selected_id == loaded.list_id

    def test_resize_gesture(self, loaded):
        session = loaded.engine.session
        loaded.secondary_click(250, 50)
        assert loaded.primary_press(250, 50) is False

        assert loaded.primary_press(295, 50) is True
        assert session.get_state() == SessionState.RESIZING
        assert session.current.direction == ResizeDirection.RIGHT

        loaded.pointer_motion(270, 60)
        assert session.get_state() == SessionState.RESIZING

        assert loaded.pointer_release(450, 150) is True
        notes = loaded.engine.get(loaded.notes_id)
        assert (notes.width, notes.col_span) == (2, (2, 3))
        assert session.get_state() == SessionState.SELECTED

    def test_leaving_window_cancels_resize(self, loaded):
        session = loaded.engine.session
        loaded.secondary_click(250, 50)
        loaded.primary_press(204, 50)
        assert session.current.direction == ResizeDirection.LEFT

        loaded.pointer_motion(180, 50)
        assert session.get_state() == SessionState.SELECTED
        assert loaded.pointer_release(180, 50) is False
        assert loaded.engine.get(loaded.notes_id).width == 1

    def test_drag_and_drop(self, loaded):
        assert loaded.drag_start(50, 50) is False

        loaded.secondary_click(50, 50)
        assert loaded.drag_start(50, 50) is True
        assert loaded.drop(450, 150) is True

        moved = loaded.engine.get(loaded.list_id)
        assert (moved.row, moved.anchor_col) == (1, 4)
        assert loaded.engine.session.selected_id == loaded.list_id

    def test_drop_onto_other_window_swaps(self, loaded):
        loaded.secondary_click(50, 50)
        loaded.drag_start(50, 50)
        assert loaded.drop(250, 50) is True

        assert loaded.engine.get(loaded.list_id).anchor_col == 2
        assert loaded.engine.get(loaded.notes_id).anchor_col == 0

    def test_drop_outside_grid_ends_drag(self, loaded):
        loaded.secondary_click(50, 50)
        loaded.drag_start(50, 50)
        assert loaded.drop(900, 50) is False
        assert loaded.engine.session.get_state() == SessionState.SELECTED
        assert loaded.engine.get(loaded.list_id).anchor_col == 0

    def test_add_menu_adds_window(self, loaded):
        assert loaded.key_press(XKB.A, Modifiers.SHIFT) is True
        assert loaded.key_press(XKB.Down) is True
        assert loaded.key_press(XKB.Right) is True

        added = loaded.engine.placements[-1]
        assert added.kind == WindowKind.PROJECTS_LIST
        assert (added.row, added.anchor_col) == (0, 1)

    def test_delete_key_removes_selected(self, loaded):
        loaded.secondary_click(250, 50)
        assert loaded.key_press(XKB.Delete) is True
        assert loaded.engine.get(loaded.notes_id) is None
        assert loaded.engine.session.get_state() == SessionState.IDLE

    def test_delete_key_without_selection(self, loaded):
        assert loaded.key_press(XKB.BackSpace) is True
        assert len(loaded.engine.placements) == 2

    @pytest.mark.parametrize("kind,added", [("office-notes", True), ("weather", False)])
    def test_add_binding_with_kind_value(self, memory_store, executor, kind, added):
        binding = (XKB.Return, Modifiers.CTRL, topics.CMD_ADD_WINDOW, {"kind": kind})
        config = DashboardConfig(cell_size=100, custom_keybindings=[binding])
        dashboard = Dashboard(config, memory_store, executor)
        dashboard.select_entity("office-1")

        assert dashboard.key_press(XKB.Return, Modifiers.CTRL) is True
        kinds = [p.kind for p in dashboard.engine.placements]
        assert kinds == ([WindowKind.OFFICE_NOTES] if added else [])

        assert dashboard.add_window(WindowKind.PROJECTS_LIST) is not None
        windows = memory_store.documents["dashboard-office-1"]["windows"]
        assert [w["type"] for w in windows][-1] == "projects-list"

    def test_add_command_without_workspace(self, dashboard):
        pub.sendMessage(topics.CMD_ADD_WINDOW, kind=WindowKind.OFFICE_NOTES)
        assert dashboard.engine is None

    def test_entity_events(self, dashboard, memory_store):
        pub.sendMessage(topics.ENTITY_SELECTED, entity_id="office-9")
        assert dashboard.workspace.entity_id == "office-9"
        pub.sendMessage(topics.ENTITY_DESELECTED)
        assert dashboard.workspace is None

    def test_render_preview(self, loaded, tmp_path):
        path = loaded.render_preview(tmp_path / "preview.png")
        assert path.exists()

    def test_debug_event_logger(self, monkeypatch, memory_store, executor, caplog):
        monkeypatch.setenv("DASHTILE_DEBUG", "1")
        dashboard = Dashboard(store=memory_store, executor=executor)

        with caplog.at_level(logging.DEBUG, logger="dashtile.dashboard"):
            dashboard.select_entity("office-1")
        assert "EVENT: workspace.loaded" in caplog.text


class TestMain:
    """Test the command line entry point."""

    def test_add_and_print(self, tmp_path, capsys):
        assert main([str(tmp_path), "office-1", "--add", "office-notes", "projects-list"]) == 0

        out = capsys.readouterr().out
        assert "office-notes" in out and "projects-list" in out

        path = tmp_path / DEFAULT_COLLECTION / "dashboard-office-1.json"
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["entityId"] == "office-1"
        assert [w["type"] for w in document["windows"]] == ["office-notes", "projects-list"]

    def test_reload_and_preview(self, tmp_path, capsys):
        main([str(tmp_path), "office-1", "--add", "office-notes"])
        capsys.readouterr()

        preview = tmp_path / "preview.png"
        assert main([str(tmp_path), "office-1", "-o", str(preview)]) == 0

        out = capsys.readouterr().out
        assert "office-notes" in out
        assert preview.exists()

    def test_full_grid_reported(self, tmp_path, caplog):
        kinds = ["projects-list"] * 11
        with caplog.at_level(logging.ERROR, logger="dashtile.dashboard"):
            assert main([str(tmp_path), "office-1", "--add", *kinds]) == 0
        assert "No room for a projects-list window" in caplog.text

    def test_unknown_kind(self, tmp_path):
        with pytest.raises(SystemExit):
            main([str(tmp_path), "office-1", "--add", "weather"])
