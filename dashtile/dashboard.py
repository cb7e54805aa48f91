"""
Dashboard

Wires the workspace store, the active workspace's layout engine, the pixel
layout, the renderer and the keyboard bindings together, and routes pointer
input into the selection / drag / resize state machine.
"""

from __future__ import annotations
import logging
import os
import time
from concurrent.futures import Executor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple
from pubsub import pub

from . import topics
from .binding_manager import BindingManager, Modifiers
from .decoration import DecorationStyle, GridRenderer
from .engine import GridLayoutEngine
from .geometry import GridSpec
from .layout import GridLayout
from .operation_manager import SessionState
from .persistence import (
    JsonFileWorkspaceStore,
    MemoryWorkspaceStore,
    WorkspacePersistence,
    WorkspaceStore,
)
from .placement import WindowKind, WindowPlacement
from .workspace import Workspace, WorkspaceManager

logger = logging.getLogger(__name__)


def parse_color(color: str | Tuple[int, int, int, int]) -> Tuple[int, int, int, int]:
    """
    Parse a color value into RGBA tuple.

    Accepts:
    - Hex string: "#RRGGBB" or "#RRGGBBAA" (e.g., "#333333" or "#c8edfc4d")
    - Tuple: (R, G, B, A) where each value is 0-255

    Returns:
    - Tuple of (R, G, B, A) values from 0-255
    """
    if isinstance(color, str):
        hex_value = color.lstrip("#")
        try:
            channels = [int(hex_value[i : i + 2], 16) for i in range(0, len(hex_value), 2)]
        except ValueError:
            raise ValueError(f"Invalid color value: {color}") from None

        if len(hex_value) == 6:
            return (channels[0], channels[1], channels[2], 0xFF)
        elif len(hex_value) == 8:
            return tuple(channels)
        else:
            raise ValueError(f"Invalid color format: {color}. Use #RRGGBB or #RRGGBBAA")
    elif isinstance(color, tuple) and len(color) == 4:
        if not all(isinstance(c, int) and 0 <= c <= 255 for c in color):
            raise ValueError(f"Color channels must be 0-255: {color}")
        return color
    else:
        raise ValueError(
            f"Invalid color type: {type(color)}. Use hex string or RGBA tuple"
        )


@dataclass
class DashboardConfig:
    """Dashboard configuration."""

    # Grid settings
    cols: int = 5
    rows: int = 2
    max_width: int = 3
    cell_size: int = 340

    # Kinds allowed to grow wider (default: office notes only)
    resizable_kinds: Optional[List[WindowKind]] = None

    # Frame styling
    background_color: str | Tuple[int, int, int, int] = "#000000"
    cell_border_color: str | Tuple[int, int, int, int] = "#333333"
    window_bg_color: str | Tuple[int, int, int, int] = "#0a0a0a"
    selected_border_color: str | Tuple[int, int, int, int] = "#c8edfc"
    handle_color: str | Tuple[int, int, int, int] = "#c8edfc4d"
    text_color: str | Tuple[int, int, int, int] = "#d8dee9"
    handle_width: int = 8
    label_font_size: int = 13

    # Directory of the JSON workspace store; in-memory if unset
    store_dir: Optional[str] = None

    # Modifier held with A to open the add menu
    add_menu_mod: Modifiers = Modifiers.SHIFT

    # Custom keybindings: list of (keysym, modifiers, event_topic, event_data) tuples
    # Example: [(XKB.Return, Modifiers.CTRL, topics.CMD_REMOVE_SELECTED, {})]
    custom_keybindings: Optional[List[Tuple[int, Modifiers, str, dict]]] = None

    def __post_init__(self):
        """Parse colors and validate the grid."""
        self.background_color = parse_color(self.background_color)
        self.cell_border_color = parse_color(self.cell_border_color)
        self.window_bg_color = parse_color(self.window_bg_color)
        self.selected_border_color = parse_color(self.selected_border_color)
        self.handle_color = parse_color(self.handle_color)
        self.text_color = parse_color(self.text_color)

        if self.resizable_kinds is not None:
            self.resizable_kinds = [WindowKind(k) for k in self.resizable_kinds]
        if self.cell_size < 1:
            raise ValueError(f"cell_size must be positive: {self.cell_size}")
        if self.handle_width < 1 or 2 * self.handle_width > self.cell_size:
            raise ValueError(f"Invalid handle_width: {self.handle_width}")

        # GridSpec raises ValueError for bad dimensions
        GridSpec(cols=self.cols, rows=self.rows, max_width=self.max_width)

    @property
    def grid(self) -> GridSpec:
        return GridSpec(cols=self.cols, rows=self.rows, max_width=self.max_width)

    def decoration_style(self) -> DecorationStyle:
        return DecorationStyle(
            background_color=self.background_color,
            cell_border_color=self.cell_border_color,
            window_bg_color=self.window_bg_color,
            selected_border_color=self.selected_border_color,
            handle_color=self.handle_color,
            text_color=self.text_color,
            font_size=self.label_font_size,
        )

    @classmethod
    def from_env(cls, **overrides) -> "DashboardConfig":
        """Build a config, taking store_dir from DASHTILE_STORE_DIR."""
        store_dir = os.getenv("DASHTILE_STORE_DIR")
        if store_dir and "store_dir" not in overrides:
            overrides["store_dir"] = store_dir
        return cls(**overrides)


class Dashboard:
    """
    Dashboard window tiling

    Owns the active workspace of the selected entity and turns pointer and
    key input into layout commands.
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        store: Optional[WorkspaceStore] = None,
        executor: Optional[Executor] = None,
    ):
        """Initialize the dashboard.

        Architecture:
        1. Create the persistence adapter around the store
        2. Create components - they self-subscribe to events
        3. Subscribe to the command events published by key bindings

        Args:
            config: Dashboard configuration
            store: Workspace store, derived from config.store_dir if omitted
            executor: Executor running saves
        """
        self.config = config or DashboardConfig()

        # Setup debug event logging if enabled
        if os.getenv("DASHTILE_DEBUG"):
            pub.subscribe(self.debug_event_logger, pub.ALL_TOPICS)

        if store is None:
            if self.config.store_dir:
                store = JsonFileWorkspaceStore(self.config.store_dir)
            else:
                store = MemoryWorkspaceStore()
        self.persistence = WorkspacePersistence(store, executor)

        # Workspace lifecycle (self-subscribes to entity and layout events)
        self.workspaces = WorkspaceManager(
            self.persistence, self.config.grid, self.config.resizable_kinds
        )

        self.layout = GridLayout(
            self.config.grid, self.config.cell_size, self.config.handle_width
        )
        self.renderer = GridRenderer(self.layout, self.config.decoration_style())

        # Key bindings (publish command events)
        self.binding_manager = BindingManager(add_modifier=self.config.add_menu_mod)
        self.binding_manager.setup_custom_bindings(self.config.custom_keybindings)

        self._setup_subscriptions()

    def _setup_subscriptions(self):
        """Subscribe to command events."""
        pub.subscribe(self._on_add_window, topics.CMD_ADD_WINDOW)
        pub.subscribe(self._on_remove_selected, topics.CMD_REMOVE_SELECTED)

    @property
    def workspace(self) -> Optional[Workspace]:
        return self.workspaces.active

    @property
    def engine(self) -> Optional[GridLayoutEngine]:
        return self.workspaces.engine

    def debug_event_logger(self, topic=pub.AUTO_TOPIC, **kwargs):
        """Log all events published on the event bus."""
        timestamp = time.strftime("%H:%M:%S")
        topic_name = topic.getName()
        data_str = ", ".join(f"{k}={v}" for k, v in kwargs.items() if k != "topic")
        logger.debug("[%s] EVENT: %s | %s", timestamp, topic_name, data_str)

    # Workspace

    def select_entity(self, entity_id: str) -> Workspace:
        """Show the workspace of a business entity."""
        return self.workspaces.select_entity(entity_id)

    def add_window(self, kind: WindowKind) -> Optional[WindowPlacement]:
        """Add a window to the active workspace."""
        if self.engine is None:
            logger.debug("No workspace active, ignoring add of %r", kind)
            return None
        return self.engine.add(kind)

    # Pointer input

    def pointer_motion(self, x: float, y: float):
        """Track the pointer. Leaving the resized window cancels the resize."""
        self.binding_manager.handle_pointer_motion(x, y)

        engine = self.engine
        if engine is None or engine.session.get_state() != SessionState.RESIZING:
            return

        placement = engine.get(engine.session.selected_id)
        if placement is not None and not self.layout.geometry(placement).contains(x, y):
            engine.session.pointer_leave(placement.id)

    def secondary_click(self, x: float, y: float) -> bool:
        """Right click toggles the selection of the window under the pointer."""
        engine = self.engine
        if engine is None:
            return False

        window = self.layout.window_at(engine.placements, x, y)
        if window is None:
            return False
        return engine.select(window.id)

    def primary_press(self, x: float, y: float) -> bool:
        """Primary press: starts a resize on a handle, clears on background."""
        engine = self.engine
        if engine is None:
            return False

        window = self.layout.window_at(engine.placements, x, y)
        if window is None:
            return engine.deselect()
        if window.id != engine.session.selected_id:
            return False

        direction = self.layout.handle_at(window, x, y)
        if direction is None:
            return False
        return engine.begin_resize(window.id, direction)

    def pointer_release(self, x: float, y: float) -> bool:
        """Pointer released: commits an active resize."""
        engine = self.engine
        if engine is None:
            return False
        return engine.commit_resize()

    def drag_start(self, x: float, y: float) -> bool:
        """Native drag started at a pixel position."""
        engine = self.engine
        if engine is None:
            return False

        window = self.layout.window_at(engine.placements, x, y)
        if window is None:
            return False
        return engine.session.start_drag(window.id)

    def drop(self, x: float, y: float) -> bool:
        """Drop the dragged window at a pixel position.

        Returns:
            True if the layout changed
        """
        engine = self.engine
        if engine is None:
            return False

        cell = self.layout.cell_at(x, y)
        if cell is None:
            engine.session.end_drag()
            return False
        return engine.session.drop(*cell)

    # Keyboard input

    def key_press(self, keysym: int, modifiers: Modifiers = Modifiers.NONE) -> bool:
        """Dispatch a key press. Returns True if it was consumed."""
        return self.binding_manager.handle_key(keysym, modifiers)

    # Output

    def render_preview(self, path: Path | str) -> Optional[Path]:
        """Write a PNG of the active workspace's frames."""
        if self.engine is None:
            return None
        return self.renderer.write_png(self.engine, path)

    def shutdown(self):
        """Save the active workspace and wait for pending saves."""
        self.workspaces.shutdown()
        self.persistence.shutdown(wait=True)

    # Command handlers

    def _on_add_window(self, kind):
        """Handle CMD_ADD_WINDOW."""
        self.add_window(kind)

    def _on_remove_selected(self):
        """Handle CMD_REMOVE_SELECTED."""
        if self.engine is not None:
            self.engine.session.delete_selected()


def format_layout(engine: GridLayoutEngine) -> str:
    """Text table of a workspace's placements."""
    from .layout import describe

    lines = [f"{'id':<32} {'kind':<20} {'row':>3} {'cols':>5} {'size':>5}"]
    for placement in engine.placements:
        view = describe(placement)
        cols = f"{view.leftmost_col}-{view.rightmost_col}"
        size = f"{view.width}x{view.height}"
        lines.append(
            f"{view.id:<32} {view.kind.value:<20} {view.row:>3} {cols:>5} {size:>5}"
        )
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="dashtile", description="Inspect and edit a dashboard workspace"
    )
    parser.add_argument("store_dir", help="Directory of the workspace store")
    parser.add_argument("entity_id", help="Entity whose workspace to open")
    parser.add_argument(
        "--add",
        metavar="KIND",
        nargs="+",
        default=[],
        choices=[kind.value for kind in WindowKind],
        help="Add windows of these kinds",
    )
    parser.add_argument("-o", "--output", help="Write a PNG preview to this path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    dashboard = Dashboard(DashboardConfig.from_env(store_dir=args.store_dir))
    try:
        workspace = dashboard.select_entity(args.entity_id)
        if not workspace.loaded:
            logger.error("Workspace %s could not be loaded", workspace.key)
            return 1

        for value in args.add:
            if dashboard.add_window(WindowKind(value)) is None:
                logger.error("No room for a %s window", value)

        print(format_layout(dashboard.engine))

        if args.output:
            path = dashboard.render_preview(args.output)
            print(f"Preview written to {path}")
    finally:
        dashboard.shutdown()

    return 0


if __name__ == "__main__":
    import sys

    sys.exit(main())
