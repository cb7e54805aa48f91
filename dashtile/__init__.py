"""
dashtile - Dashboard Window Tiling

A constrained grid layout engine for dashboard windows.

This package provides:
- Placement math for a fixed cell grid (middle-anchored spans, clamping,
  collision detection)
- The layout engine with add, remove, move/swap and resize commands
- A selection / drag / resize state machine
- Per-entity workspace persistence with fire-and-forget saves
- Pixel layout, hit testing and a Cairo preview renderer
- Keyboard bindings with an add-window menu

Example usage:
    from dashtile import Dashboard, DashboardConfig, WindowKind

    dashboard = Dashboard(DashboardConfig(store_dir="/var/lib/dashtile"))
    dashboard.select_entity("office-42")
    dashboard.add_window(WindowKind.OFFICE_NOTES)
    dashboard.shutdown()

Or run directly:
    python -m dashtile STORE_DIR ENTITY_ID
"""

__version__ = "0.1.0"

from .geometry import (
    GridSpec,
    ResizeDirection,
    WindowEdges,
    clamp_anchor,
    leftmost_col,
    rightmost_col,
)

from .placement import WindowKind, WindowPlacement

from .engine import GridLayoutEngine

from .operation_manager import OperationManager, OpType, Session, SessionState

from .persistence import (
    JsonFileWorkspaceStore,
    MemoryWorkspaceStore,
    PersistenceError,
    WorkspacePersistence,
    WorkspaceStore,
    workspace_key,
)

from .workspace import LoadState, Workspace, WorkspaceManager, reconcile

from .layout import GridLayout, LayoutGeometry, PlacementView, describe

from .decoration import DecorationStyle, GridRenderer

from .binding_manager import XKB, BindingManager, KeyboardMode, Modifiers

from .dashboard import Dashboard, DashboardConfig, parse_color

from . import topics

__all__ = [
    # Version
    "__version__",
    # Geometry
    "GridSpec",
    "ResizeDirection",
    "WindowEdges",
    "clamp_anchor",
    "leftmost_col",
    "rightmost_col",
    # Placements
    "WindowKind",
    "WindowPlacement",
    # Engine
    "GridLayoutEngine",
    "OperationManager",
    "OpType",
    "Session",
    "SessionState",
    # Persistence
    "JsonFileWorkspaceStore",
    "MemoryWorkspaceStore",
    "PersistenceError",
    "WorkspacePersistence",
    "WorkspaceStore",
    "workspace_key",
    # Workspaces
    "LoadState",
    "Workspace",
    "WorkspaceManager",
    "reconcile",
    # Rendering
    "GridLayout",
    "LayoutGeometry",
    "PlacementView",
    "describe",
    "DecorationStyle",
    "GridRenderer",
    # Input
    "XKB",
    "BindingManager",
    "KeyboardMode",
    "Modifiers",
    # Dashboard
    "Dashboard",
    "DashboardConfig",
    "parse_color",
    # Event topics
    "topics",
]
