"""
Workspace Management

A workspace is the persisted placement collection of one selected business
entity. The WorkspaceManager keeps the active workspace, loads it once and
writes every layout change back through the persistence adapter.
"""

from __future__ import annotations
import logging
from enum import Enum, auto
from typing import Any, Dict, Iterable, List, Optional, Set

from .engine import GridLayoutEngine
from .geometry import GridSpec, clamp_anchor, find_collision, find_free_cell
from .persistence import PersistenceError, WorkspacePersistence, workspace_key
from .placement import WindowKind, WindowPlacement

logger = logging.getLogger(__name__)


def reconcile(windows: Iterable[Dict[str, Any]], grid: GridSpec) -> List[WindowPlacement]:
    """Turn stored window dicts into a valid placement collection.

    Malformed entries and duplicate ids are dropped and sizes and anchors
    are pulled into the grid. Windows that fit beside the ones before them
    keep their place. The remaining, overlapping windows are then moved to
    the first cell left free (or dropped when the grid is full). Stored
    order is kept.
    """
    candidates: List[WindowPlacement] = []
    seen: Set[str] = set()

    for data in windows:
        try:
            placement = WindowPlacement.from_dict(data)
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            logger.warning("Dropping malformed window %r: %s", data, e)
            continue

        if placement.id in seen:
            logger.warning("Dropping duplicate window id %s", placement.id)
            continue
        seen.add(placement.id)

        placement.width = min(max(placement.width, 1), grid.max_width)
        placement.height = min(max(placement.height, 1), grid.rows)
        placement.row = clamp_anchor(placement.row, placement.height, grid.rows)
        placement.anchor_col = clamp_anchor(placement.anchor_col, placement.width, grid.cols)
        candidates.append(placement)

    kept: List[WindowPlacement] = []
    overlapping: List[WindowPlacement] = []
    for placement in candidates:
        if find_collision(kept, placement.row_span, placement.col_span) is None:
            kept.append(placement)
        else:
            overlapping.append(placement)

    for placement in overlapping:
        cell = find_free_cell(kept, grid)
        if cell is None:
            logger.warning("Dropping overlapping window %s: grid is full", placement.id)
            continue
        logger.warning("Moving overlapping window %s to (%d, %d)", placement.id, *cell)
        placement.row, placement.anchor_col = cell
        placement.width = placement.height = 1
        kept.append(placement)

    order = {placement.id: i for i, placement in enumerate(candidates)}
    return sorted(kept, key=lambda p: order[p.id])


class LoadState(Enum):
    """Progress of a workspace's initial load."""

    NOT_LOADED = auto()
    LOADING = auto()
    LOADED = auto()


class Workspace:
    """One entity's dashboard: its engine plus load/save bookkeeping."""

    def __init__(
        self,
        entity_id: str,
        persistence: WorkspacePersistence,
        grid: Optional[GridSpec] = None,
        resizable_kinds: Optional[Iterable[WindowKind]] = None,
    ):
        self.entity_id = entity_id
        self.key = workspace_key(entity_id)
        self.persistence = persistence
        self.engine = GridLayoutEngine(self.key, grid, resizable_kinds)
        self.load_state = LoadState.NOT_LOADED

    @property
    def loaded(self) -> bool:
        return self.load_state == LoadState.LOADED

    def load(self) -> bool:
        """Load the stored placements. Only the first call does anything.

        An absent document counts as an empty, loaded workspace. A failed
        read leaves the workspace unloaded so nothing overwrites the stored
        layout.

        Returns:
            True if the workspace is now loaded by this call
        """
        from pubsub import pub
        from . import topics

        if self.load_state != LoadState.NOT_LOADED:
            return False

        self.load_state = LoadState.LOADING
        try:
            windows = self.persistence.load(self.key)
        except PersistenceError as e:
            logger.error("%s", e)
            self.load_state = LoadState.NOT_LOADED
            return False

        self.engine.replace(reconcile(windows or [], self.engine.grid))
        self.load_state = LoadState.LOADED
        logger.info(
            "Loaded workspace %s (%d windows)", self.key, len(self.engine.placements)
        )

        pub.sendMessage(
            topics.WORKSPACE_LOADED,
            workspace_key=self.key,
            count=len(self.engine.placements),
        )
        return True

    def save(self, windows: Optional[List[Dict[str, Any]]] = None):
        """Persist a snapshot (the current one if omitted), once loaded."""
        if not self.loaded:
            return None
        if windows is None:
            windows = self.engine.snapshot()
        return self.persistence.save(self.key, self.entity_id, windows)

    def teardown(self):
        """Final save when the workspace goes away."""
        self.engine.session.reset()
        return self.save()


class WorkspaceManager:
    """
    Keeps the active workspace in sync with the selected entity.

    This component subscribes to entity selection, layout and window events.

    Responsibilities:
    - ENTITY_SELECTED: tear down the current workspace, load the new one
    - ENTITY_DESELECTED: drop the stale workspace and its placements
    - LAYOUT_CHANGED: write the snapshot of the active workspace
    - WINDOW_CLOSED: remove the window from the active workspace
    """

    def __init__(
        self,
        persistence: WorkspacePersistence,
        grid: Optional[GridSpec] = None,
        resizable_kinds: Optional[Iterable[WindowKind]] = None,
    ):
        self.persistence = persistence
        self.grid = grid or GridSpec()
        self.resizable_kinds = resizable_kinds
        self.active: Optional[Workspace] = None

        self._setup_subscriptions()

    def _setup_subscriptions(self):
        """Subscribe to events WorkspaceManager cares about."""
        from pubsub import pub
        from . import topics

        pub.subscribe(self._on_layout_changed, topics.LAYOUT_CHANGED)
        pub.subscribe(self._on_entity_selected, topics.ENTITY_SELECTED)
        pub.subscribe(self._on_entity_deselected, topics.ENTITY_DESELECTED)
        pub.subscribe(self._on_window_closed, topics.WINDOW_CLOSED)

    @property
    def engine(self) -> Optional[GridLayoutEngine]:
        """Engine of the active workspace."""
        return self.active.engine if self.active else None

    def select_entity(self, entity_id: str) -> Workspace:
        """Switch to the workspace of an entity and load it."""
        if self.active is not None and self.active.entity_id == entity_id:
            self.active.load()
            return self.active

        if self.active is not None:
            self.active.teardown()

        self.active = Workspace(
            entity_id, self.persistence, self.grid, self.resizable_kinds
        )
        self.active.load()
        return self.active

    def clear(self):
        """Drop the active workspace after a final save."""
        if self.active is None:
            return

        workspace = self.active
        self.active = None
        workspace.teardown()
        workspace.engine.replace([])
        logger.debug("Cleared workspace %s", workspace.key)

    def shutdown(self):
        """Save the active workspace on application exit."""
        if self.active is not None:
            self.active.teardown()

    def _on_layout_changed(self, workspace_key, placements):
        """Handle LAYOUT_CHANGED event."""
        if self.active is not None and self.active.key == workspace_key:
            self.active.save(placements)

    def _on_entity_selected(self, entity_id):
        """Handle ENTITY_SELECTED event."""
        self.select_entity(entity_id)

    def _on_entity_deselected(self):
        """Handle ENTITY_DESELECTED event."""
        self.clear()

    def _on_window_closed(self, window_id):
        """Handle WINDOW_CLOSED event."""
        if self.active is not None:
            self.active.engine.remove(window_id)
