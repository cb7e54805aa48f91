"""
Event Topics for the dashtile dashboard

All pub/sub topics are defined here for easy discovery and documentation.
Topic naming convention: <category>.<action>

Every topic is published with exactly one set of keyword arguments, listed
in its docstring. Listeners must accept those names.
"""

# Layout events
LAYOUT_CHANGED = "layout.changed"
"""Published after every mutating command. Params: workspace_key, placements (list of dicts)"""

# Selection and interactive operation events
SELECTION_CHANGED = "selection.changed"
"""Published when the selected window changes. Params: window_id (or None)"""

OPERATION_STARTED = "operation.started"
"""Published when a drag or resize session starts. Params: window_id, operation"""

OPERATION_ENDED = "operation.ended"
"""Published when a drag or resize session ends. Params: window_id, operation"""

# Window lifecycle events
WINDOW_CLOSED = "window.closed"
"""Published when a window's content asks to be closed. Params: window_id"""

# Workspace context events
ENTITY_SELECTED = "entity.selected"
"""Published when the business entity backing the dashboard changes. Params: entity_id"""

ENTITY_DESELECTED = "entity.deselected"
"""Published when no business entity is selected anymore."""

WORKSPACE_LOADED = "workspace.loaded"
"""Published once a workspace's placements are loaded. Params: workspace_key, count"""

# Command events (imperative - tell components to do something)
# These are triggered by user input (keybinds)

CMD_ADD_WINDOW = "cmd.add_window"
"""Command: Add a window of the given kind. Params: kind (WindowKind)"""

CMD_REMOVE_SELECTED = "cmd.remove_selected"
"""Command: Remove the selected window."""

# Navigation
NAVIGATE_AWAY = "navigate.away"
"""Published when Escape is pressed with nothing open. Handled by the host application."""


# Message data specifications. Topics are created up front so a listener
# accepting **kwargs cannot define a topic's arguments by subscribing first.


def _layout_changed(workspace_key, placements):
    pass


def _window_id_only(window_id):
    pass


def _operation(window_id, operation):
    pass


def _entity_selected(entity_id):
    pass


def _workspace_loaded(workspace_key, count):
    pass


def _add_window(kind):
    pass


def _no_args():
    pass


_PROTOTYPES = {
    LAYOUT_CHANGED: _layout_changed,
    SELECTION_CHANGED: _window_id_only,
    OPERATION_STARTED: _operation,
    OPERATION_ENDED: _operation,
    WINDOW_CLOSED: _window_id_only,
    ENTITY_SELECTED: _entity_selected,
    ENTITY_DESELECTED: _no_args,
    WORKSPACE_LOADED: _workspace_loaded,
    CMD_ADD_WINDOW: _add_window,
    CMD_REMOVE_SELECTED: _no_args,
    NAVIGATE_AWAY: _no_args,
}


def define_topics():
    """Create every topic with its message data specification."""
    from pubsub import pub

    topic_mgr = pub.getDefaultTopicMgr()
    for name, prototype in _PROTOTYPES.items():
        topic_mgr.getOrCreateTopic(name, prototype)


define_topics()
