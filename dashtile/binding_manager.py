"""
Binding Manager

Handles the dashboard's keyboard bindings and the add-window menu.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .placement import WindowKind


# XKB keysym values (from xkbcommon-keysyms.h)
class XKB:
    """XKB keysym constants used by the dashboard."""

    a = 0x61
    A = 0x41

    # Special keys
    Return = 0xFF0D
    Escape = 0xFF1B
    BackSpace = 0xFF08
    Delete = 0xFFFF

    # Navigation
    Left = 0xFF51
    Up = 0xFF52
    Right = 0xFF53
    Down = 0xFF54


class Modifiers(IntFlag):
    """Keyboard modifiers."""

    NONE = 0
    SHIFT = 1
    CTRL = 4
    MOD1 = 8  # Alt
    MOD4 = 64  # Super/Logo


class KeyboardMode(Enum):
    """Which binding table receives key presses."""

    NORMAL = "normal"
    ADD_MENU = "add_menu"


@dataclass
class KeyBinding:
    """Represents a keyboard binding.

    A binding either publishes event_topic with event_data or calls action.
    """

    keysym: int
    modifiers: Modifiers
    event_topic: Optional[str] = None
    event_data: dict = field(default_factory=dict)
    action: Optional[Callable[[], None]] = None

    def matches(self, keysym: int, modifiers: Modifiers) -> bool:
        return self.keysym == keysym and self.modifiers == modifiers

    def trigger(self):
        if self.action is not None:
            self.action()
            return

        from pubsub import pub

        pub.sendMessage(self.event_topic, **self.event_data)


class BindingManager:
    """Keyboard state machine with one binding table per mode.

    NORMAL: Shift+A opens the add menu, Escape navigates away and
    Delete/BackSpace remove the selected window.
    ADD_MENU: Up/Down move the highlight, Right adds the highlighted kind,
    Left/Escape close the menu.
    """

    def __init__(
        self,
        add_modifier: Modifiers = Modifiers.SHIFT,
        kinds: Optional[Iterable[WindowKind]] = None,
    ):
        """Initialize binding manager.

        Args:
            add_modifier: Modifier held with A to open the add menu
            kinds: Menu entries in order, all kinds if omitted
        """
        self.mode = KeyboardMode.NORMAL
        self.kinds: List[WindowKind] = list(kinds) if kinds is not None else list(WindowKind)
        if not self.kinds:
            raise ValueError("The add menu needs at least one window kind")

        self.menu_index = 0
        self.menu_position: Optional[Tuple[float, float]] = None
        self.pointer_position: Tuple[float, float] = (0.0, 0.0)

        self.key_bindings: Dict[KeyboardMode, List[KeyBinding]] = {
            mode: [] for mode in KeyboardMode
        }
        self.setup_default_bindings(add_modifier)

    @property
    def menu_open(self) -> bool:
        return self.mode == KeyboardMode.ADD_MENU

    @property
    def highlighted_kind(self) -> Optional[WindowKind]:
        """Kind under the menu highlight, None while the menu is closed."""
        if not self.menu_open:
            return None
        return self.kinds[self.menu_index]

    def bind_key(
        self,
        mode: KeyboardMode,
        keysym: int,
        modifiers: Modifiers,
        event_topic: str,
        **event_data,
    ):
        """Add a key binding that publishes a command event.

        Args:
            mode: Keyboard mode the binding is active in
            keysym: The key symbol
            modifiers: Modifier keys (Ctrl, Alt, etc.)
            event_topic: The event topic to publish (e.g., 'cmd.remove_selected')
            **event_data: Optional data to pass with the event
        """
        self.key_bindings[mode].append(
            KeyBinding(keysym, modifiers, event_topic, event_data)
        )

    def bind_action(
        self,
        mode: KeyboardMode,
        keysym: int,
        modifiers: Modifiers,
        action: Callable[[], None],
    ):
        """Add a key binding that calls action directly."""
        self.key_bindings[mode].append(KeyBinding(keysym, modifiers, action=action))

    def setup_default_bindings(self, add_modifier: Modifiers):
        """Set up the default dashboard bindings."""
        from . import topics

        # Open the add menu. Depending on the keymap, Shift+A arrives as
        # either keysym
        self.bind_action(KeyboardMode.NORMAL, XKB.a, add_modifier, self.open_menu)
        self.bind_action(KeyboardMode.NORMAL, XKB.A, add_modifier, self.open_menu)

        self.bind_key(KeyboardMode.NORMAL, XKB.Escape, Modifiers.NONE, topics.NAVIGATE_AWAY)
        self.bind_key(
            KeyboardMode.NORMAL, XKB.Delete, Modifiers.NONE, topics.CMD_REMOVE_SELECTED
        )
        self.bind_key(
            KeyboardMode.NORMAL, XKB.BackSpace, Modifiers.NONE, topics.CMD_REMOVE_SELECTED
        )

        # Menu navigation
        self.bind_action(KeyboardMode.ADD_MENU, XKB.Down, Modifiers.NONE, self.menu_next)
        self.bind_action(KeyboardMode.ADD_MENU, XKB.Up, Modifiers.NONE, self.menu_prev)
        self.bind_action(KeyboardMode.ADD_MENU, XKB.Right, Modifiers.NONE, self.confirm_menu)
        self.bind_action(KeyboardMode.ADD_MENU, XKB.Left, Modifiers.NONE, self.close_menu)
        self.bind_action(KeyboardMode.ADD_MENU, XKB.Escape, Modifiers.NONE, self.close_menu)

    def setup_custom_bindings(
        self, custom_bindings: Optional[list], mode: KeyboardMode = KeyboardMode.NORMAL
    ):
        """Set up user-defined custom keybindings.

        Args:
            custom_bindings: List of (keysym, modifiers, event_topic, event_data) tuples
            mode: Keyboard mode the bindings are active in
        """
        if not custom_bindings:
            return

        for binding in custom_bindings:
            keysym, modifiers, event_topic, event_data = binding
            self.bind_key(mode, keysym, modifiers, event_topic, **event_data)

    def handle_key(self, keysym: int, modifiers: Modifiers = Modifiers.NONE) -> bool:
        """Dispatch a key press to the bindings of the current mode.

        Returns:
            True if the key was consumed
        """
        for binding in self.key_bindings[self.mode]:
            if binding.matches(keysym, modifiers):
                binding.trigger()
                return True
        return False

    def handle_pointer_motion(self, x: float, y: float):
        """Track the pointer; an open menu follows it."""
        self.pointer_position = (x, y)
        if self.menu_open:
            self.menu_position = (x, y)

    # Menu actions

    def open_menu(self):
        self.mode = KeyboardMode.ADD_MENU
        self.menu_index = 0
        self.menu_position = self.pointer_position

    def close_menu(self):
        self.mode = KeyboardMode.NORMAL
        self.menu_position = None

    def menu_next(self):
        self.menu_index = (self.menu_index + 1) % len(self.kinds)

    def menu_prev(self):
        self.menu_index = (self.menu_index - 1) % len(self.kinds)

    def confirm_menu(self):
        """Add the highlighted kind and close the menu."""
        from pubsub import pub
        from . import topics

        kind = self.kinds[self.menu_index]
        self.close_menu()
        pub.sendMessage(topics.CMD_ADD_WINDOW, kind=kind)
