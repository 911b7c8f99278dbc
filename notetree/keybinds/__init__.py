from __future__ import annotations

from notetree.keybinds.defaults import DEFAULT_BINDINGS, init_keybindings
from notetree.keybinds.dispatcher import Binding, KeybindDispatcher
from notetree.keybinds.handlers import HANDLERS, HandlerId
from notetree.keybinds.modes import KeybindMode

__all__ = [
    "DEFAULT_BINDINGS",
    "HANDLERS",
    "Binding",
    "HandlerId",
    "KeybindDispatcher",
    "KeybindMode",
    "init_keybindings",
]
