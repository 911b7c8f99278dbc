from __future__ import annotations

import logging
from collections.abc import Mapping

from notetree.keybinds.dispatcher import KeybindDispatcher
from notetree.keybinds.handlers import HandlerId
from notetree.keybinds.modes import DEFAULT, MOVE, MULTIKEY, WILDCARD, KeybindMode
from notetree.models.enums import ModeKind

logger = logging.getLogger(__name__)

DEFAULT_BINDINGS: tuple[tuple[str, KeybindMode, HandlerId], ...] = (
    ("d", DEFAULT, HandlerId.DELETE_ENTRY),
    ("an", MULTIKEY, HandlerId.ADD_NOTE),
    ("j", WILDCARD, HandlerId.CURSOR_DOWN),
    ("k", WILDCARD, HandlerId.CURSOR_UP),
    ("u", DEFAULT, HandlerId.UNDO),
    ("r", DEFAULT, HandlerId.REDO),
    ("al", MULTIKEY, HandlerId.REDO),
    ("\n", DEFAULT, HandlerId.ACTIVATE),
    ("q", DEFAULT, HandlerId.QUIT),
    ("m", DEFAULT, HandlerId.MOVE_START),
    ("\n", MOVE, HandlerId.MOVE_COMPLETE),
    ("ac", MULTIKEY, HandlerId.ADD_CATEGORY),
    ("ar", MULTIKEY, HandlerId.ADD_ROOT_CATEGORY),
    ("cn", MULTIKEY, HandlerId.CHANGE_NAME),
    ("cf", MULTIKEY, HandlerId.CHANGE_FILE),
    ("sn", MULTIKEY, HandlerId.SORT_NAME),
    ("sf", MULTIKEY, HandlerId.SORT_FILE),
    ("st", MULTIKEY, HandlerId.SORT_TIME),
    ("sd", MULTIKEY, HandlerId.SORT_DESCENDING),
    ("sa", MULTIKEY, HandlerId.SORT_ASCENDING),
)


def _mode_for(keys: str, handler_id: HandlerId) -> KeybindMode:
    """Mode a user binding needs so that it can fire for a sequence of this length."""
    base = next((mode for _, mode, bound in DEFAULT_BINDINGS if bound is handler_id), DEFAULT)
    if len(keys) > 1 and base.kind is ModeKind.DEFAULT:
        return MULTIKEY
    if len(keys) == 1 and base.kind is ModeKind.MULTIKEY:
        return DEFAULT
    return base


def init_keybindings(dispatcher: KeybindDispatcher, overrides: Mapping[str, str] | None = None) -> None:
    """Register the stock bindings, then user overrides keyed by sequence."""
    for keys, mode, handler_id in DEFAULT_BINDINGS:
        dispatcher.add(keys, mode, handler_id)

    for keys, name in (overrides or {}).items():
        if not keys:
            logger.warning("ignoring binding for %r: empty key sequence", name)
            continue
        try:
            handler_id = HandlerId(name)
        except ValueError:
            logger.warning("ignoring binding %r: unknown handler %r", keys, name)
            continue
        mode = _mode_for(keys, handler_id)
        dispatcher.unbind(keys, mode)
        dispatcher.add(keys, mode, handler_id)
