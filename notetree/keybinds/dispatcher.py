from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from notetree.keybinds.handlers import HANDLERS, Handler, HandlerId
from notetree.keybinds.modes import DEFAULT, KeybindMode, multikey
from notetree.models.enums import ModeKind
from notetree.services.session import NoteSession

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Binding:
    mode: KeybindMode
    handler_id: HandlerId


def is_partial_keybind(candidate: str, keys: str) -> bool:
    """True when *keys* strictly extends *candidate*."""
    return keys != candidate and keys.startswith(candidate)


class KeybindDispatcher:
    """Turns single key presses into handler calls.

    Multi-key sequences accumulate in a MULTIKEY mode while some registered
    sequence still extends the keys typed so far. A sequence that is both bound
    and a prefix of a longer one fires its handlers and keeps accumulating.
    """

    def __init__(self, session: NoteSession, handlers: Mapping[HandlerId, Handler] = HANDLERS) -> None:
        missing = [handler_id.value for handler_id in HandlerId if handler_id not in handlers]
        if missing:
            raise ValueError(f"No handler registered for: {', '.join(missing)}")
        self.session = session
        self.mode: KeybindMode = DEFAULT
        self._handlers = handlers
        self._bindings: dict[str, list[Binding]] = {}

    def add(self, keys: str, mode: KeybindMode, handler_id: HandlerId) -> None:
        if not keys:
            raise ValueError("keys must be a non-empty string")
        self._bindings.setdefault(keys, []).append(Binding(mode, handler_id))

    def unbind(self, keys: str, mode: KeybindMode | None = None) -> None:
        """Drop the bindings for *keys*, or only those registered under *mode*."""
        if mode is None:
            self._bindings.pop(keys, None)
            return
        kept = [binding for binding in self._bindings.get(keys, []) if binding.mode != mode]
        if kept:
            self._bindings[keys] = kept
        else:
            self._bindings.pop(keys, None)

    def bindings(self) -> dict[str, list[Binding]]:
        return {keys: list(bound) for keys, bound in self._bindings.items()}

    def handle_input(self, key: str) -> KeybindMode:
        current = self.mode
        if current.kind is ModeKind.MULTIKEY:
            candidate = current.prefix + key
        else:
            candidate = key

        next_mode = DEFAULT
        for binding in self._bindings.get(candidate, []):
            if not current.matches(binding.mode):
                continue
            logger.debug("%r -> %s", candidate, binding.handler_id.value)
            chosen = self._handlers[binding.handler_id](self.session, current)
            next_mode = current if chosen is None else chosen

        if any(is_partial_keybind(candidate, keys) for keys in self._bindings):
            next_mode = multikey(candidate)

        if next_mode != current:
            logger.debug("mode %s -> %s", current, next_mode)
        self.mode = next_mode
        return next_mode
