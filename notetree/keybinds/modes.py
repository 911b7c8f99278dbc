from __future__ import annotations

from dataclasses import dataclass

from notetree.models.enums import ModeKind


@dataclass(slots=True, frozen=True)
class KeybindMode:
    kind: ModeKind
    prefix: str = ""
    entry_id: int | None = None

    def matches(self, other: KeybindMode) -> bool:
        """Loose comparison used to pick bindings; payloads are ignored."""
        if self.kind is ModeKind.WILDCARD or other.kind is ModeKind.WILDCARD:
            return True
        return self.kind is other.kind


DEFAULT = KeybindMode(ModeKind.DEFAULT)
WILDCARD = KeybindMode(ModeKind.WILDCARD)
MULTIKEY = KeybindMode(ModeKind.MULTIKEY)
MOVE = KeybindMode(ModeKind.MOVE)


def multikey(prefix: str) -> KeybindMode:
    return KeybindMode(ModeKind.MULTIKEY, prefix=prefix)


def moving(entry_id: int) -> KeybindMode:
    return KeybindMode(ModeKind.MOVE, entry_id=entry_id)
