from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notetree.services.actions import Action


class History:
    """Undo stack (most recent last) paired with a redo queue (oldest first).

    Only ``record`` clears the redo queue; shuttling actions between the two
    sides never does.
    """

    def __init__(self) -> None:
        self._undo: list[Action] = []
        self._redo: deque[Action] = deque()

    def record(self, action: Action) -> None:
        """Store an action whose forward effect has already been applied."""
        self._undo.append(action)
        self._redo.clear()

    def pop_undo(self) -> Action | None:
        """Pop the latest action and queue it for redo. The caller inverts it."""
        if not self._undo:
            return None
        action = self._undo.pop()
        self._redo.append(action)
        return action

    def pop_redo(self) -> Action | None:
        """Take the head of the redo queue back onto the undo stack. The caller applies it."""
        if not self._redo:
            return None
        action = self._redo.popleft()
        self._undo.append(action)
        return action

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def __len__(self) -> int:
        return len(self._undo)

    def redo_len(self) -> int:
        return len(self._redo)
