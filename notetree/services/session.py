from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from notetree.models.entry import EntryResult
from notetree.services.fs import DEFAULT_FS, FileSystem
from notetree.services.history import History
from notetree.services.tree import EntryTree


class Prompter(Protocol):
    def ask(self, prompt: str) -> str | None: ...


class Editor(Protocol):
    def open(self, file_location: str) -> None: ...


@dataclass(slots=True)
class NoteSession:
    """Everything a key handler may touch while one key is being processed."""

    tree: EntryTree
    prompter: Prompter
    editor: Editor
    history: History = field(default_factory=History)
    fs: FileSystem = DEFAULT_FS
    cursor: int = 0
    status: str = ""
    running: bool = True

    def row_count(self) -> int:
        return len(self.tree.flatten())

    def current(self) -> EntryResult:
        return self.tree.row(self.cursor)

    def move_cursor(self, amount: int) -> None:
        self.clamp_cursor()
        target = self.cursor + amount
        if 0 <= target < self.row_count():
            self.cursor = target

    def clamp_cursor(self) -> None:
        rows = self.row_count()
        if self.cursor >= rows and self.cursor > 0:
            self.cursor = max(0, rows - 1)

    def ask(self, prompt: str) -> str | None:
        """Blocking text prompt; ``None`` when cancelled or left empty."""
        self.status = f"{prompt}: "
        answer = self.prompter.ask(prompt)
        self.status = ""
        return answer or None

    def show_message(self, message: str) -> None:
        self.status = message

    def quit(self) -> None:
        self.running = False
