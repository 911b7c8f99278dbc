from __future__ import annotations

import logging
import queue
import shlex
import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing_extensions import override

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Container, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from notetree.config.schema import AppConfig
from notetree.keybinds import KeybindDispatcher, KeybindMode, init_keybindings
from notetree.models.enums import ModeKind
from notetree.services.formatting import DisplayRow, display_rows
from notetree.services.fs import DEFAULT_FS, FileSystem
from notetree.services.session import NoteSession
from notetree.services.tree import EntryTree

logger = logging.getLogger(__name__)

_KEY_NAMES: dict[str, str] = {"\n": "Enter"}


@dataclass(slots=True, frozen=True)
class _Frame:
    rows: tuple[DisplayRow, ...]
    cursor: int
    status: str
    mode: KeybindMode


class HelpOverlay(ModalScreen[None]):
    CSS = """
    HelpOverlay {
        align: center middle;
        background: rgba(0,0,0,0.45);
    }
    #help-box {
        width: 70%;
        height: 80%;
        background: #282a2e;
        border: solid #81a2be;
        padding: 1 2;
        color: #c5c8c6;
    }
    """

    def __init__(self, lines: list[str]) -> None:
        super().__init__()
        self._lines = lines

    @override
    def compose(self) -> ComposeResult:
        content = "\n".join(["[b #81a2be]Keys[/]", *self._lines, "", "  ?: Toggle help"])
        yield Static(content, id="help-box")

    def key_escape(self) -> None:
        self.dismiss()

    def key_q(self) -> None:
        self.dismiss()

    def key_question_mark(self) -> None:
        self.dismiss()


class PromptOverlay(ModalScreen[str | None]):
    CSS = """
    PromptOverlay {
        align: center middle;
        background: rgba(0,0,0,0.45);
    }
    #prompt-box {
        width: 60%;
        height: auto;
        max-height: 9;
        background: #282a2e;
        border: solid #81a2be;
        padding: 1 2;
        color: #c5c8c6;
    }
    #prompt-label {
        width: 100%;
        color: #81a2be;
        text-style: bold;
        margin-bottom: 1;
    }
    #prompt-input {
        width: 100%;
    }
    """

    def __init__(self, prompt: str) -> None:
        super().__init__()
        self._prompt = prompt

    @override
    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(f"{self._prompt} (Enter to accept, Escape to cancel)", id="prompt-label"),
            Input(id="prompt-input"),
            id="prompt-box",
        )

    def on_mount(self) -> None:
        self.query_one("#prompt-input", Input).focus()

    @on(Input.Submitted)
    def _on_submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value or None)

    def key_escape(self) -> None:
        self.dismiss(None)


class _OverlayPrompter:
    """Blocks the key worker until the prompt overlay is dismissed."""

    def __init__(self, app: NotetreeApp) -> None:
        self._app = app

    def ask(self, prompt: str) -> str | None:
        answered = threading.Event()
        answer: list[str | None] = [None]

        def on_dismiss(value: str | None) -> None:
            answer[0] = value
            answered.set()

        self._app.call_from_thread(self._app.open_prompt, prompt, on_dismiss)
        answered.wait()
        return answer[0]


class _SuspendingEditor:
    def __init__(self, app: NotetreeApp, command: str) -> None:
        self._app = app
        self._command = command

    def open(self, file_location: str) -> None:
        self._app.call_from_thread(self._app.run_editor, self._command, file_location)


class NotetreeApp(App[None]):
    CSS = """
    #app-grid {
        padding: 0 1;
    }
    #title-row {
        height: 1;
        color: #c5c8c6;
        text-style: bold;
    }
    #status-row {
        height: 1;
        color: #f0c674;
    }
    #tree-pane {
        height: 1fr;
    }
    #hint-row {
        height: 1;
        color: #969896;
    }
    """

    def __init__(
        self,
        tree: EntryTree,
        config: AppConfig,
        message: str | None = None,
        fs: FileSystem = DEFAULT_FS,
    ) -> None:
        super().__init__()
        self.config = config
        self.session = NoteSession(
            tree=tree,
            prompter=_OverlayPrompter(self),
            editor=_SuspendingEditor(self, config.editor),
            fs=fs,
            status=message or "",
        )
        self.dispatcher = KeybindDispatcher(self.session)
        init_keybindings(self.dispatcher, config.keybindings)
        self._keys: queue.Queue[str | None] = queue.Queue()
        self._frame = self._capture_frame()

    @override
    def compose(self) -> ComposeResult:
        yield Container(
            Static(id="title-row"),
            Static(id="status-row"),
            VerticalScroll(Static(id="tree-rows"), id="tree-pane"),
            Static(id="hint-row"),
            id="app-grid",
        )

    def on_mount(self) -> None:
        self._show_frame(self._frame)
        threading.Thread(target=self._pump_keys, daemon=True).start()

    def on_unmount(self) -> None:
        self._keys.put(None)

    def on_resize(self) -> None:
        self._show_frame(self._frame)

    def _pump_keys(self) -> None:
        # Sole owner of the session: keys are handled strictly one at a time.
        while True:
            key = self._keys.get()
            if key is None:
                return
            self.dispatcher.handle_input(key)
            if not self.session.running:
                self.call_from_thread(self.exit)
                return
            self.call_from_thread(self._show_frame, self._capture_frame())

    def _capture_frame(self) -> _Frame:
        frame = _Frame(
            rows=tuple(display_rows(self.session.tree, self.config.indent_width)),
            cursor=self.session.cursor,
            status=self.session.status,
            mode=self.dispatcher.mode,
        )
        self.session.status = ""
        return frame

    def _show_frame(self, frame: _Frame) -> None:
        self._frame = frame
        self.query_one("#title-row", Static).update(Text(self.config.title))
        self.query_one("#status-row", Static).update(Text(frame.status))

        moving_id = frame.mode.entry_id if frame.mode.kind is ModeKind.MOVE else None
        body = Text()
        for index, row in enumerate(frame.rows):
            if index:
                body.append("\n")
            if index == frame.cursor:
                body.append(row.label, style="bold #1d1f21 on #81a2be")
            elif row.entry_id == moving_id:
                body.append(row.label, style="bold #f0c674")
            else:
                body.append(row.label)
        self.query_one("#tree-rows", Static).update(body)
        self._scroll_to_cursor(frame.cursor)
        self.query_one("#hint-row", Static).update(Text(self._hint(frame.mode)))

    def _scroll_to_cursor(self, cursor: int) -> None:
        pane = self.query_one("#tree-pane", VerticalScroll)
        height = max(1, pane.size.height)
        if cursor < pane.scroll_y:
            pane.scroll_to(y=cursor, animate=False)
        elif cursor >= pane.scroll_y + height:
            pane.scroll_to(y=cursor - height + 1, animate=False)

    def _hint(self, mode: KeybindMode) -> str:
        if mode.kind is ModeKind.MOVE:
            return "-- MOVE -- j/k pick a category | Enter drop here"
        if mode.kind is ModeKind.MULTIKEY:
            return f"-- {mode.prefix} --"
        return "q quit | ? help | an/ac/ar add | d delete | u undo | r or al redo | m move"

    def _help_lines(self) -> list[str]:
        lines: list[str] = []
        for keys, bindings in self.dispatcher.bindings().items():
            name = _KEY_NAMES.get(keys, keys)
            for binding in bindings:
                lines.append(f"  {name}: {binding.handler_id.value.replace('_', ' ')}")
        return lines

    def open_prompt(self, prompt: str, callback: Callable[[str | None], None]) -> None:
        self.push_screen(PromptOverlay(prompt), callback)

    def run_editor(self, command: str, file_location: str) -> None:
        args = [*shlex.split(command), file_location]
        logger.debug("running editor %s", args)
        failure: str | None = None
        with self.suspend():
            try:
                subprocess.run(args, check=False)  # noqa: S603
            except OSError as exc:
                failure = f"Could not start {command}: {exc}"
        if failure is not None:
            self.notify(failure, severity="error", timeout=3)

    @override
    def on_key(self, event) -> None:  # type: ignore[override]
        if isinstance(self.screen, ModalScreen):
            return
        if event.key == "question_mark":
            self.push_screen(HelpOverlay(self._help_lines()))
            event.stop()
            return
        char = "\n" if event.key == "enter" else (event.character or "")
        if not char or not char.isprintable() and char not in {"\n", "\x1b"}:
            return
        event.stop()
        self._keys.put(char)
