from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import Enum

from result import Err

from notetree.keybinds.modes import DEFAULT, KeybindMode, moving
from notetree.models.entry import Entry, new_entry
from notetree.models.enums import ModeKind, SortType
from notetree.services.actions import (
    Action,
    ActionResult,
    AddAction,
    ChangeFileAction,
    DeleteAction,
    MoveAction,
    RenameAction,
    SortAction,
    SortDirectionAction,
    perform,
    redo,
    undo,
)
from notetree.services.paths import resolve_file_location
from notetree.services.session import NoteSession

logger = logging.getLogger(__name__)

NO_ROOT_CATEGORIES_MESSAGE = 'No top level categories exist. Press "ar" to add one'

Handler = Callable[[NoteSession, KeybindMode], KeybindMode | None]


class HandlerId(str, Enum):
    DELETE_ENTRY = "delete_entry"
    CURSOR_DOWN = "cursor_down"
    CURSOR_UP = "cursor_up"
    UNDO = "undo"
    REDO = "redo"
    ACTIVATE = "activate"
    QUIT = "quit"
    MOVE_START = "move_start"
    MOVE_COMPLETE = "move_complete"
    ADD_NOTE = "add_note"
    ADD_CATEGORY = "add_category"
    ADD_ROOT_CATEGORY = "add_root_category"
    CHANGE_NAME = "change_name"
    CHANGE_FILE = "change_file"
    SORT_NAME = "sort_name"
    SORT_FILE = "sort_file"
    SORT_TIME = "sort_time"
    SORT_DESCENDING = "sort_descending"
    SORT_ASCENDING = "sort_ascending"


def _perform(action: Action, session: NoteSession) -> None:
    result: ActionResult = perform(action, session)
    if isinstance(result, Err):
        logger.debug("%r failed: %s", action, result.unwrap_err().message)


def _current_entry(session: NoteSession) -> Entry | None:
    current = session.current()
    if isinstance(current, Err):
        return None
    return current.unwrap()


def delete_entry(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    entry = _current_entry(session)
    if entry is not None:
        _perform(DeleteAction(entry.id), session)
    return DEFAULT


def cursor_down(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    session.move_cursor(1)
    return None


def cursor_up(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    session.move_cursor(-1)
    return None


def undo_last(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    result = undo(session)
    if isinstance(result, Err):
        logger.debug("undo failed: %s", result.unwrap_err().message)
    return DEFAULT


def redo_next(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    result = redo(session)
    if isinstance(result, Err):
        logger.debug("redo failed: %s", result.unwrap_err().message)
    return DEFAULT


def activate(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    """Open a note in the external editor, or fold/unfold anything else."""
    entry = _current_entry(session)
    if entry is None:
        return DEFAULT
    if not entry.is_category and entry.file_location:
        session.editor.open(entry.file_location)
    else:
        session.tree.toggle_open(entry.id)
    return DEFAULT


def quit_app(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    session.quit()
    return DEFAULT


def move_start(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    entry = _current_entry(session)
    if entry is None:
        return None
    return moving(entry.id)


def move_complete(session: NoteSession, mode: KeybindMode) -> KeybindMode | None:
    if mode.kind is not ModeKind.MOVE or mode.entry_id is None:
        return DEFAULT
    parent = session.tree.find_parent(mode.entry_id)
    target = _current_entry(session)
    if isinstance(parent, Err) or target is None:
        return DEFAULT
    _perform(MoveAction(mode.entry_id, parent.unwrap().id, target.id), session)
    return DEFAULT


def _prepare_location(session: NoteSession, location: str, *, is_category: bool) -> None:
    directory = location if is_category else location[: location.rfind("/") + 1]
    if not directory:
        return
    try:
        session.fs.makedirs(directory)
    except OSError as exc:
        logger.warning("could not create %s: %s", directory, exc)
        session.show_message(f"Could not create {directory}: {exc}")


def _add_entry(session: NoteSession, parent: Entry, *, is_category: bool) -> None:
    kind = "category" if is_category else "note"
    name = session.ask(f"Input new {kind} name")
    if name is None:
        return
    location = session.ask("Input path to directory" if is_category else "Input path to file")
    if location is None:
        return

    file_location = resolve_file_location(location, parent.file_location, is_category=is_category)
    snapshot = new_entry(
        session.tree.next_id,
        name,
        is_category=is_category,
        file_location=file_location,
    )
    _prepare_location(session, file_location, is_category=is_category)
    _perform(AddAction.for_entry(parent.id, snapshot), session)


def add_note(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    parent = _current_entry(session)
    if parent is not None and parent.can_add_child:
        _add_entry(session, parent, is_category=False)
    return DEFAULT


def add_category(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    if not session.tree.visible_children(session.tree.root_id):
        session.show_message(NO_ROOT_CATEGORIES_MESSAGE)
        return DEFAULT
    parent = _current_entry(session)
    if parent is not None and parent.can_add_child:
        _add_entry(session, parent, is_category=True)
    return DEFAULT


def add_root_category(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    _add_entry(session, session.tree.root, is_category=True)
    return DEFAULT


def change_name(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    entry = _current_entry(session)
    if entry is None:
        return DEFAULT
    name = session.ask("Input new name")
    if name is not None:
        _perform(RenameAction(entry.id, entry.text, name), session)
    return DEFAULT


def change_file(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
    entry = _current_entry(session)
    if entry is None:
        return DEFAULT
    location = session.ask("Input new file location")
    if location is not None:
        _perform(ChangeFileAction(entry.id, entry.file_location, location), session)
    return DEFAULT


def _sort_by(sort_type: SortType) -> Handler:
    def handler(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
        entry = _current_entry(session)
        if entry is not None:
            _perform(SortAction(entry.id, entry.sort_type, sort_type), session)
        return DEFAULT

    return handler


def _sort_direction(descending: bool) -> Handler:
    def handler(session: NoteSession, _mode: KeybindMode) -> KeybindMode | None:
        entry = _current_entry(session)
        if entry is not None:
            _perform(SortDirectionAction(entry.id, entry.sort_descending, descending), session)
        return DEFAULT

    return handler


HANDLERS: Mapping[HandlerId, Handler] = {
    HandlerId.DELETE_ENTRY: delete_entry,
    HandlerId.CURSOR_DOWN: cursor_down,
    HandlerId.CURSOR_UP: cursor_up,
    HandlerId.UNDO: undo_last,
    HandlerId.REDO: redo_next,
    HandlerId.ACTIVATE: activate,
    HandlerId.QUIT: quit_app,
    HandlerId.MOVE_START: move_start,
    HandlerId.MOVE_COMPLETE: move_complete,
    HandlerId.ADD_NOTE: add_note,
    HandlerId.ADD_CATEGORY: add_category,
    HandlerId.ADD_ROOT_CATEGORY: add_root_category,
    HandlerId.CHANGE_NAME: change_name,
    HandlerId.CHANGE_FILE: change_file,
    HandlerId.SORT_NAME: _sort_by(SortType.NAME),
    HandlerId.SORT_FILE: _sort_by(SortType.FILE),
    HandlerId.SORT_TIME: _sort_by(SortType.TIME),
    HandlerId.SORT_DESCENDING: _sort_direction(True),
    HandlerId.SORT_ASCENDING: _sort_direction(False),
}
