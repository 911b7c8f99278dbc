from __future__ import annotations

from notetree.keybinds import HANDLERS, HandlerId, KeybindDispatcher, init_keybindings
from notetree.keybinds.handlers import NO_ROOT_CATEGORIES_MESSAGE
from notetree.keybinds.modes import DEFAULT, moving
from notetree.models.enums import SortType
from notetree.services.session import NoteSession
from notetree.services.tree import EntryTree
from tests.session_mock import RecordingEditor, ScriptedPrompter, add, empty_tree, make_session


def _notes_tree() -> EntryTree:
    tree = empty_tree()
    work = add(tree, tree.root_id, "Work", category=True, location="/notes/work/")
    add(tree, tree.root_id, "Home", category=True, location="/notes/home/")
    add(tree, work.id, "a", location="/notes/work/a.txt")
    return tree


def _keyboard(session: NoteSession) -> KeybindDispatcher:
    dispatcher = KeybindDispatcher(session)
    init_keybindings(dispatcher)
    return dispatcher


def _press(dispatcher: KeybindDispatcher, keys: str) -> None:
    for key in keys:
        dispatcher.handle_input(key)


def _rows(session: NoteSession) -> list[str]:
    return [entry.text for entry in session.tree.flatten()]


def test_every_handler_id_is_registered() -> None:
    assert set(HANDLERS) == set(HandlerId)


def test_cursor_keys_stay_in_bounds() -> None:
    session = make_session(_notes_tree())
    keyboard = _keyboard(session)

    _press(keyboard, "k")
    assert session.cursor == 0
    _press(keyboard, "jjj")
    assert session.cursor == 1


def test_enter_toggles_category_and_opens_notes() -> None:
    session = make_session(_notes_tree())
    keyboard = _keyboard(session)
    session.cursor = 1

    _press(keyboard, "\n")
    assert _rows(session) == ["Home", "Work", "a"]

    _press(keyboard, "j\n")
    assert isinstance(session.editor, RecordingEditor)
    assert session.editor.opened == ["/notes/work/a.txt"]


def test_delete_undo_redo_keys() -> None:
    session = make_session(_notes_tree())
    keyboard = _keyboard(session)

    _press(keyboard, "d")
    assert _rows(session) == ["Work"]
    _press(keyboard, "u")
    assert _rows(session) == ["Home", "Work"]
    _press(keyboard, "r")
    assert _rows(session) == ["Work"]


def test_add_note_prompts_and_creates_directories() -> None:
    session = make_session(_notes_tree(), "todo", "todo.md")
    keyboard = _keyboard(session)
    session.cursor = 1

    _press(keyboard, "an")

    assert keyboard.mode == DEFAULT
    assert [child.text for child in session.tree.children_of(1)] == ["a", "todo"]
    todo = session.tree.find(4).unwrap()
    assert todo.file_location == "/notes/work/todo.md"
    assert not todo.is_category
    assert session.tree.next_id == 5
    assert "/notes/work" in session.fs.dirs  # type: ignore[attr-defined]
    assert isinstance(session.prompter, ScriptedPrompter)
    assert session.prompter.prompts == ["Input new note name", "Input path to file"]


def test_add_note_on_a_leaf_does_nothing() -> None:
    tree = _notes_tree()
    tree.find(1).unwrap().is_open = True
    session = make_session(tree, "todo", "todo.md")
    keyboard = _keyboard(session)
    session.cursor = 2

    _press(keyboard, "an")

    assert isinstance(session.prompter, ScriptedPrompter)
    assert session.prompter.prompts == []
    assert len(session.history) == 0


def test_cancelled_prompt_builds_no_action() -> None:
    session = make_session(_notes_tree(), "Ideas", None)
    keyboard = _keyboard(session)

    _press(keyboard, "ar")

    assert _rows(session) == ["Home", "Work"]
    assert session.tree.next_id == 4
    assert len(session.history) == 0


def test_add_root_category() -> None:
    session = make_session(_notes_tree(), "Ideas", "ideas")
    keyboard = _keyboard(session)

    _press(keyboard, "ar")

    assert _rows(session) == ["Home", "Ideas", "Work"]
    assert session.tree.find(4).unwrap().file_location == "/notes/ideas/"


def test_add_category_needs_a_top_level_category() -> None:
    session = make_session(empty_tree(), "Ideas", "ideas")
    keyboard = _keyboard(session)

    _press(keyboard, "ac")

    assert session.status == NO_ROOT_CATEGORIES_MESSAGE
    assert session.tree.flatten() == []


def test_add_category_under_cursor() -> None:
    session = make_session(_notes_tree(), "Projects", "projects")
    keyboard = _keyboard(session)
    session.cursor = 1

    _press(keyboard, "ac")

    projects = session.tree.find(4).unwrap()
    assert projects.is_category
    assert session.tree.find_parent(4).unwrap().text == "Work"
    assert projects.file_location == "/notes/work/projects/"


def test_move_mode_relocates_entry_under_cursor() -> None:
    tree = _notes_tree()
    tree.find(1).unwrap().is_open = True
    session = make_session(tree)
    keyboard = _keyboard(session)
    session.cursor = 2

    _press(keyboard, "m")
    assert keyboard.mode == moving(3)
    _press(keyboard, "kk")
    assert keyboard.mode == moving(3)
    _press(keyboard, "\n")

    assert keyboard.mode == DEFAULT
    assert session.tree.find_parent(3).unwrap().text == "Home"
    assert _rows(session) == ["Home", "Work"]
    assert session.cursor == 0
    assert len(session.history) == 1


def test_rename_and_change_file() -> None:
    tree = _notes_tree()
    tree.find(1).unwrap().is_open = True
    session = make_session(tree, "House", "b.txt")
    keyboard = _keyboard(session)

    _press(keyboard, "cn")
    assert session.tree.find(2).unwrap().text == "House"

    session.cursor = 2
    _press(keyboard, "cf")
    assert session.tree.find(3).unwrap().file_location == "/notes/work/b.txt"


def test_sort_keys_record_previous_state() -> None:
    session = make_session(_notes_tree())
    keyboard = _keyboard(session)
    session.cursor = 1

    _press(keyboard, "st")
    _press(keyboard, "sd")

    work = session.tree.find(1).unwrap()
    assert work.sort_type is SortType.TIME
    assert work.sort_descending is True
    assert len(session.history) == 2

    _press(keyboard, "uu")
    assert work.sort_type is SortType.NAME
    assert work.sort_descending is False


def test_quit_stops_the_session() -> None:
    session = make_session(_notes_tree())

    _press(_keyboard(session), "q")

    assert session.running is False


def test_al_is_an_alias_for_redo() -> None:
    session = make_session(_notes_tree())
    keyboard = _keyboard(session)

    _press(keyboard, "du")
    assert _rows(session) == ["Home", "Work"]
    _press(keyboard, "al")
    assert _rows(session) == ["Work"]
    assert keyboard.mode == DEFAULT
