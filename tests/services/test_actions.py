from __future__ import annotations

from result import Err, Ok

from notetree.models.entry import new_entry
from notetree.models.enums import SortType, TreeErrorCode
from notetree.services.actions import (
    AddAction,
    ChangeFileAction,
    DeleteAction,
    MoveAction,
    RenameAction,
    SortAction,
    SortDirectionAction,
    apply_action,
    invert_action,
    perform,
    redo,
    undo,
)
from notetree.services.session import NoteSession
from notetree.services.tree import EntryTree
from tests.session_mock import add, empty_tree, make_session


def _work_tree() -> EntryTree:
    tree = empty_tree()
    work = add(tree, tree.root_id, "Work", category=True, location="/notes/work/")
    add(tree, work.id, "A", location="/notes/work/a.txt", created=100)
    add(tree, work.id, "B", location="/notes/work/b.txt", created=200)
    work.is_open = True
    return tree


def _structure(tree: EntryTree) -> dict[int, tuple[str, str, int | None]]:
    """Visible entries keyed by id, ignoring sibling order."""
    shape: dict[int, tuple[str, str, int | None]] = {}
    stack = [tree.root]
    while stack:
        entry = stack.pop()
        shape[entry.id] = (entry.text, entry.file_location, entry.parent_id)
        stack.extend(tree.visible_children(entry.id))
    return shape


def _texts(session: NoteSession, entry_id: int) -> list[str]:
    return [child.text for child in session.tree.children_of(entry_id)]


def test_sort_undo_restores_fields_but_not_order() -> None:
    session = make_session(_work_tree())
    assert _texts(session, 1) == ["A", "B"]

    perform(SortAction(1, SortType.NAME, SortType.TIME), session)
    assert _texts(session, 1) == ["A", "B"]

    perform(SortDirectionAction(1, False, True), session)
    assert _texts(session, 1) == ["B", "A"]

    undo(session)
    work = session.tree.find(1).unwrap()
    assert work.sort_descending is False
    assert work.sort_type is SortType.TIME
    assert _texts(session, 1) == ["B", "A"]

    undo(session)
    assert work.sort_type is SortType.NAME
    assert _texts(session, 1) == ["B", "A"]


def test_delete_clamps_cursor_past_the_end() -> None:
    session = make_session(_work_tree())
    session.cursor = len(session.tree.flatten())

    perform(DeleteAction(2), session)

    assert session.cursor == len(session.tree.flatten()) - 1 == 1


def test_delete_of_last_row_moves_cursor_up() -> None:
    session = make_session(_work_tree())
    session.cursor = 2

    perform(DeleteAction(3), session)

    assert session.cursor == 1
    assert [entry.text for entry in session.tree.flatten()] == ["Work", "A"]


def test_delete_invert_restores_entry() -> None:
    session = make_session(_work_tree())
    action = DeleteAction(2)
    perform(action, session)
    assert session.tree.find(2).unwrap().is_deleted

    invert_action(action, session)

    assert not session.tree.find(2).unwrap().is_deleted


def test_add_inserts_snapshot_and_advances_counter() -> None:
    session = make_session(_work_tree())
    tree = session.tree
    snapshot = new_entry(tree.next_id, "C", file_location="/notes/work/c.txt", time_created=300)

    result = perform(AddAction.for_entry(1, snapshot), session)

    assert isinstance(result, Ok)
    assert tree.next_id == 5
    assert _texts(session, 1) == ["A", "B", "C"]
    assert tree.find(4).unwrap() is not snapshot


def test_add_redo_after_undo_undeletes_without_duplicating() -> None:
    session = make_session(_work_tree())
    tree = session.tree
    perform(AddAction.for_entry(1, new_entry(tree.next_id, "C", time_created=300)), session)

    undo(session)
    assert tree.find(4).unwrap().is_deleted
    assert tree.next_id == 5

    redo(session)
    assert not tree.find(4).unwrap().is_deleted
    assert _texts(session, 1) == ["A", "B", "C"]
    assert tree.next_id == 5


def test_add_under_leaf_is_silent_noop() -> None:
    session = make_session(_work_tree())
    tree = session.tree

    result = perform(AddAction.for_entry(2, new_entry(tree.next_id, "child")), session)

    assert isinstance(result, Ok)
    assert 4 not in tree
    assert tree.next_id == 4


def test_rename_apply_and_invert() -> None:
    session = make_session(_work_tree())
    action = RenameAction(2, "A", "Alpha")

    apply_action(action, session)
    assert session.tree.find(2).unwrap().text == "Alpha"

    invert_action(action, session)
    assert session.tree.find(2).unwrap().text == "A"


def test_change_file_resolves_against_parent_and_inverts_verbatim() -> None:
    session = make_session(_work_tree())
    action = ChangeFileAction(2, "/notes/work/a.txt", "renamed.txt/")

    apply_action(action, session)
    assert session.tree.find(2).unwrap().file_location == "/notes/work/renamed.txt"

    invert_action(action, session)
    assert session.tree.find(2).unwrap().file_location == "/notes/work/a.txt"


def test_change_file_on_category_keeps_trailing_slash() -> None:
    session = make_session(_work_tree())

    apply_action(ChangeFileAction(1, "/notes/work/", "/elsewhere"), session)

    assert session.tree.find(1).unwrap().file_location == "/elsewhere/"


def test_missing_entry_is_reported_and_not_recorded() -> None:
    session = make_session(_work_tree())

    result = perform(RenameAction(99, "", "ghost"), session)

    assert isinstance(result, Err)
    assert result.unwrap_err().code is TreeErrorCode.NOT_FOUND
    assert len(session.history) == 0


def test_move_relocates_and_undo_moves_back() -> None:
    tree = _work_tree()
    other = add(tree, tree.root_id, "Other", category=True)
    session = make_session(tree)

    perform(MoveAction(2, 1, other.id), session)
    assert session.tree.find_parent(2).unwrap() is other
    assert _texts(session, 1) == ["B"]

    undo(session)
    assert session.tree.find_parent(2).unwrap().id == 1
    assert _texts(session, 1) == ["A", "B"]
    assert other.children == []


def test_move_onto_itself_is_recorded_noop() -> None:
    session = make_session(_work_tree())
    before = _structure(session.tree)

    result = perform(MoveAction(1, 0, 1), session)

    assert isinstance(result, Ok)
    assert _structure(session.tree) == before
    assert len(session.history) == 1

    undo(session)
    assert _structure(session.tree) == before


def test_move_onto_leaf_is_silent_noop() -> None:
    session = make_session(_work_tree())
    before = _structure(session.tree)

    assert isinstance(perform(MoveAction(3, 1, 2), session), Ok)
    assert _structure(session.tree) == before


def test_move_into_own_subtree_is_rejected() -> None:
    tree = _work_tree()
    inner = add(tree, 1, "Inner", category=True)
    session = make_session(tree)
    before = _structure(session.tree)

    perform(MoveAction(1, 0, inner.id), session)

    assert _structure(session.tree) == before
    assert session.tree.is_ancestor(1, inner.id)


def test_move_clamps_cursor() -> None:
    tree = _work_tree()
    closed = add(tree, tree.root_id, "Zed", category=True)
    session = make_session(tree)
    session.cursor = 3

    perform(MoveAction(3, 1, closed.id), session)

    assert len(session.tree.flatten()) == 3
    assert session.cursor == 2


def test_every_action_undone_restores_structure() -> None:
    tree = _work_tree()
    other = add(tree, tree.root_id, "Other", category=True, location="/notes/other/")
    session = make_session(tree)
    before = _structure(session.tree)
    work = session.tree.find(1).unwrap()

    actions = [
        AddAction.for_entry(1, new_entry(session.tree.next_id, "C", time_created=5)),
        RenameAction(2, "A", "Renamed"),
        ChangeFileAction(3, "/notes/work/b.txt", "moved.txt"),
        MoveAction(3, 1, other.id),
        DeleteAction(2),
        SortAction(1, SortType.NAME, SortType.TIME),
        SortDirectionAction(1, False, True),
    ]
    for action in actions:
        assert isinstance(perform(action, session), Ok)
    assert _structure(session.tree) != before

    for _ in actions:
        assert isinstance(undo(session), Ok)

    assert _structure(session.tree) == before
    assert work.sort_type is SortType.NAME
    assert work.sort_descending is False


def test_undo_then_redo_reproduces_post_apply_state() -> None:
    tree = _work_tree()
    other = add(tree, tree.root_id, "Other", category=True)
    session = make_session(tree)
    perform(MoveAction(2, 1, other.id), session)
    after = (_structure(session.tree), other.children[:], session.tree.find(1).unwrap().children[:])

    undo(session)
    redo(session)

    assert (_structure(session.tree), other.children, session.tree.find(1).unwrap().children) == after


def test_recording_after_undos_empties_redo_queue() -> None:
    session = make_session(_work_tree())
    perform(RenameAction(2, "A", "A1"), session)
    perform(RenameAction(2, "A1", "A2"), session)
    undo(session)
    undo(session)
    assert session.history.redo_len() == 2

    perform(RenameAction(3, "B", "B1"), session)

    assert session.history.redo_len() == 0
    assert isinstance(redo(session), Ok)
    assert redo(session).unwrap() is None


def test_undo_that_hides_several_rows_clamps_cursor() -> None:
    session = make_session(_work_tree())
    tree = session.tree
    perform(AddAction.for_entry(1, new_entry(tree.next_id, "C", is_category=True, is_open=True)), session)
    perform(AddAction.for_entry(4, new_entry(tree.next_id, "N", time_created=1)), session)
    assert [entry.text for entry in tree.flatten()] == ["Work", "A", "B", "C", "N"]
    session.cursor = 4

    undo(session)
    assert session.cursor == 3
    undo(session)
    assert session.cursor == 2

    session.move_cursor(-1)
    assert session.cursor == 1


def test_redo_of_move_into_closed_category_clamps_cursor() -> None:
    tree = _work_tree()
    closed = add(tree, tree.root_id, "Zed", category=True)
    session = make_session(tree)
    perform(MoveAction(3, 1, closed.id), session)
    undo(session)
    session.cursor = 3

    redo(session)

    assert session.cursor == 2
    assert session.current().unwrap().text == "Zed"


def test_cursor_left_past_the_end_can_still_move() -> None:
    session = make_session(_work_tree())
    session.cursor = 10

    session.move_cursor(-1)

    assert session.cursor == 1
