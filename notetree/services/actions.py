from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import assert_never

from result import Err, Ok, Result

from notetree.models.entry import Entry, TreeError
from notetree.models.enums import SortType
from notetree.services.paths import resolve_file_location
from notetree.services.session import NoteSession

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DeleteAction:
    entry_id: int


@dataclass(slots=True, frozen=True)
class AddAction:
    new_id: int
    parent_id: int
    snapshot: Entry

    @classmethod
    def for_entry(cls, parent_id: int, snapshot: Entry) -> AddAction:
        return cls(new_id=snapshot.id, parent_id=parent_id, snapshot=snapshot)


@dataclass(slots=True, frozen=True)
class RenameAction:
    entry_id: int
    old_text: str
    new_text: str


@dataclass(slots=True, frozen=True)
class ChangeFileAction:
    entry_id: int
    old_location: str
    new_location: str


@dataclass(slots=True, frozen=True)
class SortAction:
    entry_id: int
    old_sort_type: SortType
    new_sort_type: SortType


@dataclass(slots=True, frozen=True)
class SortDirectionAction:
    entry_id: int
    old_descending: bool
    new_descending: bool


@dataclass(slots=True, frozen=True)
class MoveAction:
    entry_id: int
    old_parent_id: int
    new_parent_id: int


Action = (
    DeleteAction
    | AddAction
    | RenameAction
    | ChangeFileAction
    | SortAction
    | SortDirectionAction
    | MoveAction
)

ActionResult = Result[None, TreeError]

_DONE: ActionResult = Ok(None)


def apply_action(action: Action, session: NoteSession) -> ActionResult:
    """Run the forward effect of *action* against the session's tree."""
    logger.debug("apply %r", action)
    if isinstance(action, DeleteAction):
        return _apply_delete(action, session)
    if isinstance(action, AddAction):
        return _apply_add(action, session)
    if isinstance(action, RenameAction):
        return _set_text(session, action.entry_id, action.new_text)
    if isinstance(action, ChangeFileAction):
        return _apply_change_file(action, session)
    if isinstance(action, SortAction):
        return _set_sort_type(session, action.entry_id, action.new_sort_type, resort=True)
    if isinstance(action, SortDirectionAction):
        return _set_sort_descending(session, action.entry_id, action.new_descending, resort=True)
    if isinstance(action, MoveAction):
        return _apply_move(action, session)
    assert_never(action)


def invert_action(action: Action, session: NoteSession) -> ActionResult:
    """Undo the effect of *action*.

    Sort and sort-direction inversions restore the field only; the children
    keep the order produced by the forward sort.
    """
    logger.debug("invert %r", action)
    tree = session.tree
    if isinstance(action, DeleteAction):
        return _unit(tree.undelete(action.entry_id))
    if isinstance(action, AddAction):
        if action.new_id not in tree:
            return _DONE
        return _unit(tree.soft_delete(action.new_id))
    if isinstance(action, RenameAction):
        return _set_text(session, action.entry_id, action.old_text)
    if isinstance(action, ChangeFileAction):
        return _set_location(session, action.entry_id, action.old_location)
    if isinstance(action, SortAction):
        return _set_sort_type(session, action.entry_id, action.old_sort_type, resort=False)
    if isinstance(action, SortDirectionAction):
        return _set_sort_descending(session, action.entry_id, action.old_descending, resort=False)
    if isinstance(action, MoveAction):
        if action.entry_id == action.new_parent_id:
            return _DONE
        return _relocate(session, action.entry_id, action.old_parent_id)
    assert_never(action)


def perform(action: Action, session: NoteSession) -> ActionResult:
    """Apply a freshly built action and record it on the session history."""
    result = apply_action(action, session)
    if isinstance(result, Ok):
        session.history.record(action)
    else:
        logger.debug("not recording %r: %s", action, result.unwrap_err().message)
    return result


def undo(session: NoteSession) -> Result[Action | None, TreeError]:
    action = session.history.pop_undo()
    if action is None:
        return Ok(None)
    result = invert_action(action, session)
    if isinstance(result, Err):
        return result
    session.clamp_cursor()
    return Ok(action)


def redo(session: NoteSession) -> Result[Action | None, TreeError]:
    action = session.history.pop_redo()
    if action is None:
        return Ok(None)
    result = apply_action(action, session)
    if isinstance(result, Err):
        return result
    session.clamp_cursor()
    return Ok(action)


def _unit(result: Result[Entry, TreeError]) -> ActionResult:
    if isinstance(result, Err):
        return result
    return _DONE


def _apply_delete(action: DeleteAction, session: NoteSession) -> ActionResult:
    result = session.tree.soft_delete(action.entry_id)
    if isinstance(result, Err):
        return result
    session.clamp_cursor()
    return _DONE


def _apply_add(action: AddAction, session: NoteSession) -> ActionResult:
    tree = session.tree
    # A known id means this is a redo after the add was undone.
    if action.new_id in tree:
        return _unit(tree.undelete(action.new_id))

    parent_result = tree.find(action.parent_id)
    if isinstance(parent_result, Err):
        return parent_result
    if not parent_result.unwrap().can_add_child:
        logger.debug("add %d ignored: %d is not a category", action.new_id, action.parent_id)
        return _DONE

    entry = replace(action.snapshot, children=[], parent_id=None, is_deleted=False)
    added = tree.add_child(action.parent_id, entry)
    if isinstance(added, Err):
        return added
    tree.next_id += 1
    return _DONE


def _set_text(session: NoteSession, entry_id: int, text: str) -> ActionResult:
    result = session.tree.find(entry_id)
    if isinstance(result, Err):
        return result
    result.unwrap().text = text
    return _DONE


def _apply_change_file(action: ChangeFileAction, session: NoteSession) -> ActionResult:
    tree = session.tree
    entry_result = tree.find(action.entry_id)
    if isinstance(entry_result, Err):
        return entry_result
    parent_result = tree.find_parent(action.entry_id)
    if isinstance(parent_result, Err):
        return parent_result
    entry = entry_result.unwrap()
    entry.file_location = resolve_file_location(
        action.new_location,
        parent_result.unwrap().file_location,
        is_category=entry.is_category,
    )
    return _DONE


def _set_location(session: NoteSession, entry_id: int, location: str) -> ActionResult:
    result = session.tree.find(entry_id)
    if isinstance(result, Err):
        return result
    result.unwrap().file_location = location
    return _DONE


def _set_sort_type(session: NoteSession, entry_id: int, sort_type: SortType, *, resort: bool) -> ActionResult:
    result = session.tree.find(entry_id)
    if isinstance(result, Err):
        return result
    result.unwrap().sort_type = sort_type
    if resort:
        return _unit(session.tree.sort_children(entry_id))
    return _DONE


def _set_sort_descending(session: NoteSession, entry_id: int, descending: bool, *, resort: bool) -> ActionResult:
    result = session.tree.find(entry_id)
    if isinstance(result, Err):
        return result
    result.unwrap().sort_descending = descending
    if resort:
        return _unit(session.tree.sort_children(entry_id))
    return _DONE


def _apply_move(action: MoveAction, session: NoteSession) -> ActionResult:
    if action.entry_id == action.new_parent_id:
        logger.debug("move %d onto itself ignored", action.entry_id)
        return _DONE
    result = _relocate(session, action.entry_id, action.new_parent_id)
    session.clamp_cursor()
    return result


def _relocate(session: NoteSession, entry_id: int, target_id: int) -> ActionResult:
    tree = session.tree
    entry_result = tree.find(entry_id)
    if isinstance(entry_result, Err):
        return entry_result
    target_result = tree.find(target_id)
    if isinstance(target_result, Err):
        return target_result

    if not target_result.unwrap().can_add_child:
        logger.debug("move %d ignored: %d is not a category", entry_id, target_id)
        return _DONE
    if tree.is_ancestor(entry_id, target_id):
        logger.debug("move %d ignored: %d is inside its subtree", entry_id, target_id)
        return _DONE

    detached = tree.detach_child(entry_id)
    if isinstance(detached, Err):
        return detached
    return _unit(tree.add_child(target_id, entry_result.unwrap()))
