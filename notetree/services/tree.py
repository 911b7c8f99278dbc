from __future__ import annotations

from collections.abc import Callable, Iterator

from result import Err, Ok

from notetree.models.entry import ROOT_ID, Entry, EntryResult, invalid_transition, new_entry, not_found
from notetree.models.enums import SortType
from notetree.services.paths import default_root_location

_SORT_KEYS: dict[SortType, Callable[[Entry], object]] = {
    SortType.NAME: lambda entry: entry.text.casefold(),
    SortType.FILE: lambda entry: entry.file_location.casefold(),
    SortType.TIME: lambda entry: entry.time_created,
}


def make_root(location: str | None = None) -> Entry:
    return new_entry(
        ROOT_ID,
        "root",
        is_category=True,
        file_location=location if location is not None else default_root_location(),
        is_open=True,
    )


class EntryTree:
    """Arena of entries keyed by id.

    Every entry stores its parent id and an ordered list of child ids, so parent
    lookup is a dictionary hit instead of a scan. Soft-deleted entries stay in
    the arena and in their parent's child list; only ``detach_child`` removes a
    node from a child list.
    """

    def __init__(self, root: Entry | None = None, next_id: int = 1) -> None:
        root = root if root is not None else make_root()
        root.parent_id = None
        self.root_id = root.id
        self.next_id = next_id
        self._entries: dict[int, Entry] = {root.id: root}

    @property
    def root(self) -> Entry:
        return self._entries[self.root_id]

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, entry_id: int) -> EntryResult:
        entry = self._entries.get(entry_id)
        if entry is None:
            return Err(not_found(entry_id))
        return Ok(entry)

    def find_parent(self, entry_id: int) -> EntryResult:
        entry = self._entries.get(entry_id)
        if entry is None:
            return Err(not_found(entry_id))
        if entry.parent_id is None:
            return Err(not_found(entry_id, "Entry has no parent"))
        return Ok(self._entries[entry.parent_id])

    def iter_entries(self) -> Iterator[Entry]:
        """Iterate all attached entries, deleted ones included (depth-first, pre-order)."""
        stack = [self.root]
        while stack:
            entry = stack.pop()
            yield entry
            stack.extend(self._entries[child_id] for child_id in reversed(entry.children))

    def children_of(self, entry_id: int) -> list[Entry]:
        entry = self._entries.get(entry_id)
        if entry is None:
            return []
        return [self._entries[child_id] for child_id in entry.children]

    def visible_children(self, entry_id: int) -> list[Entry]:
        return [child for child in self.children_of(entry_id) if not child.is_deleted]

    def flatten(self) -> list[Entry]:
        """Rows currently on screen, in display order. The root itself is not a row."""
        return self.flatten_from(self.root_id)

    def flatten_from(self, entry_id: int) -> list[Entry]:
        entry = self._entries.get(entry_id)
        if entry is None or not entry.is_open or entry.is_deleted:
            return []
        rows: list[Entry] = []
        stack = list(reversed(self.visible_children(entry_id)))
        while stack:
            child = stack.pop()
            rows.append(child)
            if child.is_open:
                stack.extend(reversed(self.visible_children(child.id)))
        return rows

    def depth_of(self, entry_id: int) -> int:
        depth = 0
        entry = self._entries.get(entry_id)
        while entry is not None and entry.parent_id is not None and entry.parent_id != self.root_id:
            depth += 1
            entry = self._entries.get(entry.parent_id)
        return depth

    def row(self, index: int) -> EntryResult:
        """Map a visible row index to its entry; a negative index addresses the root."""
        if index < 0:
            return Ok(self.root)
        found = self._nth_row(self.root_id, index)
        if found is None:
            return Err(not_found(None, f"No entry at row {index}"))
        return Ok(found)

    def _nth_row(self, entry_id: int, index: int) -> Entry | None:
        for child in self.visible_children(entry_id):
            if index == 0:
                return child
            subtree_rows = len(self.flatten_from(child.id))
            if index - 1 < subtree_rows:
                return self._nth_row(child.id, index - 1)
            index -= subtree_rows + 1
        return None

    def is_ancestor(self, ancestor_id: int, entry_id: int) -> bool:
        entry = self._entries.get(entry_id)
        while entry is not None and entry.parent_id is not None:
            if entry.parent_id == ancestor_id:
                return True
            entry = self._entries.get(entry.parent_id)
        return False

    def add_child(self, parent_id: int, entry: Entry) -> EntryResult:
        parent = self._entries.get(parent_id)
        if parent is None:
            return Err(not_found(parent_id, "Parent does not exist"))
        if not parent.can_add_child:
            return Err(invalid_transition(parent_id, "Only categories can hold children"))
        if entry.parent_id is not None:
            return Err(invalid_transition(entry.id, "Entry is already attached"))
        existing = self._entries.get(entry.id)
        if existing is not None and existing is not entry:
            return Err(invalid_transition(entry.id, "Entry id is already in use"))

        self._entries[entry.id] = entry
        entry.parent_id = parent_id
        parent.children.append(entry.id)
        self.sort_children(parent_id)
        return Ok(entry)

    def detach_child(self, entry_id: int) -> EntryResult:
        parent_result = self.find_parent(entry_id)
        if isinstance(parent_result, Err):
            return parent_result
        parent = parent_result.unwrap()
        entry = self._entries[entry_id]
        parent.children.remove(entry_id)
        entry.parent_id = None
        return Ok(entry)

    def soft_delete(self, entry_id: int) -> EntryResult:
        return self._set_deleted(entry_id, True)

    def undelete(self, entry_id: int) -> EntryResult:
        return self._set_deleted(entry_id, False)

    def _set_deleted(self, entry_id: int, deleted: bool) -> EntryResult:
        entry = self._entries.get(entry_id)
        if entry is None:
            return Err(not_found(entry_id))
        entry.is_deleted = deleted
        return Ok(entry)

    def toggle_open(self, entry_id: int) -> EntryResult:
        entry = self._entries.get(entry_id)
        if entry is None:
            return Err(not_found(entry_id))
        entry.is_open = not entry.is_open
        return Ok(entry)

    def sort_children(self, entry_id: int) -> EntryResult:
        """Stable ascending sort on the entry's own key, reversed as a whole when descending."""
        entry = self._entries.get(entry_id)
        if entry is None:
            return Err(not_found(entry_id))
        children = [self._entries[child_id] for child_id in entry.children]
        children.sort(key=_SORT_KEYS[entry.sort_type])
        if entry.sort_descending:
            children.reverse()
        entry.children = [child.id for child in children]
        return Ok(entry)


def fresh_tree(root_location: str | None = None) -> EntryTree:
    return EntryTree(make_root(root_location), next_id=1)

