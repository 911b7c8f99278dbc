from __future__ import annotations

import json
from typing import Any

from result import Err, Ok, Result

from notetree.models.entry import Entry, new_entry
from notetree.models.enums import SortType
from notetree.services.tree import EntryTree


def _sort_type_from_int(value: Any) -> SortType:
    try:
        return SortType(int(value))
    except (TypeError, ValueError):
        return SortType.NAME


def _entry_to_dict(tree: EntryTree, entry: Entry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "is_category": entry.is_category,
        "text": entry.text,
        "children": [_entry_to_dict(tree, child) for child in tree.visible_children(entry.id)],
        "file_location": entry.file_location or None,
        "time_created": entry.time_created,
        "sort_type": int(entry.sort_type),
        "sort_descending": entry.sort_descending,
    }


def serialize(tree: EntryTree) -> dict[str, Any]:
    """Document form of the tree. Soft-deleted subtrees are dropped."""
    return {
        "next_id": tree.next_id,
        "root": _entry_to_dict(tree, tree.root),
    }


def _entry_from_dict(payload: dict[str, Any]) -> Entry:
    return new_entry(
        int(payload["id"]),
        str(payload["text"]),
        is_category=bool(payload["is_category"]),
        file_location=str(payload.get("file_location") or ""),
        time_created=int(payload["time_created"]),
        sort_type=_sort_type_from_int(payload.get("sort_type", 0)),
        sort_descending=bool(payload.get("sort_descending", False)),
    )


def _attach_children(tree: EntryTree, parent: Entry, payload: dict[str, Any]) -> Result[None, str]:
    for child_payload in payload.get("children") or []:
        child = _entry_from_dict(child_payload)
        added = tree.add_child(parent.id, child)
        if isinstance(added, Err):
            return Err(f"Entry {child.id}: {added.unwrap_err().message}")
        nested = _attach_children(tree, child, child_payload)
        if isinstance(nested, Err):
            return nested
    return Ok(None)


def deserialize(data: Any) -> Result[EntryTree, str]:
    if not isinstance(data, dict):
        return Err("Note document must be a JSON object.")
    try:
        root_payload = data["root"]
        root = _entry_from_dict(root_payload)
        root.is_open = True
        tree = EntryTree(root, next_id=int(data["next_id"]))
        attached = _attach_children(tree, root, root_payload)
    except (KeyError, TypeError, ValueError) as exc:
        return Err(f"Malformed note document: {exc!r}")
    if isinstance(attached, Err):
        return Err(f"Malformed note document: {attached.unwrap_err()}")
    highest = max(entry.id for entry in tree.iter_entries())
    if tree.next_id <= highest:
        return Err(f"Malformed note document: next_id {tree.next_id} is not above the highest id {highest}")
    return Ok(tree)


def dumps(tree: EntryTree) -> str:
    return json.dumps(serialize(tree), indent=2)


def loads(text: str) -> Result[EntryTree, str]:
    try:
        data = json.loads(text)
    except ValueError as exc:
        return Err(f"Malformed note document: {exc}")
    return deserialize(data)
