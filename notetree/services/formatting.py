from __future__ import annotations

from dataclasses import dataclass

from notetree.models.entry import Entry
from notetree.services.paths import display_name
from notetree.services.tree import EntryTree

OPEN_MARKER = "[-]"
CLOSED_MARKER = "[+]"


@dataclass(slots=True, frozen=True)
class DisplayRow:
    entry_id: int
    label: str


def entry_label(tree: EntryTree, entry: Entry) -> str:
    marker = ""
    if tree.visible_children(entry.id):
        marker = OPEN_MARKER if entry.is_open else CLOSED_MARKER
    label = f"{marker}{entry.text}"
    if entry.file_location:
        label += f": {display_name(entry.file_location)}"
    return label


def display_rows(tree: EntryTree, indent_width: int = 4) -> list[DisplayRow]:
    """One row per visible entry, indented by depth below the root."""
    return [
        DisplayRow(
            entry_id=entry.id,
            label=" " * (indent_width * tree.depth_of(entry.id)) + entry_label(tree, entry),
        )
        for entry in tree.flatten()
    ]
