from __future__ import annotations

import time
from dataclasses import dataclass, field

from result import Result

from notetree.models.enums import SortType, TreeErrorCode

ROOT_ID = 0


@dataclass(slots=True)
class Entry:
    id: int
    is_category: bool
    text: str
    file_location: str = ""
    time_created: int = 0
    sort_type: SortType = SortType.NAME
    sort_descending: bool = False
    is_open: bool = False
    is_deleted: bool = False
    parent_id: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def can_add_child(self) -> bool:
        return self.is_category


@dataclass(slots=True, frozen=True)
class TreeError:
    code: TreeErrorCode
    entry_id: int | None
    message: str


EntryResult = Result[Entry, TreeError]


def new_entry(
    entry_id: int,
    text: str,
    *,
    is_category: bool = False,
    file_location: str = "",
    time_created: int | None = None,
    sort_type: SortType = SortType.NAME,
    sort_descending: bool = False,
    is_open: bool = False,
) -> Entry:
    """Build a detached entry. Creation time defaults to now, in whole seconds."""
    return Entry(
        id=entry_id,
        is_category=is_category,
        text=text,
        file_location=file_location,
        time_created=int(time.time()) if time_created is None else time_created,
        sort_type=sort_type,
        sort_descending=sort_descending,
        is_open=is_open,
    )


def not_found(entry_id: int | None, message: str = "Entry does not exist") -> TreeError:
    return TreeError(code=TreeErrorCode.NOT_FOUND, entry_id=entry_id, message=message)


def invalid_transition(entry_id: int | None, message: str) -> TreeError:
    return TreeError(code=TreeErrorCode.INVALID_TRANSITION, entry_id=entry_id, message=message)
