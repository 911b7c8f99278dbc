from __future__ import annotations

from enum import Enum, IntEnum


class SortType(IntEnum):
    NAME = 0
    FILE = 1
    TIME = 2


class ModeKind(str, Enum):
    DEFAULT = "default"
    MULTIKEY = "multikey"
    MOVE = "move"
    WILDCARD = "wildcard"


class TreeErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
