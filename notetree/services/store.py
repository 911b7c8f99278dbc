from __future__ import annotations

import logging
from dataclasses import dataclass

from result import Err, Ok, Result

from notetree.services import codec
from notetree.services.fs import DEFAULT_FS, FileSystem
from notetree.services.tree import EntryTree, fresh_tree

logger = logging.getLogger(__name__)

MISSING_FILE_MESSAGE = "No note file found. One will be created"


@dataclass(slots=True, frozen=True)
class LoadOutcome:
    tree: EntryTree
    message: str | None = None


def load_tree(path: str, fs: FileSystem = DEFAULT_FS, root_location: str | None = None) -> LoadOutcome:
    """Read a note document, falling back to an empty tree when it cannot be used."""
    resolved = fs.expanduser(path)
    if not fs.exists(resolved):
        logger.info("note file %s does not exist", resolved)
        return LoadOutcome(fresh_tree(root_location), MISSING_FILE_MESSAGE)

    try:
        text = fs.read_text(resolved)
    except OSError as exc:
        logger.warning("failed reading %s: %s", resolved, exc)
        return LoadOutcome(fresh_tree(root_location), f"Could not read {resolved}: {exc}. Starting empty.")

    result = codec.loads(text)
    if isinstance(result, Err):
        logger.warning("discarding %s: %s", resolved, result.unwrap_err())
        return LoadOutcome(fresh_tree(root_location), f"{result.unwrap_err()}. Starting empty.")
    return LoadOutcome(result.unwrap())


def save_tree(tree: EntryTree, path: str, fs: FileSystem = DEFAULT_FS) -> Result[None, str]:
    resolved = fs.expanduser(path)
    try:
        fs.write_text(resolved, codec.dumps(tree))
    except OSError as exc:
        logger.warning("failed writing %s: %s", resolved, exc)
        return Err(f"Failed writing notes to {resolved}: {exc}.")
    logger.debug("saved %d entries to %s", len(tree), resolved)
    return Ok(None)
