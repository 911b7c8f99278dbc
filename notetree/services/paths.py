from __future__ import annotations

from pathlib import Path


def default_root_location() -> str:
    return str(Path.cwd()).rstrip("/") + "/"


def resolve_file_location(location: str, base_location: str, *, is_category: bool) -> str:
    """Normalize a user supplied location.

    Category locations always end with ``/`` and note locations never do.
    Relative locations are joined onto the owning category's location.
    """
    if not location:
        return ""
    if is_category and not location.endswith("/"):
        location = f"{location}/"
    elif not is_category and location.endswith("/"):
        location = location[:-1]

    if location.startswith("/"):
        return location
    return f"{base_location}{location}"


def display_name(file_location: str) -> str:
    """Last path component; a category keeps its trailing slash."""
    if not file_location:
        return ""
    index = file_location[:-1].rfind("/")
    return file_location[index + 1 :]
