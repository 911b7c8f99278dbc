from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class AppConfig:
    editor: str = "vim"
    indent_width: int = 4
    title: str = "Notes"
    keybindings: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "editor": self.editor,
            "indentWidth": self.indent_width,
            "title": self.title,
            "keybindings": dict(self.keybindings),
        }


def from_dict(data: dict[str, Any], defaults: AppConfig) -> AppConfig:
    keybindings = data.get("keybindings", defaults.keybindings)
    if not isinstance(keybindings, dict):
        keybindings = defaults.keybindings

    return AppConfig(
        editor=str(data.get("editor", defaults.editor)),
        indent_width=max(1, int(data.get("indentWidth", defaults.indent_width))),
        title=str(data.get("title", defaults.title)),
        keybindings={str(keys): str(name) for keys, name in keybindings.items()},
    )
