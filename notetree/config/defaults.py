from __future__ import annotations

import os

from notetree.config.schema import AppConfig


def default_config() -> AppConfig:
    return AppConfig(editor=os.environ.get("EDITOR") or "vim")
