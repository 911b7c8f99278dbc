from __future__ import annotations

import json
import logging

from result import Err, Ok, Result

from notetree.config.defaults import default_config
from notetree.config.schema import AppConfig, from_dict
from notetree.keybinds.handlers import HandlerId
from notetree.services.fs import DEFAULT_FS, FileSystem

logger = logging.getLogger(__name__)

CONFIG_PATH = "~/.config/notetree/config.json"

_HANDLER_NAMES = frozenset(handler_id.value for handler_id in HandlerId)


def _known_keybindings(keybindings: dict[str, str]) -> dict[str, str]:
    """Keep only overrides that name a real handler on a non-empty key sequence."""
    known: dict[str, str] = {}
    for keys, name in keybindings.items():
        if not keys:
            logger.warning("config: dropping binding for %r with an empty key sequence", name)
        elif name not in _HANDLER_NAMES:
            logger.warning("config: dropping binding %r, no handler named %r", keys, name)
        else:
            known[keys] = name
    return known


def load_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[AppConfig, str]:
    """Read the user config; a missing file means defaults, a broken one an ``Err``."""
    resolved = path or fs.expanduser(CONFIG_PATH)
    if not fs.exists(resolved):
        return Ok(default_config())

    try:
        payload = json.loads(fs.read_text(resolved))
    except (OSError, ValueError) as exc:
        return Err(f"Failed reading config at {resolved}: {exc}.")
    if not isinstance(payload, dict):
        return Err(f"Config at {resolved} must be a JSON object.")
    if "keybindings" in payload and not isinstance(payload["keybindings"], dict):
        return Err(f"Config at {resolved}: keybindings must map key sequences to handler names.")

    try:
        config = from_dict(payload, default_config())
    except (TypeError, ValueError) as exc:
        return Err(f"Invalid value in config at {resolved}: {exc}.")
    config.keybindings = _known_keybindings(config.keybindings)
    return Ok(config)


def sample_config_json() -> str:
    sample = default_config()
    sample.keybindings = {"x": HandlerId.DELETE_ENTRY.value}
    return json.dumps(sample.to_dict(), indent=2)
