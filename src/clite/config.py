"""User settings.

Settings live in a TOML file looked up at, in order, an explicit path, the
``CLITE_CONFIG`` environment variable, and ``~/.config/clite/config.toml``.
Whatever the file provides is merged onto the defaults below; a missing or
broken file leaves the defaults in place.
"""
from __future__ import annotations

import copy
import logging
import os
from typing import Any

import toml

from .constants import CLITE_MESSAGE_TIMEOUT, CLITE_QUIT_TIMES, CLITE_TAB_STOP

log = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "editor": {
        "tab_stop": CLITE_TAB_STOP,
        "quit_times": CLITE_QUIT_TIMES,
        "message_timeout": CLITE_MESSAGE_TIMEOUT,
    },
    "logging": {
        "file": "",
        "level": "WARNING",
        "keytrace": False,
    },
}


def deep_merge(base: dict[Any, Any], override: dict[Any, Any]) -> dict[Any, Any]:
    """Return a new dict with ``override`` merged recursively onto ``base``."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def config_path() -> str:
    env = os.environ.get("CLITE_CONFIG")
    if env:
        return env
    return os.path.join(os.path.expanduser("~"), ".config", "clite", "config.toml")


def load_config(path: str | None = None) -> dict[str, Any]:
    path = path or config_path()
    user_config: dict[str, Any] = {}
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as fh:
                user_config = toml.loads(fh.read())
            log.debug("loaded user config from %s", path)
        except toml.TomlDecodeError as exc:
            log.error("TOML parse error in %s: %s - using defaults", path, exc)
        except OSError as exc:
            log.error("cannot read %s: %s - using defaults", path, exc)

    config = deep_merge(DEFAULT_CONFIG, user_config)
    for section, defaults in DEFAULT_CONFIG.items():
        if not isinstance(config.get(section), dict):
            log.warning("invalid [%s] section, using defaults", section)
            config[section] = copy.deepcopy(defaults)
    editor = config["editor"]
    for key, default in DEFAULT_CONFIG["editor"].items():
        value = editor.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            log.warning("invalid editor.%s = %r, using %r", key, value, default)
            editor[key] = default
    return config
