"""Persistent JSON config helpers.

Stores default CLI settings (worker count, wrap width, color mode, theme,
output format, ignore patterns, metadata prefix). Malformed or missing
config falls back to built-in defaults.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "canopy"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

COLOR_MODES = ("auto", "always", "never")
OUTPUT_FORMATS = ("tree", "json", "markdown")
PERSISTED_KEYS = ("jobs", "wrap", "color", "theme", "format", "ignore", "prefix")


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> bool:
    """Persist config data as pretty-printed JSON; return whether it was written."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError):
        return False
    return True


def _non_negative_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 0 else None


def _choice(value: object, choices: tuple[str, ...]) -> str | None:
    if isinstance(value, str) and value in choices:
        return value
    return None


def load_defaults() -> dict[str, object]:
    """Return validated persisted defaults; invalid-typed values are dropped."""
    data = load_config()
    defaults: dict[str, object] = {}

    for key in ("jobs", "wrap"):
        number = _non_negative_int(data.get(key))
        if number is not None:
            defaults[key] = number

    color = _choice(data.get("color"), COLOR_MODES)
    if color is not None:
        defaults["color"] = color

    output_format = _choice(data.get("format"), OUTPUT_FORMATS)
    if output_format is not None:
        defaults["format"] = output_format

    for key in ("theme", "prefix"):
        value = data.get(key)
        if isinstance(value, str):
            defaults[key] = value

    ignore = data.get("ignore")
    if isinstance(ignore, list) and all(isinstance(item, str) for item in ignore):
        defaults["ignore"] = list(ignore)

    return defaults


def save_defaults(values: dict[str, object]) -> bool:
    """Merge ``values`` for known keys into the persisted config."""
    config = load_config()
    for key in PERSISTED_KEYS:
        if key in values and values[key] is not None:
            config[key] = values[key]
    return save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "COLOR_MODES",
    "OUTPUT_FORMATS",
    "PERSISTED_KEYS",
    "load_config",
    "save_config",
    "load_defaults",
    "save_defaults",
]
