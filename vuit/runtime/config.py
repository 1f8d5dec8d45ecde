"""JSON configuration for colors and the external editor.

Looked up in ``~/.vuit/.vuitrc`` first, then in the platform config dir
(``<config dir>/vuit/config.json``). When neither exists the defaults apply.
Unlike the rest of the runtime, a malformed file is an error: the user asked
for something we cannot honor.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from platformdirs import user_config_dir

from ..colors import normalize_color_name
from ..errors import ConfigError

APP_NAME = "vuit"
CONFIG_FILENAME = "config.json"
VUITRC_PATH = Path.home() / ".vuit" / ".vuitrc"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_COLORSCHEME = "lightblue"
DEFAULT_HIGHLIGHT_COLOR = "blue"
DEFAULT_EDITOR = "vim"

_STRING_FIELDS = ("colorscheme", "highlight_color", "editor")


@dataclass(frozen=True)
class VuitConfig:
    colorscheme: str = DEFAULT_COLORSCHEME
    highlight_color: str = DEFAULT_HIGHLIGHT_COLOR
    editor: str = DEFAULT_EDITOR


def resolve_config_path(
    vuitrc_path: Path = VUITRC_PATH,
    default_path: Path = DEFAULT_CONFIG_PATH,
) -> Path | None:
    """Return the first existing config file, or ``None`` when there is none."""
    for candidate in (vuitrc_path, default_path):
        if candidate.is_file():
            return candidate
    return None


def parse_config(text: str) -> VuitConfig:
    """Decode config JSON; missing fields take defaults.

    Raises ``ValueError`` for malformed JSON, a non-object document, or a
    field that is present but not a string.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("top-level value must be an object")

    values: dict[str, str] = {}
    for field in _STRING_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if not isinstance(value, str):
            raise ValueError(f"field {field!r} must be a string")
        values[field] = value.strip()

    config = VuitConfig(**values)
    if not config.editor:
        config = VuitConfig(config.colorscheme, config.highlight_color, DEFAULT_EDITOR)
    return config


def load_config(path: Path | None = None) -> VuitConfig:
    """Load the user config, falling back to defaults when no file exists.

    ``path`` overrides the lookup; a missing override also yields defaults.
    Raises ``ConfigError`` when the file exists but cannot be read or parsed.
    """
    config_path = path if path is not None else resolve_config_path()
    if config_path is None or not config_path.exists():
        logger.debug("No config file found; using defaults")
        return VuitConfig()

    try:
        text = config_path.read_text(encoding="utf-8")
        config = parse_config(text)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise ConfigError(config_path, str(exc)) from exc

    for field in ("colorscheme", "highlight_color"):
        name = getattr(config, field)
        if normalize_color_name(name) != name.lower():
            logger.warning("Unknown color {!r} for {} in {}", name, field, config_path)
    logger.debug("Loaded config from {}", config_path)
    return config
