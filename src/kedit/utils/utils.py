# kedit/utils/utils.py
"""
kedit.utils.utils.py
====================

Configuration helpers for the kedit editor.

Key functionalities include:
- Automatic User Configuration: creates ``~/.config/kedit`` with a
  ``config.toml`` template and a ``.env`` file on first run.
- Robust Configuration Loading: starts from the embedded `DEFAULT_CONFIG` and
  recursively merges the user's ``~/.config/kedit/config.toml`` on top.

The editor can always start: a missing or corrupted user file only costs the
user their overrides, never the defaults.
"""

import copy
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from kedit.utils.logging_config import logger

APP_NAME = "kedit"

ENV_TEMPLATE = """# Environment for kedit, loaded before the editor starts.
# Set to 1 to record every decoded key event in keytrace.log.
KEDIT_KEYTRACE=0
"""

# Direct representation of the project's `config.toml`; the fallback that
# guarantees the editor can start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {"tab_stop": 8, "message_timeout": 5, "escape_timeout": 0.05},
    "colors": {
        "comment": 36, "mlcomment": 36, "keyword1": 33, "keyword2": 32,
        "string": 35, "number": 31, "match": 34, "default": 37,
    },
    "keybindings": {
        "find": "ctrl+f", "save_file": "ctrl+s", "quit": "ctrl+q", "redraw": "ctrl+l",
        "handle_backspace": ["backspace", "ctrl+h"], "handle_delete": "del",
        "handle_enter": "enter", "handle_home": "home", "handle_end": "end",
        "handle_page_up": "pageup", "handle_page_down": "pagedown",
        "handle_up": ["up"], "handle_down": ["down"], "handle_left": ["left"],
        "handle_right": ["right"], "cancel_operation": "esc",
    },
    "logging": {
        "file_level": "DEBUG", "console_level": "WARNING", "log_to_console": False,
        "separate_error_log": False, "file": "editor.log",
    },
}


# --- Helper Functions ---

def get_config_dir() -> Path:
    """Returns ``~/.config/kedit``."""
    return Path.home() / ".config" / APP_NAME


def get_project_root() -> Path:
    """Determines the project's root directory for finding template files."""
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(sys._MEIPASS)
    return Path(__file__).resolve().parents[3]


def ensure_user_config_exists(config_dir: Optional[Path] = None) -> None:
    """Creates the user config directory, config template and `.env` if missing."""
    config_dir = config_dir or get_config_dir()
    try:
        user_config_path = config_dir / "config.toml"
        user_env_path = config_dir / ".env"

        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            source_config_path = get_project_root() / "config.toml"
            if source_config_path.exists():
                shutil.copy(source_config_path, user_config_path)
                logger.info(f"Created user config template at: {user_config_path}")

        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")

    except OSError as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config(config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Loads the embedded defaults and merges the user's config.toml over them.
    """
    final_config = copy.deepcopy(DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    config_dir = config_dir or get_config_dir()
    ensure_user_config_exists(config_dir)

    user_config_path = config_dir / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except (OSError, toml.TomlDecodeError) as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
