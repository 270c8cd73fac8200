"""
Settings Module for aoc-runner

Resolves the config and data directories and provides persistent storage
for user preferences using JSON. Settings are stored in settings.json in
the config directory.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

APP_NAME = "aoc-runner"

# Environment overrides for the directories and the log level
CONFIG_ENV = "AOC_RUNNER_CONFIG"
DATA_ENV = "AOC_RUNNER_DATA"
LOG_LEVEL_ENV = "AOC_RUNNER_LOG_LEVEL"

SETTINGS_FILENAME = "settings.json"
LOG_FILENAME = "aoc-runner.log"

# Default settings
DEFAULT_SETTINGS: Dict[str, Any] = {
    "tick_rate_ms": 250,
    "input_dir": None,  # None means <data dir>/inputs
    "last_puzzle": None,
}


def get_config_dir() -> Path:
    """
    Resolve the configuration directory.

    Returns:
        $AOC_RUNNER_CONFIG if set, else ~/.config/aoc-runner
    """
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override)
    return Path.home() / ".config" / APP_NAME


def get_data_dir() -> Path:
    """
    Resolve the data directory (logs and puzzle inputs).

    Returns:
        $AOC_RUNNER_DATA if set, else ~/.local/share/aoc-runner
    """
    override = os.environ.get(DATA_ENV)
    if override:
        return Path(override)
    return Path.home() / ".local" / "share" / APP_NAME


def get_input_dir(settings: Dict[str, Any]) -> Path:
    """Directory holding <puzzle_id>.txt input files."""
    if settings.get("input_dir"):
        return Path(settings["input_dir"]).expanduser()
    return get_data_dir() / "inputs"


def settings_file(config_dir: Optional[Path] = None) -> Path:
    return (config_dir or get_config_dir()) / SETTINGS_FILENAME


def load_settings(config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings from settings.json.

    Args:
        config_dir: Directory to read from (default: get_config_dir())

    Returns:
        Settings dictionary. Returns defaults if file missing or invalid.
    """
    path = settings_file(config_dir)
    if not path.exists():
        logger.debug("Settings file not found, using defaults")
        return DEFAULT_SETTINGS.copy()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            settings = json.load(f)
        if not isinstance(settings, dict):
            raise ValueError("settings root is not an object")

        # Merge with defaults to handle missing keys
        result = DEFAULT_SETTINGS.copy()
        result.update(settings)
        logger.debug(f"Settings loaded: {result}")
        return result

    except (ValueError, IOError) as e:
        logger.warning(f"Failed to load settings: {e}, using defaults")
        return DEFAULT_SETTINGS.copy()


def save_settings(settings: Dict[str, Any], config_dir: Optional[Path] = None) -> None:
    """
    Save settings to settings.json.

    Args:
        settings: Settings dictionary to save
        config_dir: Directory to write to (default: get_config_dir())
    """
    path = settings_file(config_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2)
        logger.debug(f"Settings saved: {settings}")
    except IOError as e:
        logger.error(f"Failed to save settings: {e}")
