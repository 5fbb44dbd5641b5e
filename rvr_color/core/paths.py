"""Centralized path constants for the color sensor package."""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT = PACKAGE_ROOT.parent

# Project-level defaults; a per-user file takes precedence when present.
CONFIG_PATH = PROJECT_ROOT / "config.txt"

_STATE_OVERRIDE = os.environ.get("RVR_COLOR_STATE_DIR")
USER_STATE_DIR = Path(_STATE_OVERRIDE).expanduser() if _STATE_OVERRIDE else Path.home() / ".rvr_color"
USER_CONFIG_PATH = USER_STATE_DIR / "config.txt"
LOGS_DIR = USER_STATE_DIR / "logs"
DEFAULT_LOG_FILE = LOGS_DIR / "rvr_color.log"


def resolve_config_path() -> Path:
    """Return the user config when it exists, else the project default."""
    if USER_CONFIG_PATH.exists():
        return USER_CONFIG_PATH
    return CONFIG_PATH


__all__ = [
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
    "CONFIG_PATH",
    "USER_STATE_DIR",
    "USER_CONFIG_PATH",
    "LOGS_DIR",
    "DEFAULT_LOG_FILE",
    "resolve_config_path",
]
