"""Constants file."""

import os
import sys
from pathlib import Path

APP_NAME = "decklist"
APP_VERSION = "0.3"
USER_AGENT = f"{APP_NAME}/{APP_VERSION}"

BULK_DATA_URL = "https://api.scryfall.com/bulk-data/oracle-cards"
REQUEST_TIMEOUT = 5  # Seconds, applies to the whole request
CHUNK_SIZE = 65536
CATALOG_MARKER = "oracle-cards"

CONFIG_FILE_NAME = "config.toml"
MISSING_FILE_PREFIX = "missing_"

DEFAULT_AGE_LIMIT_DAYS = 7
DEFAULT_RETENTION = 3
MIN_AGE_LIMIT_DAYS = 1
MAX_AGE_LIMIT_DAYS = 365
MIN_RETENTION = 1
MAX_RETENTION = 50

TICK_SECONDS = 0.1


def _platform_roots() -> tuple[Path, Path]:
    """Return the (config, data) roots for the running platform."""
    override = os.getenv("DECKLIST_HOME")
    if override:
        root = Path(override).expanduser()
        return root / "config", root / "data"
    home = Path.home()
    if sys.platform.startswith("win"):
        roaming = Path(os.getenv("APPDATA") or home / "AppData" / "Roaming")
        local = Path(os.getenv("LOCALAPPDATA") or home / "AppData" / "Local")
        return roaming / APP_NAME / "config", local / APP_NAME / "data"
    if sys.platform == "darwin":
        support = home / "Library" / "Application Support" / APP_NAME
        return support, support
    config_home = Path(os.getenv("XDG_CONFIG_HOME") or home / ".config")
    data_home = Path(os.getenv("XDG_DATA_HOME") or home / ".local" / "share")
    return config_home / APP_NAME, data_home / APP_NAME


CONFIG_DIR, DATA_DIR = _platform_roots()
LOGS_DIR = DATA_DIR / "logs"
CONFIG_FILE = CONFIG_DIR / CONFIG_FILE_NAME

__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "USER_AGENT",
    "BULK_DATA_URL",
    "REQUEST_TIMEOUT",
    "CHUNK_SIZE",
    "CATALOG_MARKER",
    "CONFIG_FILE_NAME",
    "MISSING_FILE_PREFIX",
    "DEFAULT_AGE_LIMIT_DAYS",
    "DEFAULT_RETENTION",
    "MIN_AGE_LIMIT_DAYS",
    "MAX_AGE_LIMIT_DAYS",
    "MIN_RETENTION",
    "MAX_RETENTION",
    "TICK_SECONDS",
    "CONFIG_DIR",
    "DATA_DIR",
    "LOGS_DIR",
    "CONFIG_FILE",
]
