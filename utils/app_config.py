"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Stores user preferences that must be known before opening the DB (db_folder)
and where backups are written (backup_folder).
Config lives in ~/.budget_tracker/config.json to avoid a bootstrapping problem.
"""
import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".budget_tracker"
CONFIG_FILE = CONFIG_DIR / "config.json"
DEFAULT_BACKUP_DIR = CONFIG_DIR / "backups"


def load_config() -> dict:
    """Returns {} on missing or corrupt file; never raises."""
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable config file %s", CONFIG_FILE)
        return {}
    return config if isinstance(config, dict) else {}


def save_config(config: dict) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    tmp = CONFIG_FILE.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, CONFIG_FILE)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def _set(key: str, value: str | None) -> None:
    config = load_config()
    if value is None:
        config.pop(key, None)
    else:
        config[key] = value
    save_config(config)


def get_db_folder() -> str | None:
    """Return config["db_folder"] or None if not set."""
    return load_config().get("db_folder")


def set_db_folder(path: str | None) -> None:
    _set("db_folder", path)


def get_backup_folder() -> str:
    """Return config["backup_folder"], defaulting to ~/.budget_tracker/backups."""
    return load_config().get("backup_folder") or str(DEFAULT_BACKUP_DIR)


def set_backup_folder(path: str | None) -> None:
    _set("backup_folder", path)
