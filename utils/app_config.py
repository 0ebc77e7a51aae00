"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Stores user preferences that must be known before opening the DB (db_folder,
log_level) plus a few UI conveniences (appearance_mode, last_email).
Config lives in ~/.fintrack/config.json to avoid a bootstrapping problem.
"""
import json
import os
from pathlib import Path

CONFIG_DIR = Path.home() / ".fintrack"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULTS = {
    "db_folder": None,
    "log_level": "INFO",
    "appearance_mode": "system",
    "last_email": "",
}


def load_config(path: Path | None = None) -> dict:
    """Returns {} on missing or corrupt file — never raises."""
    try:
        with open(path or CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}
    except Exception:
        return {}


def save_config(config: dict, path: Path | None = None) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    target = path or CONFIG_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, target)
    except Exception:
        try:
            tmp.unlink(missing_ok=True)
        except Exception:
            pass


def get_setting(key: str, path: Path | None = None):
    """Return config[key], falling back to DEFAULTS."""
    return load_config(path).get(key, DEFAULTS.get(key))


def set_setting(key: str, value, path: Path | None = None) -> None:
    """Update one key and save. None removes the key."""
    config = load_config(path)
    if value is None:
        config.pop(key, None)
    else:
        config[key] = value
    save_config(config, path)


def get_db_folder() -> str | None:
    return get_setting("db_folder")
