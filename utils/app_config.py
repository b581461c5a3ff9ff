"""Bootstrap configuration. Zero imports from the rest of the app.

Stores settings that must be known before the Flask app and the DB exist
(db_path, secret_key, ...). Config lives in ~/.pennywise/config.json unless
PENNYWISE_CONFIG points elsewhere.
"""
import json
import os
import secrets
from pathlib import Path

CONFIG_ENV_VAR = "PENNYWISE_CONFIG"
DEFAULT_CONFIG_FILE = Path.home() / ".pennywise" / "config.json"

DEFAULTS = {
    "db_path": "pennywise.db",
    "demo_user": False,
    "recurring_catch_up": False,
    "log_level": "INFO",
    "host": "127.0.0.1",
    "port": 5000,
}


def config_file() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else DEFAULT_CONFIG_FILE


def load_config() -> dict:
    """Returns {} on a missing, corrupt or non-object file. Never raises."""
    try:
        with open(config_file(), "r", encoding="utf-8") as f:
            data = json.load(f)
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    path = config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, path)
    except Exception:
        try:
            tmp.unlink(missing_ok=True)
        except Exception:
            pass


def get_settings() -> dict:
    """DEFAULTS overlaid with whatever the config file holds."""
    settings = dict(DEFAULTS)
    settings.update(load_config())
    return settings


def get_secret_key() -> str:
    """Return the persisted secret key, generating and saving one on first use."""
    config = load_config()
    key = config.get("secret_key")
    if not key:
        key = secrets.token_hex(32)
        config["secret_key"] = key
        save_config(config)
    return key
