# a4blend/config.py
import json
import os
from pathlib import Path

from .logging_config import ConfigurationError, get_logger

logger = get_logger("config")

CONFIG_FILE = Path(os.environ.get("A4BLEND_CONFIG", "config.json"))

DEFAULT_CONFIG = {
    "music_dir": "songs",
    "extensions": [".mp3", ".flac", ".wav", ".ogg", ".m4a"],
    "placeholder_cover": "assets/default.jpg",
    "fallback_cover": "assets/default.png",
    "volume": 1.0,
    "log_level": "INFO",
    "log_file": None,
    "poll_interval": 0.25,
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _read_file(path):
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Config file {path} no good ({e}), using defaults")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Config file {path} is not a JSON object, using defaults")
        return {}
    return data


def load_config(path=None):
    """Return the defaults with the config file merged over them."""
    cfg = dict(DEFAULT_CONFIG)
    cfg.update(_read_file(Path(path) if path else CONFIG_FILE))
    return cfg


def save_config(new_cfg: dict, path=None):
    path = Path(path) if path else CONFIG_FILE
    cfg = _read_file(path)  # always start with existing config
    cfg.update(new_cfg)     # merge new values
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(cfg, f, indent=2)
    except OSError as e:
        raise ConfigurationError(f"Failed to save configuration to {path}: {e}") from e
    logger.info(f"Configuration saved to {path}")


def _number_issue(cfg, key, low=None, high=None, positive=False):
    value = cfg.get(key)
    if isinstance(value, bool):
        return f"{key} is not a number: {value!r}"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return f"{key} is not a number: {value!r}"
    if positive and not number > 0:
        return f"{key} must be positive, got {number}"
    if low is not None and not low <= number <= high:
        return f"{key} must be {low}-{high}, got {number}"
    return None


def _issues_by_key(cfg):
    issues = {}
    level = cfg.get("log_level")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        issues["log_level"] = f"Invalid log level: {level!r}"
    for key, issue in (
        ("volume", _number_issue(cfg, "volume", 0.0, 1.0)),
        ("poll_interval", _number_issue(cfg, "poll_interval", positive=True)),
    ):
        if issue:
            issues[key] = issue
    exts = cfg.get("extensions")
    if not exts or not isinstance(exts, (list, tuple)) or not all(isinstance(e, str) for e in exts):
        issues["extensions"] = f"No usable audio extensions configured: {exts!r}"
    music_dir = cfg.get("music_dir")
    if not music_dir or not isinstance(music_dir, str):
        issues["music_dir"] = f"Music folder must be a path, got {music_dir!r}"
    for key in ("placeholder_cover", "fallback_cover"):
        if not isinstance(cfg.get(key), str):
            issues[key] = f"{key} must be a path, got {cfg.get(key)!r}"
    log_file = cfg.get("log_file")
    if log_file is not None and not isinstance(log_file, str):
        issues["log_file"] = f"log_file must be a path or null, got {log_file!r}"
    return issues


def validate_config(cfg: dict):
    """Return a list of human readable problems, empty when the config is usable."""
    issues = list(_issues_by_key(cfg).values())
    if issues:
        logger.warning(f"Configuration validation issues: {issues}")
    return issues


def sanitize_config(cfg: dict):
    """Copy of ``cfg`` with every invalid key put back to its default."""
    issues = _issues_by_key(cfg)
    clean = dict(cfg)
    for key, issue in issues.items():
        logger.warning(f"{issue}; using default {DEFAULT_CONFIG[key]!r}")
        clean[key] = DEFAULT_CONFIG[key]
    return clean
