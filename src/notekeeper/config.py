"""
Configuration management for Notekeeper.

Uses XDG base directories:
- Config: ~/.config/notekeeper/config.toml
- Data: ~/notekeeper/ (the notebook database)
"""

import logging
import os
from pathlib import Path
from typing import Any

# XDG defaults
DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_DATA_HOME = Path.home() / "notekeeper"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/notekeeper)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", DEFAULT_CONFIG_HOME))
    return base / "notekeeper"


def get_notekeeper_home() -> Path:
    """Get the data directory (~/notekeeper or NOTEKEEPER_HOME)."""
    if env_home := os.environ.get("NOTEKEEPER_HOME"):
        return Path(env_home)
    return DEFAULT_DATA_HOME


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / "config.toml"


def get_db_path() -> Path:
    """Get the path to notekeeper.db."""
    return get_notekeeper_home() / "notekeeper.db"


def ensure_dirs() -> None:
    """Ensure all required directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_notekeeper_home().mkdir(parents=True, exist_ok=True)


def load_config() -> dict[str, Any]:
    """
    Load configuration from config.toml.

    Sections in the file are merged over the defaults, so a config that
    only sets [logging] still gets the default [storage] section.
    """
    config = get_default_config()
    config_path = get_config_path()

    if not config_path.exists():
        return config

    # Lazy import tomli only when needed
    import tomli

    with open(config_path, "rb") as f:
        user_config = tomli.load(f)

    for section, values in user_config.items():
        if isinstance(values, dict) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values
    return config


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "storage": {
            "backend": "sqlite",  # or "memory"
            "path": str(get_db_path()),
        },
        "notes": {
            "sort_order": "desc",
        },
        "logging": {
            "level": "WARNING",
        },
    }


def setup_logging(config: dict[str, Any] | None = None) -> None:
    """Configure root logging for a front end (CLI or MCP server)."""
    config = config or load_config()
    level_name = os.environ.get("NOTEKEEPER_LOG_LEVEL") or config.get("logging", {}).get("level", "WARNING")
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.WARNING

    logging.basicConfig(format=LOG_FORMAT, level=level)
