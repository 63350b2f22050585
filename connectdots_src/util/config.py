"""Read settings from the yaml configuration file at the repository root."""

import logging
import os
from pathlib import Path

import yaml

BASE = Path(__file__).resolve().parent.parent
CONFIG_PATH = Path(os.environ.get("CONNECTDOTS_CONFIG", BASE.parent / "config.yaml"))


def load_config(path: Path = CONFIG_PATH) -> dict:
    """Parse the yaml file at path. A missing or empty file gives an empty mapping."""
    if not path.is_file():
        return {}
    return yaml.safe_load(path.read_text()) or {}


config: dict = load_config()


def get_key(key: str, default: object = None) -> object:
    """
    Look up a setting by dotted key, e.g. ``levels.max_board_size``.

    Args:
        key (str): Dotted path into the nested configuration.
        default: Returned when any part of the path is missing.

    Returns:
        The configured value, or default.
    """
    value = config
    for k in key.split("."):
        if not isinstance(value, dict) or k not in value:
            return default
        value = value[k]
    return value


def get_int(key: str, default: int) -> int:
    """Look up a setting that must be an integer."""
    return int(get_key(key, default))


def is_verbose() -> bool:
    """Return True when ``logging.verbose`` asks for debug output."""
    return bool(get_key("logging.verbose", False))


def configure_logging() -> None:
    """Set up the root logger from the 'logging' section."""
    level = logging.DEBUG if is_verbose() else str(get_key("logging.level", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    for section, values in config.items():
        print(f"{section}: {values}")
