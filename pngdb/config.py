"""Configuration from environment variables and YAML import files.

Environment variables:
    PNGDB_FILE: Default database path (default: data/database.png)
    PNGDB_WIDTH: Default width for new databases (default: 256)
    PNGDB_HEIGHT: Default height for new databases (default: 256)
    PNGDB_LOG_LEVEL: Logging level (default: WARNING)
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_FILE = "data/database.png"
DEFAULT_DIMENSION = 256


class ConfigError(Exception):
    """Raised when an import config file is missing or malformed."""
    pass


@dataclass
class Settings:
    file: str = DEFAULT_FILE
    width: int = DEFAULT_DIMENSION
    height: int = DEFAULT_DIMENSION
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            file=os.environ.get("PNGDB_FILE", DEFAULT_FILE),
            width=_int_env("PNGDB_WIDTH", DEFAULT_DIMENSION),
            height=_int_env("PNGDB_HEIGHT", DEFAULT_DIMENSION),
            log_level=os.environ.get("PNGDB_LOG_LEVEL", "WARNING"),
        )


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def load_import_config(config_path: str | Path) -> dict:
    """Load a bulk import description from YAML.

    Expected layout::

        width: 64          # optional, used when creating a new file
        height: 64
        schema:            # optional
          name: string
        rows:
          - {x: 1, y: 2, data: {name: Alice}}
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    if not config:
        raise ConfigError(f"Empty config file: {config_path}")
    if not isinstance(config, dict) or "rows" not in config:
        raise ConfigError("Config file must contain 'rows' key")
    if not isinstance(config["rows"], list):
        raise ConfigError("'rows' must be a list")

    for key in ("width", "height"):
        if key in config and (not _is_int(config[key]) or config[key] < 1):
            raise ConfigError(f"'{key}' must be a positive integer")

    for i, entry in enumerate(config["rows"]):
        if not isinstance(entry, dict) or not {"x", "y", "data"} <= entry.keys():
            raise ConfigError(f"Row {i} must have 'x', 'y' and 'data' keys")
        if not _is_int(entry["x"]) or not _is_int(entry["y"]):
            raise ConfigError(f"Row {i} coordinates must be integers")

    schema = config.get("schema") or {}
    if not isinstance(schema, dict):
        raise ConfigError("'schema' must be a mapping of field name to type")
    config["schema"] = schema
    return config


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
