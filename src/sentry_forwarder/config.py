"""Configuration: the DSN mapping file and process settings."""

import logging
import os
from pathlib import Path

import yaml

from .errors import ConfigLoadError
from .mapping import DSNMapping

logger = logging.getLogger(__name__)

# Process settings
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
FORWARD_TIMEOUT = float(os.environ.get("FORWARD_TIMEOUT", "30"))

DEFAULT_CONFIG_PATH = "config.yaml"


def config_path() -> Path:
    """Where the mapping file lives. Read at call time so tests can override it."""
    return Path(os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH))


def load_config(path: str | Path | None = None) -> tuple[DSNMapping, ...]:
    """Load the dsn_mapping list from a YAML file.

    Expected shape:

        dsn_mapping:
          - old: https://OLDKEY@old.example.com/123
            new: https://NEWKEY@new.example.com/456

    A missing dsn_mapping key means no mappings. Entries aren't validated
    beyond shape; a DSN that doesn't parse just never matches.
    """
    path = Path(path) if path is not None else config_path()

    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigLoadError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"{path}: top level must be a mapping")

    entries = data.get("dsn_mapping") or []
    if not isinstance(entries, list):
        raise ConfigLoadError(f"{path}: dsn_mapping must be a list")

    mappings = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigLoadError(f"{path}: dsn_mapping[{idx}] must be a mapping with old/new")
        mappings.append(
            DSNMapping(
                old=str(entry.get("old") or ""),
                new=str(entry.get("new") or ""),
            )
        )

    logger.info(f"Loaded {len(mappings)} DSN mappings from {path}")
    return tuple(mappings)
