"""Configuration loader — YAML file + env override."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from lutobot.core.config.schema import Config

# store.* keys holding file paths; relative values are anchored to the YAML file
_STORE_PATH_KEYS = ("path", "seed_path")


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Load configuration.

    Resolution order for config file:
        1. Explicit ``config_path`` argument
        2. ``LUTOBOT_CONFIG`` env variable
        3. ``./config.yaml`` in cwd

    Values priority (handled by pydantic-settings):
        env vars  >  .env file  >  YAML  >  defaults

    Relative ``store.path`` / ``store.seed_path`` values in the YAML file are
    resolved against the directory containing that file.
    """
    path = _resolve_path(config_path)
    data = _load_yaml(path)
    if path is not None and data:
        _anchor_store_paths(data, path.parent)
        logger.debug(f"Config loaded from {path}")
    return Config(**data)


def _resolve_path(config_path: str | Path | None = None) -> Path | None:
    if config_path:
        return Path(config_path)

    env = os.environ.get("LUTOBOT_CONFIG")
    if env:
        return Path(env)

    default = Path("config.yaml")
    return default if default.exists() else None


def _load_yaml(path: Path | None) -> dict[str, Any]:
    """Load YAML file, return empty dict if not found."""
    if not path or not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _anchor_store_paths(data: dict[str, Any], base_dir: Path) -> None:
    store = data.get("store")
    if not isinstance(store, dict):
        return
    for key in _STORE_PATH_KEYS:
        value = store.get(key)
        if value and not Path(value).is_absolute():
            store[key] = str(base_dir / value)
