# config/loader.py
from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict

import tomllib

from gst_core.errors import ConfigError

CONFIG_ENV_VAR = "GROCERY_CONFIG"
REPO_CONFIG = Path(__file__).resolve().parents[1] / "config.toml"


def default_config_path() -> Path:
    """$GROCERY_CONFIG if set, else config.toml at the repo root."""
    env = os.environ.get(CONFIG_ENV_VAR)
    return Path(env) if env else REPO_CONFIG


def load_config(config_path: Path | None = None) -> Dict[str, Any]:
    path = Path(config_path) if config_path is not None else default_config_path()
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    """A config table, or {} when absent. Non-table values are a ConfigError."""
    value = cfg.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table, got {type(value).__name__}")
    return value
