"""
utils/config.py
YAML configuration loader.

Missing keys fall back to DEFAULT_CONFIG; a missing file is not an error.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from utils.constants import DEFAULT_MAX_CONCURRENT, DEFAULT_TIMEOUT_MS


class ConfigError(ValueError):
    """Raised when the config file exists but cannot be used."""


DEFAULT_CONFIG: Dict[str, Any] = {
    "scan": {
        "max_concurrent": DEFAULT_MAX_CONCURRENT,
        "timeout_ms":     DEFAULT_TIMEOUT_MS,
    },
    "web": {
        "host":           "127.0.0.1",
        "port":           8080,
        "allow_shutdown": False,
    },
    "log_level": "INFO",
}


def _merge(base: dict, override: dict) -> dict:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_config(path: Union[str, Path, None] = None) -> Dict[str, Any]:
    """Load YAML config from path merged over DEFAULT_CONFIG."""
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError:
        return copy.deepcopy(DEFAULT_CONFIG)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed config {path}: {exc}") from exc

    if raw is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Config {path} must be a mapping, got {type(raw).__name__}"
        )
    return _merge(DEFAULT_CONFIG, raw)


__all__ = ["ConfigError", "DEFAULT_CONFIG", "load_config"]
